from __future__ import annotations

import typer

from ern.cli.commands._helpers import descriptor_arg, exit_on_error, fail
from ern.cli.context import build_context
from ern.core.result import Err
from ern.services.cauldron.selection import choose_descriptor

container_app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Generate and publish containers.",
)


@container_app.command("regen")
def regen(
    descriptor: str | None = typer.Argument(
        None, help="name:platform:version (prompted if omitted)"
    ),
    container_version: str | None = typer.Option(
        None, "--container-version", "-v", help="Version of the new container"
    ),
) -> None:
    """Regenerate and publish the container of a native application version."""
    ctx = build_context()
    if descriptor is not None:
        target = descriptor_arg(descriptor, ctx)
    else:
        chosen = choose_descriptor(ctx.tm.store, ctx.decisions, only_non_released=True)
        if isinstance(chosen, Err):
            fail(chosen.error, ctx)
        target = chosen.value

    result = ctx.operations().regenerate_container(target, container_version=container_version)
    exit_on_error(result, ctx)
