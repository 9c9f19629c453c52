from __future__ import annotations

from typing import cast

import typer

from ern.cli.commands._helpers import descriptor_arg, exit_on_error, fail
from ern.cli.context import CLIContext, build_context
from ern.core.errors import ErrorCode
from ern.core.result import Err
from ern.services.cauldron.descriptor import PLATFORMS, NativeApplicationDescriptor, Platform
from ern.services.cauldron.resolver import match_against_range
from ern.services.cauldron.selection import choose_descriptor

cauldron_app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Query and update the cauldron.",
)
add_app = typer.Typer(add_completion=False, no_args_is_help=True, help="Add to the cauldron.")
del_app = typer.Typer(add_completion=False, no_args_is_help=True, help="Remove from the cauldron.")
update_app = typer.Typer(add_completion=False, no_args_is_help=True, help="Update the cauldron.")

cauldron_app.add_typer(add_app, name="add")
cauldron_app.add_typer(del_app, name="del")
cauldron_app.add_typer(update_app, name="update")


def _platform_option(ctx: CLIContext, platform: str | None) -> Platform | None:
    if platform is None:
        return None
    if platform not in PLATFORMS:
        ctx.console.error(f"unsupported platform: {platform} (expected android or ios)")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    return cast(Platform, platform)


def _target(ctx: CLIContext, descriptor: str | None) -> NativeApplicationDescriptor:
    """Descriptor given on the command line, or one picked among non released versions."""
    if descriptor is not None:
        return descriptor_arg(descriptor, ctx)
    chosen = choose_descriptor(ctx.tm.store, ctx.decisions, only_non_released=True)
    if isinstance(chosen, Err):
        fail(chosen.error, ctx)
    return chosen.value


@cauldron_app.command("list")
def list_cmd(
    platform: str | None = typer.Option(None, "--platform", help="android or ios"),
    released: bool = typer.Option(False, "--released", help="Only released versions"),
    non_released: bool = typer.Option(
        False, "--non-released", help="Only versions that are not released yet"
    ),
) -> None:
    """List native application versions in the cauldron."""
    ctx = build_context()
    for text in ctx.tm.store.descriptor_strings(
        platform=_platform_option(ctx, platform),
        only_released=released,
        only_non_released=non_released,
    ):
        ctx.console.print(text)


@cauldron_app.command("versions")
def versions(
    descriptor: str = typer.Argument(..., help="name:platform"),
) -> None:
    """List the raw versions of a native application platform."""
    ctx = build_context()
    target = descriptor_arg(descriptor, ctx)
    names = ctx.tm.store.get_versions_names(target)
    if isinstance(names, Err):
        fail(names.error, ctx)
    for name in names.value:
        ctx.console.print(name)


@cauldron_app.command("match")
def match(
    descriptor: str = typer.Argument(..., help="name:platform:range (e.g. myapp:android:^1.0)"),
) -> None:
    """List the versions matching a semver range."""
    ctx = build_context()
    target = descriptor_arg(descriptor, ctx)
    matches = match_against_range(ctx.tm.store, target, ctx.console)
    if isinstance(matches, Err):
        fail(matches.error, ctx)
    if not matches.value:
        ctx.console.warning(f"no version of {target.without_version()} matches {target.version}")
    for d in matches.value:
        ctx.console.print(str(d))


@del_app.command("dependency")
def del_dependency(
    descriptor: str = typer.Argument(..., help="name:platform:version"),
    dependency: str = typer.Argument(..., help="Native dependency to remove"),
    container_version: str | None = typer.Option(
        None, "--container-version", "-v", help="Version of the new container"
    ),
) -> None:
    """Remove a native dependency and publish a new container."""
    ctx = build_context()
    target = descriptor_arg(descriptor, ctx)
    result = ctx.operations().remove_dependency(
        target, dependency, container_version=container_version
    )
    exit_on_error(result, ctx)


@add_app.command("miniapps")
def add_miniapps(
    miniapps: list[str] = typer.Argument(..., help="MiniApp package paths"),
    descriptor: str | None = typer.Option(
        None, "--descriptor", "-d", help="name:platform:version (prompted if omitted)"
    ),
    container_version: str | None = typer.Option(
        None, "--container-version", "-v", help="Version of the new container"
    ),
) -> None:
    """Add MiniApps to a native application version and publish a new container."""
    ctx = build_context()
    target = _target(ctx, descriptor)
    result = ctx.operations().add_miniapps(
        target, miniapps, container_version=container_version
    )
    exit_on_error(result, ctx)


@update_app.command("miniapps")
def update_miniapps(
    miniapps: list[str] = typer.Argument(..., help="MiniApp package paths (name@version)"),
    descriptor: str | None = typer.Option(
        None, "--descriptor", "-d", help="name:platform:version (prompted if omitted)"
    ),
    container_version: str | None = typer.Option(
        None, "--container-version", "-v", help="Version of the new container"
    ),
) -> None:
    """Change the version of MiniApps and publish a new container."""
    ctx = build_context()
    target = _target(ctx, descriptor)
    result = ctx.operations().update_miniapps(
        target, miniapps, container_version=container_version
    )
    exit_on_error(result, ctx)


@del_app.command("miniapps")
def del_miniapps(
    miniapps: list[str] = typer.Argument(..., help="MiniApp names"),
    descriptor: str | None = typer.Option(
        None, "--descriptor", "-d", help="name:platform:version (prompted if omitted)"
    ),
    container_version: str | None = typer.Option(
        None, "--container-version", "-v", help="Version of the new container"
    ),
) -> None:
    """Remove MiniApps from a native application version and publish a new container."""
    ctx = build_context()
    target = _target(ctx, descriptor)
    result = ctx.operations().remove_miniapps(
        target, miniapps, container_version=container_version
    )
    exit_on_error(result, ctx)
