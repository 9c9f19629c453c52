from __future__ import annotations

import typer

from ern.cli.commands._helpers import exit_on_error
from ern.cli.context import build_context
from ern.core.errors import ErrorCode
from ern.services.modules import (
    ModuleType,
    module_name_has_suffix,
    perform_pkg_name_conflict_check,
    prompt_suffixed_module_name,
)
from ern.services.validation import NameArgs

_TYPES = {t.name.lower(): t for t in ModuleType}


def module_name(
    name: str = typer.Argument(..., help="Proposed module name"),
    module_type: str = typer.Option(
        "miniapp",
        "--type",
        "-t",
        help="miniapp, api, js_api_impl or native_api_impl",
    ),
    package_name: str | None = typer.Option(
        None, "--package-name", help="npm package name (defaults to the module name, lowercased)"
    ),
) -> None:
    """Check the name of a new module and its npm package."""
    ctx = build_context()
    kind = _TYPES.get(module_type.lower())
    if kind is None:
        ctx.console.error(f"unknown module type: {module_type} (expected {', '.join(_TYPES)})")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    final = name
    if not module_name_has_suffix(name, kind):
        final = prompt_suffixed_module_name(name, kind, ctx.decisions)
    package = package_name or final.lower()

    checked = ctx.validation().run(
        [
            ("is_valid_npm_package_name", NameArgs(package)),
            ("is_valid_module_name", NameArgs(final)),
        ]
    )
    exit_on_error(checked, ctx)

    if not perform_pkg_name_conflict_check(package, ctx.registry, ctx.decisions):
        ctx.console.warning(f"{package} is already taken, aborting")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    ctx.console.success(f"module {final} (package {package})")
