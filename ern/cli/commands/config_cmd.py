from __future__ import annotations

import typer

from ern.core.errors import ErrorCode
from ern.core.result import Err
from ern.core.settings import get_value, set_value
from ern.output.console import RichConsole


def config(
    key: str = typer.Argument(..., help="Configuration key"),
    value: str | None = typer.Argument(None, help="Value to set (omit to read)"),
) -> None:
    """Get or set a user configuration key."""
    console = RichConsole()

    if value is not None:
        stored = set_value(key, value)
        if isinstance(stored, Err):
            console.error(stored.error.message)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
        console.success(f"{key}: {value}")
        return

    current = get_value(key)
    if isinstance(current, Err):
        console.error(current.error.message)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    console.print(f"{key}: {current.value if current.value is not None else '(not set)'}")
