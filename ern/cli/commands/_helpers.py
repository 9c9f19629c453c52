"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from ern.core.errors import ErrorCode
from ern.core.result import Err, Result
from ern.output.console import Style
from ern.services.cauldron.descriptor import NativeApplicationDescriptor, parse_descriptor
from ern.services.cauldron.errors import CauldronError

if TYPE_CHECKING:
    from ern.cli.context import CLIContext


def error_code_for(error: object) -> ErrorCode:
    """Exit code for an error value returned by a service."""
    if isinstance(error, CauldronError):
        match error.kind:
            case "operation":
                return ErrorCode.OPERATION_ERROR
            case "persist":
                return ErrorCode.PERSIST_ERROR
            case _:
                return ErrorCode.USER_ERROR
    return ErrorCode.USER_ERROR


def fail(error: object, ctx: CLIContext, error_code: ErrorCode | None = None) -> NoReturn:
    """Report an error value and exit.

    Expects error objects to have 'message' and optional 'hint' attributes.
    Without an explicit ``error_code`` the code is derived from the error.
    """
    message: str = getattr(error, "message", str(error))
    hint: str | None = getattr(error, "hint", None)
    ctx.console.error(message)
    if hint:
        ctx.console.print(f"hint: {hint}", Style.DIM)
    code = error_code if error_code is not None else error_code_for(error)
    raise typer.Exit(code=int(code))


def exit_on_error[T, E](
    result: Result[T, E],
    ctx: CLIContext,
    error_code: ErrorCode | None = None,
) -> None:
    """Exit with error if result is Err, otherwise return."""
    if isinstance(result, Err):
        fail(result.error, ctx, error_code)


def descriptor_arg(text: str, ctx: CLIContext) -> NativeApplicationDescriptor:
    """Parse a descriptor argument or exit with a user error."""
    parsed = parse_descriptor(text)
    if isinstance(parsed, Err):
        fail(parsed.error, ctx, ErrorCode.USER_ERROR)
    return parsed.value
