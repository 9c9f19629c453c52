from __future__ import annotations

from collections.abc import Sequence

from ern.core.result import Err, Ok, Result
from ern.output.console import ConsoleProtocol, Style
from ern.services.validation.base import ValidationCheck, ValidationContext, ValidationError
from ern.services.validation.checks import CHECKS, CHECKS_BY_NAME

type CheckRequest = tuple[str, object]

_TABLE_ORDER = {check.name: index for index, check in enumerate(CHECKS)}


def _resolve(requests: Sequence[CheckRequest]) -> list[tuple[ValidationCheck, object]]:
    resolved: list[tuple[ValidationCheck, object]] = []
    for check_id, args in requests:
        check = CHECKS_BY_NAME.get(check_id)
        if check is None:
            raise ValueError(f"unknown validation check: {check_id}")
        if not isinstance(args, check.args_type):
            raise TypeError(
                f"check {check_id} expects {check.args_type.__name__}, "
                f"got {type(args).__name__}"
            )
        resolved.append((check, args))
    # Stable: repeated checks keep the caller's order.
    resolved.sort(key=lambda item: (item[0].priority, _TABLE_ORDER[item[0].name]))
    return resolved


class ValidationEngine:
    """Run a subset of the fixed check table, in table order.

    Evaluation stops at the first failing check; its error is the only one
    returned. Naming an unknown check is a programming error (ValueError).
    """

    def __init__(self, context: ValidationContext, console: ConsoleProtocol) -> None:
        self._context = context
        self._console = console

    def run(self, requests: Sequence[CheckRequest]) -> Result[None, ValidationError]:
        for check, args in _resolve(requests):
            self._console.print(check.description, Style.DIM)
            result = check.validate(self._context, args)
            if isinstance(result, Err):
                return result
        if requests:
            self._console.success("Validity checks have passed")
        return Ok(None)
