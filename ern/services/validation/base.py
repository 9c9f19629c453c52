from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ern.core.result import Err, Ok, Result
from ern.services.cauldron.store import VersionStore
from ern.services.registry import PackageRegistry


@dataclass(frozen=True, slots=True)
class ValidationError:
    """A precondition failed. Raised before any mutation, so the cauldron is untouched."""

    check: str
    detail: str
    extra_message: str | None = None

    @property
    def message(self) -> str:
        if self.extra_message:
            return f"{self.detail}\n{self.extra_message}"
        return self.detail

    @property
    def hint(self) -> str | None:
        return None


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """What checks may read. ``store`` is None when no cauldron is active.

    ``location`` is where the cauldron was expected, reported when it is missing.
    """

    store: VersionStore | None
    registry: PackageRegistry
    location: str | None = None


type CheckResult = Result[None, ValidationError]
type Validator = Callable[[ValidationContext, Any], CheckResult]


@dataclass(frozen=True, slots=True)
class ValidationCheck:
    name: str
    priority: int
    description: str
    args_type: type
    validate: Validator


OK: Ok[None] = Ok(None)


def fail(check: str, detail: str, extra_message: str | None) -> Err[ValidationError]:
    return Err(ValidationError(check=check, detail=detail, extra_message=extra_message))
