"""Error types for the cauldron bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

CauldronErrorKind = Literal[
    "operation",
    "persist",
    "transaction_already_active",
    "not_in_transaction",
    "malformed_descriptor",
    "not_found",
    "invalid_input",
    "already_exists",
]


@dataclass(frozen=True, slots=True)
class CauldronError:
    """Canonical cauldron error payload.

    ``operation`` and ``persist`` errors are raised once a transaction has
    started and always leave the cauldron at its last committed snapshot.
    """

    kind: CauldronErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
