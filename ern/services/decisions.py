"""User decisions (choices and confirmations) behind a protocol.

Services never prompt directly. The CLI injects a typer-backed provider;
tests inject ``ScriptedDecisions`` with the answers queued up front.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol


class DecisionProvider(Protocol):
    def choose_one(self, message: str, choices: Sequence[str]) -> str: ...

    def choose_many(self, message: str, choices: Sequence[str]) -> list[str]: ...

    def confirm(self, message: str, *, default: bool = False) -> bool: ...


def _empty_answers() -> list[object]:
    return []


def _empty_prompts() -> list[str]:
    return []


@dataclass
class ScriptedDecisions:
    """Replays queued answers in order and records every prompt it saw.

    ``choose_one`` answers are str, ``choose_many`` answers are list[str],
    ``confirm`` answers are bool. Running out of answers is a test bug.
    """

    answers: list[object] = field(default_factory=_empty_answers)
    prompts: list[str] = field(default_factory=_empty_prompts)

    def _next(self, message: str) -> object:
        self.prompts.append(message)
        if not self.answers:
            raise AssertionError(f"no scripted answer for prompt: {message}")
        return self.answers.pop(0)

    def choose_one(self, message: str, choices: Sequence[str]) -> str:
        answer = self._next(message)
        if not isinstance(answer, str) or answer not in choices:
            raise AssertionError(f"scripted answer {answer!r} is not one of {list(choices)}")
        return answer

    def choose_many(self, message: str, choices: Sequence[str]) -> list[str]:
        answer = self._next(message)
        if not isinstance(answer, list):
            raise AssertionError(f"scripted answer {answer!r} is not a list")
        picked = [a for a in answer if isinstance(a, str)]
        unknown = [a for a in picked if a not in choices]
        if unknown or len(picked) != len(answer):
            raise AssertionError(f"scripted answer {answer!r} is not a subset of {list(choices)}")
        return picked

    def confirm(self, message: str, *, default: bool = False) -> bool:
        del default
        answer = self._next(message)
        if not isinstance(answer, bool):
            raise AssertionError(f"scripted answer {answer!r} is not a bool")
        return answer
