"""Interactive decisions for the CLI."""

from __future__ import annotations

from collections.abc import Sequence

import typer


def _print_choices(message: str, choices: Sequence[str]) -> None:
    typer.echo(message)
    for index, choice in enumerate(choices, start=1):
        typer.echo(f"  {index}) {choice}")


def _pick(raw: str, choices: Sequence[str]) -> str | None:
    raw = raw.strip()
    if raw.isdigit() and 1 <= int(raw) <= len(choices):
        return choices[int(raw) - 1]
    return raw if raw in choices else None


class TyperDecisions:
    """DecisionProvider that prompts on the terminal."""

    def choose_one(self, message: str, choices: Sequence[str]) -> str:
        _print_choices(message, choices)
        while True:
            picked = _pick(typer.prompt("Choice"), choices)
            if picked is not None:
                return picked
            typer.echo(f"Enter a number between 1 and {len(choices)}")

    def choose_many(self, message: str, choices: Sequence[str]) -> list[str]:
        _print_choices(message, choices)
        while True:
            raw = typer.prompt("Choices (comma separated)")
            picked = [_pick(part, choices) for part in raw.split(",") if part.strip()]
            if picked and all(p is not None for p in picked):
                return [p for p in picked if p is not None]
            typer.echo(f"Enter numbers between 1 and {len(choices)}, separated by commas")

    def confirm(self, message: str, *, default: bool = False) -> bool:
        return typer.confirm(message, default=default)
