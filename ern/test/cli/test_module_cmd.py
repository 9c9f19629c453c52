from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest
import typer

import ern.cli.commands.module_cmd as module_cmd
from ern.cli.context import CLIContext
from ern.core.config import Config
from ern.core.errors import ErrorCode
from ern.core.result import Ok, Result
from ern.output.console import MockConsole
from ern.services.cauldron.medium import InMemoryMedium
from ern.services.cauldron.package_path import PackagePath
from ern.services.cauldron.transaction import TransactionManager
from ern.services.decisions import ScriptedDecisions
from ern.services.registry import RegistryError


@dataclass
class NameRegistry:
    taken: frozenset[str] = frozenset()

    def package_exists(self, name: str) -> bool:
        return name in self.taken

    def is_published(self, package: PackagePath) -> bool:
        return False

    def dependencies(self, package: PackagePath) -> Result[dict[str, str], RegistryError]:
        return Ok({})


def _ctx(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    answers: list[object],
    taken: frozenset[str] = frozenset(),
) -> tuple[MockConsole, ScriptedDecisions]:
    console = MockConsole()
    decisions = ScriptedDecisions(answers)
    ctx = CLIContext(
        root=tmp_path,
        config=Config(),
        console=console,
        tm=TransactionManager.open(InMemoryMedium(), console).unwrap(),
        registry=NameRegistry(taken),
        decisions=decisions,
    )
    monkeypatch.setattr(module_cmd, "build_context", lambda: ctx)
    return console, decisions


def test_suffix_accepted(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    console, decisions = _ctx(tmp_path, monkeypatch, [True])

    module_cmd.module_name(name="Cart", module_type="miniapp", package_name=None)

    assert len(decisions.prompts) == 1
    assert console.messages[-1] == "OK module CartMiniApp (package cartminiapp)"


def test_already_suffixed_name_is_not_prompted(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    console, decisions = _ctx(tmp_path, monkeypatch, [])

    module_cmd.module_name(name="MovieApi", module_type="api", package_name="movie-api")

    assert decisions.prompts == []
    assert console.messages[-1] == "OK module MovieApi (package movie-api)"


def test_invalid_module_name(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    console, _ = _ctx(tmp_path, monkeypatch, [False])

    with pytest.raises(typer.Exit) as exc:
        module_cmd.module_name(name="Cart2", module_type="miniapp", package_name=None)

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert console.has_error()


def test_taken_package_declined(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    console, decisions = _ctx(
        tmp_path, monkeypatch, [True, False], taken=frozenset({"cartminiapp"})
    )

    with pytest.raises(typer.Exit) as exc:
        module_cmd.module_name(name="Cart", module_type="miniapp", package_name=None)

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert len(decisions.prompts) == 2
    assert console.has_warning()


def test_unknown_module_type(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _ctx(tmp_path, monkeypatch, [])

    with pytest.raises(typer.Exit) as exc:
        module_cmd.module_name(name="Cart", module_type="widget", package_name=None)

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
