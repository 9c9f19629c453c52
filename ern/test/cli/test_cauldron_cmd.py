from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path

import pytest
import typer

import ern.cli.commands.cauldron_cmd as cauldron_cmd
import ern.cli.commands.container_cmd as container_cmd
import ern.services.container.generator as generator_mod
from ern.cli.context import CLIContext
from ern.core.config import Config, ContainerConfig
from ern.core.errors import ErrorCode
from ern.core.result import Err, Ok, Result
from ern.output.console import MockConsole
from ern.platform.process import ProcessError
from ern.services.cauldron.descriptor import NativeApplicationDescriptor
from ern.services.cauldron.errors import CauldronError
from ern.services.cauldron.medium import InMemoryMedium
from ern.services.cauldron.model import CauldronData, NativeApp, PlatformNode, VersionNode
from ern.services.cauldron.package_path import PackagePath
from ern.services.cauldron.transaction import TransactionManager
from ern.services.decisions import ScriptedDecisions
from ern.services.registry import RegistryError

D17 = NativeApplicationDescriptor("myapp", "android", "17")


@dataclass
class FakeRegistry:
    published: set[str] = field(default_factory=set)
    deps: dict[str, dict[str, str]] = field(default_factory=dict)

    def package_exists(self, name: str) -> bool:
        return False

    def is_published(self, package: PackagePath) -> bool:
        return package.raw in self.published

    def dependencies(self, package: PackagePath) -> Result[dict[str, str], RegistryError]:
        return Ok(self.deps.get(package.raw, {}))


class ReadOnlyMedium(InMemoryMedium):
    def write_snapshot(
        self, data: CauldronData, tags: tuple[str, ...]
    ) -> Result[None, CauldronError]:
        return Err(CauldronError(kind="persist", message="cauldron is read-only"))


def _data() -> CauldronData:
    android = PlatformNode(
        "android",
        (
            VersionNode("1.0", is_released=True, container_version="1.0.0"),
            VersionNode(
                "17",
                container_version="1.0.4",
                native_deps=("react-native@0.42.0", "react-native-code-push@1.0.0"),
                miniapps=("cart@1.0.0",),
            ),
            VersionNode("next"),
        ),
    )
    ios = PlatformNode("ios", (VersionNode("17"),))
    return CauldronData(apps=(NativeApp("myapp", (android, ios)),))


@dataclass
class Env:
    ctx: CLIContext
    console: MockConsole
    medium: InMemoryMedium
    decisions: ScriptedDecisions


def _env(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    *,
    registry: FakeRegistry | None = None,
    answers: list[object] | None = None,
    medium: InMemoryMedium | None = None,
) -> Env:
    console = MockConsole()
    medium = medium or InMemoryMedium(_data())
    tm = TransactionManager.open(medium, console).unwrap()
    decisions = ScriptedDecisions(answers or [])
    ctx = CLIContext(
        root=tmp_path,
        config=Config(
            container=ContainerConfig(containergen_dir=str(tmp_path / "cgen"), generator="gen")
        ),
        console=console,
        tm=tm,
        registry=registry or FakeRegistry(),
        decisions=decisions,
    )
    monkeypatch.setattr(cauldron_cmd, "build_context", lambda: ctx)
    monkeypatch.setattr(container_cmd, "build_context", lambda: ctx)
    return Env(ctx, console, medium, decisions)


def _generator_ok(monkeypatch: pytest.MonkeyPatch) -> list[list[str]]:
    calls: list[list[str]] = []

    def fake_run(
        cmd: list[str],
        cwd: Path,
        env: dict[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        calls.append(cmd)
        return Ok("")

    monkeypatch.setattr(generator_mod, "run_process", fake_run)
    return calls


def _generator_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(
        cmd: list[str],
        cwd: Path,
        env: dict[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        return Err(ProcessError(tuple(cmd), 2, "", "gradle failed"))

    monkeypatch.setattr(generator_mod, "run_process", fake_run)


def test_list_filters(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env = _env(tmp_path, monkeypatch)

    cauldron_cmd.list_cmd(platform="android", released=False, non_released=True)

    assert env.console.messages == ["myapp:android:17", "myapp:android:next"]


def test_list_rejects_unknown_platform(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env = _env(tmp_path, monkeypatch)

    with pytest.raises(typer.Exit) as exc:
        cauldron_cmd.list_cmd(platform="windows", released=False, non_released=False)

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert env.console.has_error()


def test_versions_prints_raw_versions(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env = _env(tmp_path, monkeypatch)

    cauldron_cmd.versions(descriptor="myapp:android")

    assert env.console.messages == ["1.0", "17", "next"]


def test_versions_unknown_app(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env = _env(tmp_path, monkeypatch)

    with pytest.raises(typer.Exit) as exc:
        cauldron_cmd.versions(descriptor="other:android")

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert env.console.messages == ["error: other:android does not exist in the cauldron"]


def test_malformed_descriptor(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env = _env(tmp_path, monkeypatch)

    with pytest.raises(typer.Exit) as exc:
        cauldron_cmd.versions(descriptor="myapp:windows")

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert "hint: platform must be android or ios" in env.console.messages


def test_match(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env = _env(tmp_path, monkeypatch)

    cauldron_cmd.match(descriptor="myapp:android:>=2")

    assert env.console.messages == [
        "warning: skipping myapp:android:next (version is not semver compatible)",
        "myapp:android:17",
    ]


def test_match_nothing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env = _env(tmp_path, monkeypatch)

    cauldron_cmd.match(descriptor="myapp:ios:^18")

    assert env.console.messages == ["warning: no version of myapp:ios matches ^18"]


def test_del_dependency(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env = _env(tmp_path, monkeypatch)
    calls = _generator_ok(monkeypatch)

    cauldron_cmd.del_dependency(
        descriptor="myapp:android:17", dependency="react-native-code-push", container_version=None
    )

    assert calls[0][:2] == ["gen", "myapp:android:17"]
    assert env.medium.history == [
        ("Remove react-native-code-push dependency from myapp:android:17",)
    ]
    node = env.ctx.tm.store.get_version_node(D17).unwrap()
    assert node.native_deps == ("react-native@0.42.0",)
    assert node.container_version == "1.0.5"



def test_del_dependency_in_use(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env = _env(
        tmp_path,
        monkeypatch,
        registry=FakeRegistry(deps={"cart@1.0.0": {"react-native": "0.42.0"}}),
    )
    calls = _generator_ok(monkeypatch)

    with pytest.raises(typer.Exit) as exc:
        cauldron_cmd.del_dependency(
            descriptor="myapp:android:17", dependency="react-native", container_version=None
        )

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert "error: Dependency react-native is used by MiniApp cart@1.0.0" in env.console.messages
    assert calls == []
    assert env.medium.history == []


def test_missing_cauldron_fails_before_any_change(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env = _env(tmp_path, monkeypatch)
    missing = tmp_path / "cauldron" / "cauldron.json"
    monkeypatch.setattr(
        cauldron_cmd, "build_context", lambda: replace(env.ctx, missing_cauldron=missing)
    )
    calls = _generator_ok(monkeypatch)

    with pytest.raises(typer.Exit) as exc:
        cauldron_cmd.del_miniapps(
            miniapps=["cart"], descriptor="myapp:android:17", container_version=None
        )

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert f"error: No cauldron is active: {missing} does not exist" in env.console.messages
    assert calls == []
    assert env.medium.history == []


def test_add_miniapps_prompts_for_descriptor(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env = _env(
        tmp_path,
        monkeypatch,
        registry=FakeRegistry(published={"search@1.0.0"}),
        answers=["myapp:android:17"],
    )
    _generator_ok(monkeypatch)

    cauldron_cmd.add_miniapps(miniapps=["search@1.0.0"], descriptor=None, container_version=None)

    assert env.decisions.prompts == ["Choose a native application version"]
    assert env.ctx.tm.store.get_version_node(D17).unwrap().miniapps == (
        "cart@1.0.0",
        "search@1.0.0",
    )


def test_update_miniapps(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env = _env(tmp_path, monkeypatch, registry=FakeRegistry(published={"cart@1.1.0"}))
    _generator_ok(monkeypatch)

    cauldron_cmd.update_miniapps(
        miniapps=["cart@1.1.0"], descriptor="myapp:android:17", container_version="2.0.0"
    )

    node = env.ctx.tm.store.get_version_node(D17).unwrap()
    assert node.miniapps == ("cart@1.1.0",)
    assert node.container_version == "2.0.0"


def test_del_miniapps(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env = _env(tmp_path, monkeypatch)
    _generator_ok(monkeypatch)

    cauldron_cmd.del_miniapps(
        miniapps=["cart"], descriptor="myapp:android:17", container_version=None
    )

    assert env.medium.history == [("Remove cart MiniApp from myapp:android:17",)]


def test_generation_failure_exits_with_operation_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env = _env(tmp_path, monkeypatch)
    _generator_fails(monkeypatch)
    before = env.ctx.tm.store.durable_snapshot

    with pytest.raises(typer.Exit) as exc:
        container_cmd.regen(descriptor="myapp:android:17", container_version=None)

    assert exc.value.exit_code == int(ErrorCode.OPERATION_ERROR)
    assert "hint: gradle failed" in env.console.messages
    assert env.ctx.tm.store.durable_snapshot is before
    assert env.medium.history == []


def test_persist_failure_exits_with_persist_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env = _env(tmp_path, monkeypatch, medium=ReadOnlyMedium(_data()))
    _generator_ok(monkeypatch)

    with pytest.raises(typer.Exit) as exc:
        container_cmd.regen(descriptor="myapp:android:17", container_version=None)

    assert exc.value.exit_code == int(ErrorCode.PERSIST_ERROR)
    assert env.ctx.tm.store.get_version_node(D17).unwrap().container_version == "1.0.4"


def test_regen_without_candidates(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env = _env(tmp_path, monkeypatch, medium=InMemoryMedium(CauldronData()))

    with pytest.raises(typer.Exit) as exc:
        container_cmd.regen(descriptor=None, container_version=None)

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert env.console.messages == [
        "error: Could not find any qualifying native application version in the Cauldron"
    ]
