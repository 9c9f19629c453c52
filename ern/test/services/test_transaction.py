"""Tests for TransactionManager: begin / run / commit / discard."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from ern.core.result import Err, Ok, Result
from ern.output.console import MockConsole
from ern.services.cauldron.descriptor import NativeApplicationDescriptor
from ern.services.cauldron.errors import CauldronError
from ern.services.cauldron.medium import InMemoryMedium
from ern.services.cauldron.model import CauldronData, NativeApp, PlatformNode, VersionNode
from ern.services.cauldron.package_path import PackagePath
from ern.services.cauldron.store import VersionStore
from ern.services.cauldron.transaction import TransactionManager

D = NativeApplicationDescriptor("myapp", "android", "1.0")


def _data() -> CauldronData:
    node = VersionNode("1.0", miniapps=("cart@1.0.0",))
    return CauldronData(apps=(NativeApp("myapp", (PlatformNode("android", (node,)),)),))


@dataclass
class FailingMedium:
    snapshot: CauldronData = field(default_factory=_data)

    def read_snapshot(self) -> Result[CauldronData, CauldronError]:
        return Ok(self.snapshot)

    def write_snapshot(
        self, data: CauldronData, tags: tuple[str, ...]
    ) -> Result[None, CauldronError]:
        return Err(CauldronError(kind="persist", message="disk full"))


def _manager(medium: InMemoryMedium | FailingMedium | None = None) -> TransactionManager:
    result = TransactionManager.open(medium or InMemoryMedium(_data()), MockConsole())
    assert isinstance(result, Ok)
    return result.value


def _add_search(store: VersionStore) -> Result[None, CauldronError]:
    return store.add_miniapp(D, PackagePath("search@1.0.0"))


class TestLifecycle:
    def test_begin_twice_is_rejected(self) -> None:
        tm = _manager()
        assert tm.begin() == Ok(None)
        tm.run(_add_search)
        working = tm.store.working_copy

        result = tm.begin()

        assert isinstance(result, Err)
        assert result.error.kind == "transaction_already_active"
        assert tm.store.working_copy is working

    def test_commit_persists_and_promotes(self) -> None:
        medium = InMemoryMedium(_data())
        tm = _manager(medium)
        tm.begin()
        tm.run(_add_search)

        assert tm.commit(["Add search MiniApp"]) == Ok(None)

        assert not tm.active
        assert medium.history == [("Add search MiniApp",)]
        assert tm.store.durable_snapshot == medium.snapshot
        assert PackagePath("search@1.0.0") in tm.store.get_container_miniapps(D).unwrap()

    def test_commit_without_transaction(self) -> None:
        result = _manager().commit("nothing")

        assert isinstance(result, Err)
        assert result.error.kind == "not_in_transaction"

    def test_run_without_transaction(self) -> None:
        result = _manager().run(_add_search)

        assert isinstance(result, Err)
        assert result.error.kind == "not_in_transaction"

    def test_discard_drops_working_copy(self) -> None:
        tm = _manager()
        durable = tm.store.durable_snapshot
        tm.begin()
        tm.run(_add_search)

        tm.discard()

        assert not tm.active
        assert tm.store.durable_snapshot is durable

    def test_discard_is_idempotent(self) -> None:
        console = MockConsole()
        opened = TransactionManager.open(InMemoryMedium(_data()), console)
        assert isinstance(opened, Ok)
        tm = opened.value
        tm.begin()

        tm.discard()
        tm.discard()

        assert len(console.find("changes discarded")) == 1


class TestFailures:
    def test_persist_failure_keeps_durable_snapshot(self) -> None:
        tm = _manager(FailingMedium())
        durable = tm.store.durable_snapshot
        tm.begin()
        tm.run(_add_search)

        result = tm.commit("Add search")

        assert isinstance(result, Err)
        assert result.error.kind == "persist"
        assert not tm.active
        assert tm.store.durable_snapshot is durable

    def test_err_result_discards(self) -> None:
        tm = _manager()
        tm.begin()

        result = tm.run(lambda store: store.add_miniapp(D, PackagePath("cart@2.0.0")))

        assert isinstance(result, Err)
        assert result.error.kind == "already_exists"
        assert not tm.active

    def test_exception_discards_and_propagates(self) -> None:
        tm = _manager()
        durable = tm.store.durable_snapshot
        tm.begin()

        def body(store: VersionStore) -> Result[None, CauldronError]:
            _add_search(store)
            raise RuntimeError("generator crashed")

        with pytest.raises(RuntimeError, match="generator crashed"):
            tm.run(body)

        assert not tm.active
        assert tm.store.durable_snapshot is durable


class TestPerformStateUpdate:
    def test_success_commits_body_result(self) -> None:
        medium = InMemoryMedium(_data())
        tm = _manager(medium)

        def body(store: VersionStore) -> Result[str, CauldronError]:
            _add_search(store)
            return Ok("done")

        result = tm.perform_state_update(body, "Add search")

        assert result == Ok("done")
        assert medium.history == [("Add search",)]

    def test_failure_leaves_medium_untouched(self) -> None:
        medium = InMemoryMedium(_data())
        tm = _manager(medium)

        result = tm.perform_state_update(
            lambda store: store.remove_miniapp(D, PackagePath("search")), "Remove search"
        )

        assert isinstance(result, Err)
        assert medium.history == []
        assert medium.snapshot == _data()
        assert not tm.active

    def test_nested_update_is_rejected(self) -> None:
        tm = _manager()
        tm.begin()

        result = tm.perform_state_update(_add_search, "nested")

        assert isinstance(result, Err)
        assert result.error.kind == "transaction_already_active"
        assert tm.active
