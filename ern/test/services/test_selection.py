from __future__ import annotations

import pytest

from ern.core.result import Err, Ok
from ern.services.cauldron.descriptor import NativeApplicationDescriptor
from ern.services.cauldron.model import CauldronData, NativeApp, PlatformNode, VersionNode
from ern.services.cauldron.selection import choose_descriptor, choose_descriptors
from ern.services.cauldron.store import VersionStore
from ern.services.decisions import ScriptedDecisions


def _store() -> VersionStore:
    android = PlatformNode(
        "android", (VersionNode("1.0", is_released=True), VersionNode("2.0"))
    )
    ios = PlatformNode("ios", (VersionNode("2.0"),))
    return VersionStore(CauldronData(apps=(NativeApp("myapp", (android, ios)),)))


def test_choose_descriptor_offers_filtered_versions() -> None:
    decisions = ScriptedDecisions(["myapp:ios:2.0"])

    result = choose_descriptor(_store(), decisions, only_non_released=True)

    assert result == Ok(NativeApplicationDescriptor("myapp", "ios", "2.0"))
    assert decisions.prompts == ["Choose a native application version"]


def test_choose_descriptor_rejects_filtered_out_choice() -> None:
    decisions = ScriptedDecisions(["myapp:android:1.0"])

    with pytest.raises(AssertionError):
        choose_descriptor(_store(), decisions, only_non_released=True)


def test_nothing_qualifies() -> None:
    decisions = ScriptedDecisions()

    result = choose_descriptor(_store(), decisions, platform="ios", only_released=True)

    assert isinstance(result, Err)
    assert result.error.kind == "not_found"
    assert result.error.message == (
        "Could not find any qualifying native application version in the Cauldron"
    )
    assert decisions.prompts == []


def test_choose_descriptors() -> None:
    decisions = ScriptedDecisions([["myapp:android:2.0", "myapp:ios:2.0"]])

    result = choose_descriptors(_store(), decisions, only_non_released=True, message="Pick")

    assert result == Ok(
        [
            NativeApplicationDescriptor("myapp", "android", "2.0"),
            NativeApplicationDescriptor("myapp", "ios", "2.0"),
        ]
    )
    assert decisions.prompts == ["Pick"]
