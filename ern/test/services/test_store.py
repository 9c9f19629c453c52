"""Tests for VersionStore reads and working-copy writes."""

from __future__ import annotations

from ern.core.result import Err, Ok
from ern.services.cauldron.descriptor import NativeApplicationDescriptor
from ern.services.cauldron.model import (
    CauldronData,
    GeneratorConfig,
    NativeApp,
    PlatformNode,
    PublisherSpec,
    VersionNode,
)
from ern.services.cauldron.package_path import PackagePath
from ern.services.cauldron.store import VersionStore

ANDROID = NativeApplicationDescriptor("myapp", "android")
V1 = NativeApplicationDescriptor("myapp", "android", "1.0")
V17 = NativeApplicationDescriptor("myapp", "android", "17")


def _sample() -> CauldronData:
    android = PlatformNode(
        "android",
        (
            VersionNode(
                "1.0",
                is_released=True,
                container_version="2.3.4",
                native_deps=("react-native@0.42.0",),
                miniapps=("cart@1.0.0",),
                generator_config=GeneratorConfig(
                    (PublisherSpec("maven", "https://repo.example.com"),)
                ),
            ),
            VersionNode(
                "17",
                container_version="1.0.9",
                native_deps=("react-native@0.42.0",),
                miniapps=("cart@1.0.0", "checkout@2.0.0"),
            ),
        ),
    )
    ios = PlatformNode("ios", (VersionNode("1.0"),))
    return CauldronData(apps=(NativeApp("myapp", (android, ios)),))


def _store_in_transaction() -> VersionStore:
    store = VersionStore(_sample())
    assert store.open_working_copy() == Ok(None)
    return store


class TestReads:
    def test_list_applications(self) -> None:
        assert VersionStore(_sample()).list_applications() == ["myapp"]

    def test_has_descriptor(self) -> None:
        store = VersionStore(_sample())
        assert store.has_descriptor(NativeApplicationDescriptor("myapp"))
        assert store.has_descriptor(ANDROID)
        assert store.has_descriptor(V17)
        assert not store.has_descriptor(NativeApplicationDescriptor("myapp", "android", "2.0"))
        assert not store.has_descriptor(NativeApplicationDescriptor("other"))

    def test_get_versions_names_keeps_raw_versions(self) -> None:
        assert VersionStore(_sample()).get_versions_names(ANDROID) == Ok(["1.0", "17"])

    def test_get_versions_names_needs_platform(self) -> None:
        result = VersionStore(_sample()).get_versions_names(NativeApplicationDescriptor("myapp"))

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_input"

    def test_get_versions_names_unknown_app(self) -> None:
        result = VersionStore(_sample()).get_versions_names(
            NativeApplicationDescriptor("other", "ios")
        )

        assert isinstance(result, Err)
        assert result.error.kind == "not_found"

    def test_descriptor_strings_filters(self) -> None:
        store = VersionStore(_sample())

        assert store.descriptor_strings() == [
            "myapp:android:1.0",
            "myapp:android:17",
            "myapp:ios:1.0",
        ]
        assert store.descriptor_strings(platform="ios") == ["myapp:ios:1.0"]
        assert store.descriptor_strings(only_released=True) == ["myapp:android:1.0"]
        assert store.descriptor_strings(only_non_released=True, platform="android") == [
            "myapp:android:17"
        ]

    def test_get_version_node_requires_complete_descriptor(self) -> None:
        result = VersionStore(_sample()).get_version_node(ANDROID)

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_input"

    def test_top_level_container_version_is_the_highest(self) -> None:
        assert VersionStore(_sample()).get_top_level_container_version(V17) == Ok("2.3.4")

    def test_top_level_container_version_none(self) -> None:
        ios = NativeApplicationDescriptor("myapp", "ios", "1.0")
        assert VersionStore(_sample()).get_top_level_container_version(ios) == Ok(None)

    def test_package_reads(self) -> None:
        store = VersionStore(_sample())

        assert store.get_native_dependencies(V1) == Ok([PackagePath("react-native@0.42.0")])
        assert store.get_container_miniapps(V17) == Ok(
            [PackagePath("cart@1.0.0"), PackagePath("checkout@2.0.0")]
        )
        assert store.get_container_js_api_impls(V17) == Ok([])

    def test_generator_config(self) -> None:
        store = VersionStore(_sample())

        config = store.get_container_generator_config(V1)
        assert isinstance(config, Ok)
        assert config.value is not None
        assert config.value.publishers[0].kind == "maven"
        assert store.get_container_generator_config(V17) == Ok(None)


class TestWrites:
    def test_write_outside_transaction_is_rejected(self) -> None:
        store = VersionStore(_sample())

        result = store.add_miniapp(V17, PackagePath("search@1.0.0"))

        assert isinstance(result, Err)
        assert result.error.kind == "not_in_transaction"
        assert store.working_copy is None

    def test_second_working_copy_is_rejected(self) -> None:
        store = _store_in_transaction()
        store.add_miniapp(V17, PackagePath("search@1.0.0"))
        working = store.working_copy

        result = store.open_working_copy()

        assert isinstance(result, Err)
        assert result.error.kind == "transaction_already_active"
        assert store.working_copy is working

    def test_writes_only_touch_the_working_copy(self) -> None:
        store = _store_in_transaction()
        durable = store.durable_snapshot

        assert store.add_miniapp(V17, PackagePath("search@1.0.0")) == Ok(None)

        assert store.durable_snapshot is durable
        assert store.get_container_miniapps(V17) == Ok(
            [PackagePath("cart@1.0.0"), PackagePath("checkout@2.0.0"), PackagePath("search@1.0.0")]
        )
        store.drop_working_copy()
        assert store.get_container_miniapps(V17) == Ok(
            [PackagePath("cart@1.0.0"), PackagePath("checkout@2.0.0")]
        )

    def test_add_existing_package_name(self) -> None:
        store = _store_in_transaction()

        result = store.add_miniapp(V17, PackagePath("cart@2.0.0"))

        assert isinstance(result, Err)
        assert result.error.kind == "already_exists"

    def test_remove_and_update(self) -> None:
        store = _store_in_transaction()

        assert store.remove_native_dependency(V17, PackagePath("react-native")) == Ok(None)
        assert store.update_miniapp(V17, PackagePath("cart@1.1.0")) == Ok(None)

        assert store.get_native_dependencies(V17) == Ok([])
        assert store.get_container_miniapps(V17) == Ok(
            [PackagePath("cart@1.1.0"), PackagePath("checkout@2.0.0")]
        )

    def test_remove_missing_package(self) -> None:
        store = _store_in_transaction()

        result = store.remove_miniapp(V17, PackagePath("search"))

        assert isinstance(result, Err)
        assert result.error.kind == "not_found"

    def test_js_api_impls(self) -> None:
        store = _store_in_transaction()

        assert store.add_js_api_impl(V17, PackagePath("movie-api-impl@1.0.0")) == Ok(None)
        assert store.get_container_js_api_impls(V17) == Ok([PackagePath("movie-api-impl@1.0.0")])
        assert store.remove_js_api_impl(V17, PackagePath("movie-api-impl")) == Ok(None)
        assert store.get_container_js_api_impls(V17) == Ok([])

    def test_lock_file_is_stored_as_blob(self) -> None:
        store = _store_in_transaction()

        reference = store.add_or_update_lock_file(V17, "container", "lock v1")

        assert isinstance(reference, Ok)
        assert store.get_lock_file(V17, "container") == Ok("lock v1")
        working = store.working_copy
        assert working is not None
        assert working.blob(reference.value) == "lock v1"
        assert store.get_lock_file(V1, "container") == Ok(None)

    def test_lock_file_outside_transaction_stores_nothing(self) -> None:
        store = VersionStore(_sample())

        result = store.add_or_update_lock_file(V17, "container", "lock v1")

        assert isinstance(result, Err)
        assert result.error.kind == "not_in_transaction"
        assert store.durable_snapshot.blobs == ()

    def test_lock_file_for_unknown_version_stores_no_blob(self) -> None:
        store = _store_in_transaction()
        missing = NativeApplicationDescriptor("myapp", "android", "99")

        result = store.add_or_update_lock_file(missing, "container", "lock v1")

        assert isinstance(result, Err)
        assert result.error.kind == "not_found"
        working = store.working_copy
        assert working is not None
        assert working.blobs == ()

    def test_update_container_version_and_promote(self) -> None:
        store = _store_in_transaction()

        assert store.update_container_version(V17, "2.3.5") == Ok(None)
        store.promote_working_copy()

        assert not store.in_transaction
        node = store.get_version_node(V17)
        assert isinstance(node, Ok)
        assert node.value.container_version == "2.3.5"
