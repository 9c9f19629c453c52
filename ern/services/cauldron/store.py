"""Version store: read and write access to cauldron version nodes.

Reads see the working copy while a transaction is open, the durable snapshot
otherwise. Writes are only accepted while a working copy is open; they build
a new snapshot and never touch the durable one.
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from dataclasses import replace

from ern.core.result import Err, Ok, Result
from ern.services.cauldron.descriptor import NativeApplicationDescriptor, Platform
from ern.services.cauldron.errors import CauldronError
from ern.services.cauldron.model import CauldronData, GeneratorConfig, VersionNode
from ern.services.cauldron.package_path import PackagePath, find_by_name
from ern.services.cauldron.semver import normalize_to_semver, parse_semver


def _not_found(descriptor: NativeApplicationDescriptor) -> Err[CauldronError]:
    return Err(
        CauldronError(
            kind="not_found",
            message=f"{descriptor} does not exist in the cauldron",
        )
    )


def _require_complete(descriptor: NativeApplicationDescriptor) -> Result[None, CauldronError]:
    if not descriptor.is_complete:
        return Err(
            CauldronError(
                kind="invalid_input",
                message=f"{descriptor} is not a complete descriptor",
                hint="expected name:platform:version",
            )
        )
    return Ok(None)


class VersionStore:
    def __init__(self, durable: CauldronData) -> None:
        self._durable = durable
        self._working: CauldronData | None = None

    # -- working copy lifecycle (driven by TransactionManager) -----------------

    @property
    def in_transaction(self) -> bool:
        return self._working is not None

    @property
    def durable_snapshot(self) -> CauldronData:
        return self._durable

    @property
    def working_copy(self) -> CauldronData | None:
        return self._working

    def open_working_copy(self) -> Result[None, CauldronError]:
        if self._working is not None:
            return Err(
                CauldronError(
                    kind="transaction_already_active",
                    message="a cauldron transaction is already active",
                )
            )
        self._working = self._durable
        return Ok(None)

    def promote_working_copy(self) -> None:
        if self._working is not None:
            self._durable = self._working
        self._working = None

    def drop_working_copy(self) -> None:
        self._working = None

    @property
    def _current(self) -> CauldronData:
        return self._working if self._working is not None else self._durable

    # -- reads -----------------------------------------------------------------

    def list_applications(self) -> list[str]:
        return [app.name for app in self._current.apps]

    def has_descriptor(self, descriptor: NativeApplicationDescriptor) -> bool:
        """True if the application (and platform / version, when given) exists."""
        app = self._current.app(descriptor.name)
        if app is None:
            return False
        if descriptor.platform is None:
            return True
        platform = app.platform(descriptor.platform)
        if platform is None:
            return False
        if descriptor.version is None:
            return True
        return platform.version(descriptor.version) is not None

    def get_versions_names(
        self, descriptor: NativeApplicationDescriptor
    ) -> Result[list[str], CauldronError]:
        """Raw version strings of ``name:platform``, in insertion order."""
        if descriptor.platform is None:
            return Err(
                CauldronError(
                    kind="invalid_input",
                    message=f"{descriptor} does not specify a platform",
                )
            )
        node = self._current.platform_node(descriptor.name, descriptor.platform)
        if node is None:
            return _not_found(descriptor.without_version())
        return Ok([v.version for v in node.versions])

    def descriptor_strings(
        self,
        *,
        platform: Platform | None = None,
        only_released: bool = False,
        only_non_released: bool = False,
    ) -> list[str]:
        """All complete descriptors, optionally filtered by platform and release state."""
        out: list[str] = []
        for app in self._current.apps:
            for p in app.platforms:
                if platform is not None and p.name != platform:
                    continue
                for v in p.versions:
                    if v.is_released and only_non_released:
                        continue
                    if not v.is_released and only_released:
                        continue
                    out.append(str(NativeApplicationDescriptor(app.name, p.name, v.version)))
        return out

    def get_version_node(
        self, descriptor: NativeApplicationDescriptor
    ) -> Result[VersionNode, CauldronError]:
        complete = _require_complete(descriptor)
        if isinstance(complete, Err):
            return complete
        node = self._current.version_node(descriptor)
        if node is None:
            return _not_found(descriptor)
        return Ok(node)

    def get_top_level_container_version(
        self, descriptor: NativeApplicationDescriptor
    ) -> Result[str | None, CauldronError]:
        """Highest container version across every version of ``name:platform``.

        Container artifacts are published per application, so a new container
        version must be newer than any version already published for it.
        """
        if descriptor.platform is None:
            return Err(
                CauldronError(
                    kind="invalid_input",
                    message=f"{descriptor} does not specify a platform",
                )
            )
        node = self._current.platform_node(descriptor.name, descriptor.platform)
        if node is None:
            return _not_found(descriptor.without_version())

        best: str | None = None
        best_key = None
        for v in node.versions:
            if v.container_version is None:
                continue
            key = parse_semver(normalize_to_semver(v.container_version) or "")
            if best is None or (key is not None and (best_key is None or key > best_key)):
                best, best_key = v.container_version, key
        return Ok(best)

    def get_container_generator_config(
        self, descriptor: NativeApplicationDescriptor
    ) -> Result[GeneratorConfig | None, CauldronError]:
        return self.get_version_node(descriptor).map(lambda node: node.generator_config)

    def get_native_dependencies(
        self, descriptor: NativeApplicationDescriptor
    ) -> Result[list[PackagePath], CauldronError]:
        return self.get_version_node(descriptor).map(
            lambda node: [PackagePath.parse(d) for d in node.native_deps]
        )

    def get_container_miniapps(
        self, descriptor: NativeApplicationDescriptor
    ) -> Result[list[PackagePath], CauldronError]:
        return self.get_version_node(descriptor).map(
            lambda node: [PackagePath.parse(m) for m in node.miniapps]
        )

    def get_container_js_api_impls(
        self, descriptor: NativeApplicationDescriptor
    ) -> Result[list[PackagePath], CauldronError]:
        return self.get_version_node(descriptor).map(
            lambda node: [PackagePath.parse(j) for j in node.js_api_impls]
        )

    def get_lock_file(
        self, descriptor: NativeApplicationDescriptor, key: str
    ) -> Result[str | None, CauldronError]:
        """Content of the lock file stored under ``key``, if any."""
        node = self.get_version_node(descriptor)
        if isinstance(node, Err):
            return node
        reference = node.value.lock_file(key)
        if reference is None:
            return Ok(None)
        return Ok(self._current.blob(reference))

    # -- writes ----------------------------------------------------------------

    def _mutate(
        self,
        descriptor: NativeApplicationDescriptor,
        update: Callable[[VersionNode], Result[VersionNode, CauldronError]],
        *,
        blob: tuple[str, str] | None = None,
    ) -> Result[None, CauldronError]:
        """Replace one version node of the working copy, adding ``blob`` alongside."""
        if self._working is None:
            return Err(
                CauldronError(
                    kind="not_in_transaction",
                    message=f"cannot update {descriptor} outside of a transaction",
                )
            )
        node = self.get_version_node(descriptor)
        if isinstance(node, Err):
            return node
        updated = update(node.value)
        if isinstance(updated, Err):
            return updated
        new_node = updated.value
        working = self._working.replace_version_node(descriptor, lambda _: new_node)
        if blob is not None:
            working = working.with_blob(*blob)
        self._working = working
        return Ok(None)

    def _add_package(
        self,
        descriptor: NativeApplicationDescriptor,
        field_name: str,
        label: str,
        package: PackagePath,
    ) -> Result[None, CauldronError]:
        def update(node: VersionNode) -> Result[VersionNode, CauldronError]:
            current: tuple[str, ...] = getattr(node, field_name)
            existing = find_by_name([PackagePath.parse(p) for p in current], package)
            if existing is not None:
                return Err(
                    CauldronError(
                        kind="already_exists",
                        message=f"{label} {existing} already exists in {descriptor}",
                    )
                )
            return Ok(replace(node, **{field_name: (*current, str(package))}))

        return self._mutate(descriptor, update)

    def _remove_package(
        self,
        descriptor: NativeApplicationDescriptor,
        field_name: str,
        label: str,
        package: PackagePath,
    ) -> Result[None, CauldronError]:
        def update(node: VersionNode) -> Result[VersionNode, CauldronError]:
            current: tuple[str, ...] = getattr(node, field_name)
            kept = tuple(p for p in current if not PackagePath.parse(p).same_name(package))
            if len(kept) == len(current):
                return Err(
                    CauldronError(
                        kind="not_found",
                        message=f"{label} {package.name} does not exist in {descriptor}",
                    )
                )
            return Ok(replace(node, **{field_name: kept}))

        return self._mutate(descriptor, update)

    def _update_package(
        self,
        descriptor: NativeApplicationDescriptor,
        field_name: str,
        label: str,
        package: PackagePath,
    ) -> Result[None, CauldronError]:
        def update(node: VersionNode) -> Result[VersionNode, CauldronError]:
            current: tuple[str, ...] = getattr(node, field_name)
            if find_by_name([PackagePath.parse(p) for p in current], package) is None:
                return Err(
                    CauldronError(
                        kind="not_found",
                        message=f"{label} {package.name} does not exist in {descriptor}",
                    )
                )
            replaced = tuple(
                str(package) if PackagePath.parse(p).same_name(package) else p for p in current
            )
            return Ok(replace(node, **{field_name: replaced}))

        return self._mutate(descriptor, update)

    def add_native_dependency(
        self, descriptor: NativeApplicationDescriptor, dependency: PackagePath
    ) -> Result[None, CauldronError]:
        return self._add_package(descriptor, "native_deps", "dependency", dependency)

    def remove_native_dependency(
        self, descriptor: NativeApplicationDescriptor, dependency: PackagePath
    ) -> Result[None, CauldronError]:
        return self._remove_package(descriptor, "native_deps", "dependency", dependency)

    def update_native_dependency(
        self, descriptor: NativeApplicationDescriptor, dependency: PackagePath
    ) -> Result[None, CauldronError]:
        return self._update_package(descriptor, "native_deps", "dependency", dependency)

    def add_miniapp(
        self, descriptor: NativeApplicationDescriptor, miniapp: PackagePath
    ) -> Result[None, CauldronError]:
        return self._add_package(descriptor, "miniapps", "MiniApp", miniapp)

    def remove_miniapp(
        self, descriptor: NativeApplicationDescriptor, miniapp: PackagePath
    ) -> Result[None, CauldronError]:
        return self._remove_package(descriptor, "miniapps", "MiniApp", miniapp)

    def update_miniapp(
        self, descriptor: NativeApplicationDescriptor, miniapp: PackagePath
    ) -> Result[None, CauldronError]:
        return self._update_package(descriptor, "miniapps", "MiniApp", miniapp)

    def add_js_api_impl(
        self, descriptor: NativeApplicationDescriptor, impl: PackagePath
    ) -> Result[None, CauldronError]:
        return self._add_package(descriptor, "js_api_impls", "JS API implementation", impl)

    def remove_js_api_impl(
        self, descriptor: NativeApplicationDescriptor, impl: PackagePath
    ) -> Result[None, CauldronError]:
        return self._remove_package(descriptor, "js_api_impls", "JS API implementation", impl)

    def add_or_update_lock_file(
        self, descriptor: NativeApplicationDescriptor, key: str, content: str
    ) -> Result[str, CauldronError]:
        """Store lock-file content and point ``key`` at it. Returns the reference."""
        reference = hashlib.sha256(content.encode("utf-8")).hexdigest()
        updated = self._mutate(
            descriptor,
            lambda node: Ok(node.with_lock_file(key, reference)),
            blob=(reference, content),
        )
        if isinstance(updated, Err):
            return updated
        return Ok(reference)

    def update_container_version(
        self, descriptor: NativeApplicationDescriptor, container_version: str
    ) -> Result[None, CauldronError]:
        return self._mutate(
            descriptor, lambda node: Ok(replace(node, container_version=container_version))
        )
