"""Cauldron operations that change a container.

Each operation validates its preconditions first, then applies its change and
publishes a new container inside a single transaction.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ern.core.result import Err, Ok, Result
from ern.services.cauldron.descriptor import NativeApplicationDescriptor
from ern.services.cauldron.errors import CauldronError
from ern.services.cauldron.package_path import PackagePath
from ern.services.cauldron.store import VersionStore
from ern.services.cauldron.transaction import TransactionManager
from ern.services.container.orchestrator import (
    ContainerPublicationOrchestrator,
    PublicationOutcome,
    perform_container_state_update,
)
from ern.services.validation import (
    CheckRequest,
    ContainerPackagesArgs,
    ContainerVersionArgs,
    DescriptorArgs,
    DescriptorsArgs,
    NewerContainerVersionArgs,
    NoArgs,
    PathsArgs,
    ValidationEngine,
    ValidationError,
)

type OperationError = CauldronError | ValidationError
type OperationResult = Result[PublicationOutcome, OperationError]
type PackageUpdate = Callable[
    [VersionStore, NativeApplicationDescriptor, PackagePath], Result[None, CauldronError]
]


@dataclass(frozen=True, slots=True)
class CauldronOperations:
    tm: TransactionManager
    orchestrator: ContainerPublicationOrchestrator
    validation: ValidationEngine

    def _common_checks(
        self, descriptor: NativeApplicationDescriptor, container_version: str | None
    ) -> list[CheckRequest]:
        checks: list[CheckRequest] = [
            ("cauldron_is_active", NoArgs()),
            ("is_complete_descriptor", DescriptorArgs(str(descriptor))),
            ("descriptor_exists", DescriptorsArgs((str(descriptor),))),
        ]
        if container_version is not None:
            checks += [
                ("is_valid_container_version", ContainerVersionArgs(container_version)),
                (
                    "is_newer_container_version",
                    NewerContainerVersionArgs(descriptor, container_version),
                ),
            ]
        return checks

    def _update(
        self,
        checks: list[CheckRequest],
        descriptor: NativeApplicationDescriptor,
        packages: list[PackagePath],
        apply: PackageUpdate | None,
        message: list[str],
        container_version: str | None,
    ) -> OperationResult:
        validated = self.validation.run(checks)
        if isinstance(validated, Err):
            return validated

        def body(store: VersionStore) -> Result[None, CauldronError]:
            if apply is None:
                return Ok(None)
            for package in packages:
                result = apply(store, descriptor, package)
                if isinstance(result, Err):
                    return result
            return Ok(None)

        return perform_container_state_update(
            self.tm,
            self.orchestrator,
            body,
            descriptor=descriptor,
            message=message,
            container_version=container_version,
        )

    def remove_dependency(
        self,
        descriptor: NativeApplicationDescriptor,
        dependency: str,
        *,
        container_version: str | None = None,
    ) -> OperationResult:
        checks = self._common_checks(descriptor, container_version)
        packages = ContainerPackagesArgs((dependency,), descriptor)
        checks += [
            ("dependency_in_container", packages),
            ("dependency_not_in_use_by_miniapp", packages),
        ]
        return self._update(
            checks,
            descriptor,
            [PackagePath.parse(dependency)],
            VersionStore.remove_native_dependency,
            [f"Remove {dependency} dependency from {descriptor}"],
            container_version,
        )

    def add_miniapps(
        self,
        descriptor: NativeApplicationDescriptor,
        miniapps: Sequence[str],
        *,
        container_version: str | None = None,
    ) -> OperationResult:
        checks = self._common_checks(descriptor, container_version)
        registry_paths = tuple(m for m in miniapps if PackagePath.parse(m).is_registry_path)
        checks += [
            ("no_filesystem_path", PathsArgs(tuple(miniapps))),
            ("published_to_registry", PathsArgs(registry_paths)),
            ("miniapp_not_in_container", ContainerPackagesArgs(tuple(miniapps), descriptor)),
        ]
        return self._update(
            checks,
            descriptor,
            [PackagePath.parse(m) for m in miniapps],
            VersionStore.add_miniapp,
            [f"Add {m} MiniApp to {descriptor}" for m in miniapps],
            container_version,
        )

    def update_miniapps(
        self,
        descriptor: NativeApplicationDescriptor,
        miniapps: Sequence[str],
        *,
        container_version: str | None = None,
    ) -> OperationResult:
        checks = self._common_checks(descriptor, container_version)
        checks += [
            ("no_git_or_filesystem_path", PathsArgs(tuple(miniapps))),
            ("published_to_registry", PathsArgs(tuple(miniapps))),
            (
                "miniapp_in_container_with_different_version",
                ContainerPackagesArgs(tuple(miniapps), descriptor),
            ),
        ]
        return self._update(
            checks,
            descriptor,
            [PackagePath.parse(m) for m in miniapps],
            VersionStore.update_miniapp,
            [f"Update {m} MiniApp in {descriptor}" for m in miniapps],
            container_version,
        )

    def remove_miniapps(
        self,
        descriptor: NativeApplicationDescriptor,
        miniapps: Sequence[str],
        *,
        container_version: str | None = None,
    ) -> OperationResult:
        checks = self._common_checks(descriptor, container_version)
        checks.append(("miniapp_in_container", ContainerPackagesArgs(tuple(miniapps), descriptor)))
        return self._update(
            checks,
            descriptor,
            [PackagePath.parse(m) for m in miniapps],
            VersionStore.remove_miniapp,
            [f"Remove {m} MiniApp from {descriptor}" for m in miniapps],
            container_version,
        )

    def regenerate_container(
        self,
        descriptor: NativeApplicationDescriptor,
        *,
        container_version: str | None = None,
    ) -> OperationResult:
        return self._update(
            self._common_checks(descriptor, container_version),
            descriptor,
            [],
            None,
            [f"Regenerate container for {descriptor}"],
            container_version,
        )
