"""The fixed table of precondition checks.

Each check takes one typed argument object. Every argument object accepts an
optional ``extra_message`` that is appended to the failure text.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal

from ern.core.result import Err, Ok, Result
from ern.services.cauldron.descriptor import NativeApplicationDescriptor, parse_descriptor
from ern.services.cauldron.errors import CauldronError
from ern.services.cauldron.package_path import PackagePath, find_by_name
from ern.services.cauldron.semver import is_newer, is_valid_container_version
from ern.services.cauldron.store import VersionStore
from ern.services.validation.base import (
    OK,
    CheckResult,
    ValidationCheck,
    ValidationContext,
    ValidationError,
    Validator,
    fail,
)

_NPM_NAME_RE = re.compile(r"^(?:@[a-z0-9-~][a-z0-9-._~]*/)?[a-z0-9-~][a-z0-9-._~]*$")
_NPM_NAME_MAX_LENGTH = 214
_NPM_RESERVED_NAMES = ("node_modules", "favicon.ico")
_MODULE_NAME_RE = re.compile(r"^[a-zA-Z]+$")


# -----------------------------------------------------------------------------
# Argument types
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NoArgs:
    extra_message: str | None = None


@dataclass(frozen=True, slots=True)
class ContainerVersionArgs:
    container_version: str
    extra_message: str | None = None


@dataclass(frozen=True, slots=True)
class NewerContainerVersionArgs:
    descriptor: NativeApplicationDescriptor
    container_version: str
    extra_message: str | None = None


@dataclass(frozen=True, slots=True)
class DescriptorArgs:
    descriptor: str
    extra_message: str | None = None


@dataclass(frozen=True, slots=True)
class DescriptorsArgs:
    descriptors: tuple[str, ...]
    extra_message: str | None = None


@dataclass(frozen=True, slots=True)
class PathsArgs:
    paths: tuple[str, ...]
    extra_message: str | None = None


@dataclass(frozen=True, slots=True)
class ContainerPackagesArgs:
    packages: tuple[str, ...]
    descriptor: NativeApplicationDescriptor
    extra_message: str | None = None


@dataclass(frozen=True, slots=True)
class NameArgs:
    name: str
    extra_message: str | None = None


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _store(
    ctx: ValidationContext, check: str, extra: str | None
) -> Result[VersionStore, ValidationError]:
    if ctx.store is None:
        return fail(check, "No cauldron is active", extra)
    return Ok(ctx.store)


def _parse(
    text: str, check: str, extra: str | None
) -> Result[NativeApplicationDescriptor, ValidationError]:
    parsed = parse_descriptor(text)
    if isinstance(parsed, Err):
        return fail(check, parsed.error.message, extra)
    return parsed


def _packages_of(
    ctx: ValidationContext,
    check: str,
    args: ContainerPackagesArgs,
    read: Callable[..., Result[list[PackagePath], CauldronError]],
) -> Result[list[PackagePath], ValidationError]:
    store = _store(ctx, check, args.extra_message)
    if isinstance(store, Err):
        return store
    packages = read(store.value, args.descriptor)
    if isinstance(packages, Err):
        return fail(check, packages.error.message, args.extra_message)
    return packages


def _miniapps(
    store: VersionStore, d: NativeApplicationDescriptor
) -> Result[list[PackagePath], CauldronError]:
    return store.get_container_miniapps(d)


def _dependencies(
    store: VersionStore, d: NativeApplicationDescriptor
) -> Result[list[PackagePath], CauldronError]:
    return store.get_native_dependencies(d)


# -----------------------------------------------------------------------------
# Checks
# -----------------------------------------------------------------------------


def cauldron_is_active(ctx: ValidationContext, args: NoArgs) -> CheckResult:
    if ctx.store is None:
        detail = "No cauldron is active"
        if ctx.location is not None:
            detail = f"{detail}: {ctx.location} does not exist"
        return fail("cauldron_is_active", detail, args.extra_message)
    return OK


def check_container_version(ctx: ValidationContext, args: ContainerVersionArgs) -> CheckResult:
    del ctx
    if not is_valid_container_version(args.container_version):
        return fail(
            "is_valid_container_version",
            f"Container version {args.container_version!r} is not valid, "
            "expected major.minor.patch (e.g. 1.0.0)",
            args.extra_message,
        )
    return OK


def check_newer_container_version(
    ctx: ValidationContext, args: NewerContainerVersionArgs
) -> CheckResult:
    name = "is_newer_container_version"
    store = _store(ctx, name, args.extra_message)
    if isinstance(store, Err):
        return store
    current = store.value.get_top_level_container_version(args.descriptor)
    if isinstance(current, Err):
        return fail(name, current.error.message, args.extra_message)
    if current.value is None:
        return OK
    if is_newer(args.container_version, current.value) is not True:
        return fail(
            name,
            f"Container version {args.container_version} is not newer than the current "
            f"container version {current.value} of {args.descriptor}",
            args.extra_message,
        )
    return OK


def check_complete_descriptor(ctx: ValidationContext, args: DescriptorArgs) -> CheckResult:
    del ctx
    name = "is_complete_descriptor"
    parsed = _parse(args.descriptor, name, args.extra_message)
    if isinstance(parsed, Err):
        return parsed
    if not parsed.value.is_complete:
        return fail(
            name,
            f"{args.descriptor} is not a complete native application descriptor "
            "(expected name:platform:version)",
            args.extra_message,
        )
    return OK


def check_no_git_or_filesystem_path(ctx: ValidationContext, args: PathsArgs) -> CheckResult:
    del ctx
    offending = [p for p in args.paths if not PackagePath.parse(p).is_registry_path]
    if offending:
        return fail(
            "no_git_or_filesystem_path",
            f"Found git or file system path(s): {', '.join(offending)}",
            args.extra_message,
        )
    return OK


def check_no_filesystem_path(ctx: ValidationContext, args: PathsArgs) -> CheckResult:
    del ctx
    offending = [p for p in args.paths if PackagePath.parse(p).is_file_path]
    if offending:
        return fail(
            "no_filesystem_path",
            f"Found file system path(s): {', '.join(offending)}",
            args.extra_message,
        )
    return OK


def check_descriptor_exists(ctx: ValidationContext, args: DescriptorsArgs) -> CheckResult:
    name = "descriptor_exists"
    store = _store(ctx, name, args.extra_message)
    if isinstance(store, Err):
        return store
    for text in args.descriptors:
        parsed = _parse(text, name, args.extra_message)
        if isinstance(parsed, Err):
            return parsed
        if not store.value.has_descriptor(parsed.value):
            return fail(name, f"{text} does not exist in the cauldron", args.extra_message)
    return OK


def check_same_app_and_platform(ctx: ValidationContext, args: DescriptorsArgs) -> CheckResult:
    del ctx
    name = "same_app_and_platform"
    keys: set[tuple[str, str | None]] = set()
    for text in args.descriptors:
        parsed = _parse(text, name, args.extra_message)
        if isinstance(parsed, Err):
            return parsed
        keys.add((parsed.value.name, parsed.value.platform))
    if len(keys) > 1:
        return fail(
            name,
            "Descriptors do not all target the same native application and platform: "
            + ", ".join(args.descriptors),
            args.extra_message,
        )
    return OK


def check_descriptor_does_not_exist(ctx: ValidationContext, args: DescriptorArgs) -> CheckResult:
    name = "descriptor_does_not_exist"
    store = _store(ctx, name, args.extra_message)
    if isinstance(store, Err):
        return store
    parsed = _parse(args.descriptor, name, args.extra_message)
    if isinstance(parsed, Err):
        return parsed
    if store.value.has_descriptor(parsed.value):
        return fail(name, f"{args.descriptor} already exists in the cauldron", args.extra_message)
    return OK


def check_published_to_registry(ctx: ValidationContext, args: PathsArgs) -> CheckResult:
    for raw in args.paths:
        if not ctx.registry.is_published(PackagePath.parse(raw)):
            return fail(
                "published_to_registry",
                f"{raw} is not published to the npm registry",
                args.extra_message,
            )
    return OK


def _not_in_container(
    check: str, label: str, read: Callable[..., Result[list[PackagePath], CauldronError]]
) -> Validator:
    def validate(ctx: ValidationContext, args: ContainerPackagesArgs) -> CheckResult:
        current = _packages_of(ctx, check, args, read)
        if isinstance(current, Err):
            return current
        for raw in args.packages:
            found = find_by_name(current.value, PackagePath.parse(raw))
            if found is not None:
                return fail(
                    check,
                    f"{label} {found} is already in the container of {args.descriptor}",
                    args.extra_message,
                )
        return OK

    return validate


def _in_container(
    check: str,
    label: str,
    read: Callable[..., Result[list[PackagePath], CauldronError]],
    version: Literal["different", "same"] | None = None,
) -> Validator:
    """Presence check, optionally also comparing versions."""

    def validate(ctx: ValidationContext, args: ContainerPackagesArgs) -> CheckResult:
        current = _packages_of(ctx, check, args, read)
        if isinstance(current, Err):
            return current
        for raw in args.packages:
            wanted = PackagePath.parse(raw)
            found = find_by_name(current.value, wanted)
            if found is None:
                return fail(
                    check,
                    f"{label} {wanted.name} is not in the container of {args.descriptor}",
                    args.extra_message,
                )
            if version == "different" and found.same_name_and_version(wanted):
                return fail(
                    check,
                    f"{label} {raw} is already in the container of {args.descriptor} "
                    "with the same version",
                    args.extra_message,
                )
            if version == "same" and not found.same_name_and_version(wanted):
                return fail(
                    check,
                    f"{label} {raw} is in the container of {args.descriptor} "
                    f"with a different version ({found})",
                    args.extra_message,
                )
        return OK

    return validate


def check_dependency_not_in_use_by_miniapp(
    ctx: ValidationContext, args: ContainerPackagesArgs
) -> CheckResult:
    """No MiniApp of the container declares a dependency on any of the packages.

    A MiniApp whose dependencies cannot be read counts as using them.
    """
    name = "dependency_not_in_use_by_miniapp"
    miniapps = _packages_of(ctx, name, args, _miniapps)
    if isinstance(miniapps, Err):
        return miniapps

    wanted = [PackagePath.parse(raw).name for raw in args.packages]
    for miniapp in miniapps.value:
        deps = ctx.registry.dependencies(miniapp)
        if isinstance(deps, Err):
            return fail(
                name,
                f"Could not inspect the dependencies of MiniApp {miniapp}: {deps.error.message}",
                args.extra_message,
            )
        for dep in wanted:
            if dep in deps.value:
                return fail(
                    name,
                    f"Dependency {dep} is used by MiniApp {miniapp}",
                    args.extra_message,
                )
    return OK


def check_npm_package_name(ctx: ValidationContext, args: NameArgs) -> CheckResult:
    del ctx
    name = args.name
    if (
        not name
        or len(name) > _NPM_NAME_MAX_LENGTH
        or name in _NPM_RESERVED_NAMES
        or _NPM_NAME_RE.match(name) is None
        or name.startswith((".", "_"))
    ):
        return fail(
            "is_valid_npm_package_name",
            f"{name!r} is not a valid npm package name",
            args.extra_message,
        )
    return OK


def check_module_name(ctx: ValidationContext, args: NameArgs) -> CheckResult:
    del ctx
    if _MODULE_NAME_RE.match(args.name) is None:
        return fail(
            "is_valid_module_name",
            f"{args.name!r} is not a valid module name (only letters are allowed)",
            args.extra_message,
        )
    return OK


# -----------------------------------------------------------------------------
# Table
# -----------------------------------------------------------------------------


def _check(
    name: str, priority: int, description: str, args_type: type, validate: Validator
) -> ValidationCheck:
    return ValidationCheck(
        name=name,
        priority=priority,
        description=description,
        args_type=args_type,
        validate=validate,
    )


CHECKS: tuple[ValidationCheck, ...] = (
    _check(
        "cauldron_is_active", 1,
        "Ensuring that a cauldron is active",
        NoArgs, cauldron_is_active,
    ),
    _check(
        "is_valid_container_version", 2,
        "Ensuring that container version is valid",
        ContainerVersionArgs, check_container_version,
    ),
    _check(
        "is_newer_container_version", 3,
        "Ensuring that container version is newer than the current one",
        NewerContainerVersionArgs, check_newer_container_version,
    ),
    _check(
        "is_complete_descriptor", 4,
        "Ensuring that native application descriptor is complete",
        DescriptorArgs, check_complete_descriptor,
    ),
    _check(
        "no_git_or_filesystem_path", 5,
        "Ensuring that no git or file system path is used",
        PathsArgs, check_no_git_or_filesystem_path,
    ),
    _check(
        "no_filesystem_path", 5,
        "Ensuring that no file system path is used",
        PathsArgs, check_no_filesystem_path,
    ),
    _check(
        "descriptor_exists", 6,
        "Ensuring that native application descriptor exists in the cauldron",
        DescriptorsArgs, check_descriptor_exists,
    ),
    _check(
        "same_app_and_platform", 7,
        "Ensuring that all descriptors target the same native application and platform",
        DescriptorsArgs, check_same_app_and_platform,
    ),
    _check(
        "descriptor_does_not_exist", 8,
        "Ensuring that native application descriptor does not exist in the cauldron",
        DescriptorArgs, check_descriptor_does_not_exist,
    ),
    _check(
        "published_to_registry", 9,
        "Ensuring that package versions have been published to npm",
        PathsArgs, check_published_to_registry,
    ),
    _check(
        "miniapp_not_in_container", 10,
        "Ensuring that MiniApps are not in the container",
        ContainerPackagesArgs, _not_in_container("miniapp_not_in_container", "MiniApp", _miniapps),
    ),
    _check(
        "miniapp_in_container", 10,
        "Ensuring that MiniApps are in the container",
        ContainerPackagesArgs, _in_container("miniapp_in_container", "MiniApp", _miniapps),
    ),
    _check(
        "miniapp_in_container_with_different_version", 10,
        "Ensuring that MiniApps are in the container with a different version",
        ContainerPackagesArgs,
        _in_container(
            "miniapp_in_container_with_different_version", "MiniApp", _miniapps, "different"
        ),
    ),
    _check(
        "miniapp_in_container_with_same_version", 10,
        "Ensuring that MiniApps are in the container with the same version",
        ContainerPackagesArgs,
        _in_container("miniapp_in_container_with_same_version", "MiniApp", _miniapps, "same"),
    ),
    _check(
        "dependency_not_in_container", 11,
        "Ensuring that dependencies are not in the container",
        ContainerPackagesArgs,
        _not_in_container("dependency_not_in_container", "Dependency", _dependencies),
    ),
    _check(
        "dependency_in_container", 11,
        "Ensuring that dependencies are in the container",
        ContainerPackagesArgs,
        _in_container("dependency_in_container", "Dependency", _dependencies),
    ),
    _check(
        "dependency_in_container_with_different_version", 11,
        "Ensuring that dependencies are in the container with a different version",
        ContainerPackagesArgs,
        _in_container(
            "dependency_in_container_with_different_version", "Dependency", _dependencies,
            "different",
        ),
    ),
    _check(
        "dependency_not_in_use_by_miniapp", 11,
        "Ensuring that no MiniApp uses the dependencies",
        ContainerPackagesArgs, check_dependency_not_in_use_by_miniapp,
    ),
    _check(
        "is_valid_npm_package_name", 12,
        "Ensuring that npm package name is valid",
        NameArgs, check_npm_package_name,
    ),
    _check(
        "is_valid_module_name", 13,
        "Ensuring that module name is valid",
        NameArgs, check_module_name,
    ),
)

CHECKS_BY_NAME: MappingProxyType[str, ValidationCheck] = MappingProxyType(
    {check.name: check for check in CHECKS}
)
