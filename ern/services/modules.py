"""Naming helpers for new MiniApp / API / API implementation modules."""

from __future__ import annotations

from enum import Enum

from ern.services.decisions import DecisionProvider
from ern.services.registry import PackageRegistry


class ModuleType(Enum):
    MINIAPP = "MiniApp"
    API = "Api"
    JS_API_IMPL = "ApiImplJs"
    NATIVE_API_IMPL = "ApiImplNative"

    @property
    def suffix(self) -> str:
        return self.value


def module_name_has_suffix(name: str, module_type: ModuleType) -> bool:
    """Case-insensitive check that ``name`` already carries the type's suffix."""
    if not name:
        return False
    return module_type.suffix.upper() in name.upper()


def suffixed_module_name(name: str, module_type: ModuleType) -> str:
    return f"{name}{module_type.suffix}"


def prompt_suffixed_module_name(
    name: str, module_type: ModuleType, decisions: DecisionProvider
) -> str:
    """Offer the suffixed name; return whichever name the user settles on."""
    suffixed = suffixed_module_name(name, module_type)
    accepted = decisions.confirm(
        f"We recommend suffixing the name of {name} with {module_type.suffix}, "
        f"Do you want to use {suffixed}?",
        default=True,
    )
    return suffixed if accepted else name


def perform_pkg_name_conflict_check(
    name: str, registry: PackageRegistry, decisions: DecisionProvider
) -> bool:
    """True if it is fine to go on with ``name`` (free, or the user accepts the clash)."""
    if not registry.package_exists(name):
        return True
    return decisions.confirm(
        f"The package with name {name} is already published in NPM registry. "
        "Do you wish to continue?",
        default=False,
    )
