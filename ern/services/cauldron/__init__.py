"""The cauldron: versioned release descriptors of native applications."""

from __future__ import annotations

from ern.services.cauldron.descriptor import (
    PLATFORMS,
    NativeApplicationDescriptor,
    Platform,
    is_complete,
    parse_descriptor,
)
from ern.services.cauldron.errors import CauldronError, CauldronErrorKind
from ern.services.cauldron.medium import DurableMedium, FileMedium, GitMedium, InMemoryMedium
from ern.services.cauldron.model import CauldronData, GeneratorConfig, PublisherSpec, VersionNode
from ern.services.cauldron.package_path import PackagePath
from ern.services.cauldron.resolver import match_against_range, normalize_versions_to_semver
from ern.services.cauldron.semver import normalize_to_semver
from ern.services.cauldron.store import VersionStore
from ern.services.cauldron.transaction import TransactionManager

__all__ = [
    "PLATFORMS",
    "CauldronData",
    "CauldronError",
    "CauldronErrorKind",
    "DurableMedium",
    "FileMedium",
    "GeneratorConfig",
    "GitMedium",
    "InMemoryMedium",
    "NativeApplicationDescriptor",
    "PackagePath",
    "Platform",
    "PublisherSpec",
    "TransactionManager",
    "VersionNode",
    "VersionStore",
    "is_complete",
    "match_against_range",
    "normalize_to_semver",
    "normalize_versions_to_semver",
    "parse_descriptor",
]
