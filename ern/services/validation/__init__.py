"""Precondition checks run before any cauldron mutation."""

from __future__ import annotations

from ern.services.validation.base import ValidationCheck, ValidationContext, ValidationError
from ern.services.validation.checks import (
    CHECKS,
    CHECKS_BY_NAME,
    ContainerPackagesArgs,
    ContainerVersionArgs,
    DescriptorArgs,
    DescriptorsArgs,
    NameArgs,
    NewerContainerVersionArgs,
    NoArgs,
    PathsArgs,
)
from ern.services.validation.engine import CheckRequest, ValidationEngine

__all__ = [
    "CHECKS",
    "CHECKS_BY_NAME",
    "CheckRequest",
    "ContainerPackagesArgs",
    "ContainerVersionArgs",
    "DescriptorArgs",
    "DescriptorsArgs",
    "NameArgs",
    "NewerContainerVersionArgs",
    "NoArgs",
    "PathsArgs",
    "ValidationCheck",
    "ValidationContext",
    "ValidationEngine",
    "ValidationError",
]
