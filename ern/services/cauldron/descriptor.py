"""Native application descriptors.

A descriptor identifies a native application release, optionally scoped to a
platform and a version: ``name[:platform[:version]]``. Complete descriptors
address a single version node; partial ones are used as query patterns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, cast

from ern.core.result import Err, Ok, Result
from ern.services.cauldron.errors import CauldronError

Platform = Literal["android", "ios"]
PLATFORMS: tuple[Platform, ...] = ("android", "ios")

SEPARATOR = ":"


def is_valid_part(value: str) -> bool:
    """A name or version that survives a format then parse cycle unchanged."""
    return bool(value) and value == value.strip() and SEPARATOR not in value


@dataclass(frozen=True, slots=True)
class NativeApplicationDescriptor:
    name: str
    platform: Platform | None = None
    version: str | None = None

    def __post_init__(self) -> None:
        if not is_valid_part(self.name):
            raise ValueError(f"invalid application name: {self.name!r}")
        if self.platform is not None and self.platform not in PLATFORMS:
            raise ValueError(f"unsupported platform: {self.platform!r}")
        if self.version is not None:
            if self.platform is None:
                raise ValueError(f"descriptor {self.name} has a version but no platform")
            if not is_valid_part(self.version):
                raise ValueError(f"invalid version: {self.version!r}")

    @property
    def is_complete(self) -> bool:
        return self.platform is not None and self.version is not None

    def with_version(self, version: str) -> NativeApplicationDescriptor:
        return NativeApplicationDescriptor(self.name, self.platform, version)

    def without_version(self) -> NativeApplicationDescriptor:
        return NativeApplicationDescriptor(self.name, self.platform)

    def __str__(self) -> str:
        parts = [self.name]
        if self.platform is not None:
            parts.append(self.platform)
        if self.version is not None:
            parts.append(self.version)
        return SEPARATOR.join(parts)


def parse_descriptor(text: str) -> Result[NativeApplicationDescriptor, CauldronError]:
    """Parse ``name[:platform[:version]]``.

    The version part is kept verbatim (it may be a raw version or a range).
    """
    parts = text.strip().split(SEPARATOR)
    if len(parts) > 3:
        return Err(
            CauldronError(
                kind="malformed_descriptor",
                message=f"malformed descriptor: {text!r}",
                hint="expected name:platform:version",
            )
        )

    name = parts[0].strip()
    if not name:
        return Err(
            CauldronError(
                kind="malformed_descriptor",
                message=f"descriptor is missing an application name: {text!r}",
            )
        )

    platform: Platform | None = None
    if len(parts) >= 2:
        raw_platform = parts[1].strip()
        if raw_platform not in PLATFORMS:
            return Err(
                CauldronError(
                    kind="malformed_descriptor",
                    message=f"unsupported platform {raw_platform!r} in descriptor {text!r}",
                    hint="platform must be android or ios",
                )
            )
        platform = cast(Platform, raw_platform)

    version: str | None = None
    if len(parts) == 3:
        version = parts[2].strip()
        if not version:
            return Err(
                CauldronError(
                    kind="malformed_descriptor",
                    message=f"descriptor has an empty version: {text!r}",
                )
            )

    return Ok(NativeApplicationDescriptor(name=name, platform=platform, version=version))


def is_complete(descriptor: NativeApplicationDescriptor) -> bool:
    return descriptor.is_complete
