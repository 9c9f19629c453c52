"""Resolve descriptors whose version part is an npm-style range."""

from __future__ import annotations

from ern.core.result import Err, Ok, Result
from ern.output.console import ConsoleProtocol
from ern.services.cauldron.descriptor import NativeApplicationDescriptor
from ern.services.cauldron.errors import CauldronError
from ern.services.cauldron.semver import normalize_to_semver, parse_range, parse_semver
from ern.services.cauldron.store import VersionStore


def normalize_versions_to_semver(versions: list[str]) -> list[str | None]:
    """Normalize each raw version; None where it cannot be normalized."""
    return [normalize_to_semver(v) for v in versions]


def match_against_range(
    store: VersionStore,
    descriptor: NativeApplicationDescriptor,
    console: ConsoleProtocol,
) -> Result[list[NativeApplicationDescriptor], CauldronError]:
    """Descriptors of ``name:platform`` whose version satisfies ``descriptor.version``.

    Matching uses normalized versions, but the returned descriptors carry the
    raw version strings, in store order. Raw versions that cannot be read as
    semver are skipped with a warning.
    """
    if descriptor.platform is None or descriptor.version is None:
        return Err(
            CauldronError(
                kind="invalid_input",
                message=f"{descriptor} must specify a platform and a version range",
                hint="expected name:platform:range (e.g. myapp:android:^1.0)",
            )
        )

    version_range = parse_range(descriptor.version)
    if version_range is None:
        return Err(
            CauldronError(
                kind="invalid_input",
                message=f"invalid version range: {descriptor.version!r}",
            )
        )

    names = store.get_versions_names(descriptor.without_version())
    if isinstance(names, Err):
        return names

    matches: list[NativeApplicationDescriptor] = []
    for raw in names.value:
        parsed = parse_semver(normalize_to_semver(raw) or "")
        if parsed is None:
            skipped = descriptor.with_version(raw)
            console.warning(f"skipping {skipped} (version is not semver compatible)")
            continue
        if version_range.satisfied_by(parsed):
            matches.append(descriptor.with_version(raw))
    return Ok(matches)
