"""Let the user pick native application versions from the cauldron."""

from __future__ import annotations

from ern.core.result import Err, Ok, Result
from ern.services.cauldron.descriptor import (
    NativeApplicationDescriptor,
    Platform,
    parse_descriptor,
)
from ern.services.cauldron.errors import CauldronError
from ern.services.cauldron.store import VersionStore
from ern.services.decisions import DecisionProvider

_NOTHING_QUALIFIES = "Could not find any qualifying native application version in the Cauldron"


def _candidates(
    store: VersionStore,
    *,
    platform: Platform | None,
    only_released: bool,
    only_non_released: bool,
) -> Result[list[str], CauldronError]:
    candidates = store.descriptor_strings(
        platform=platform,
        only_released=only_released,
        only_non_released=only_non_released,
    )
    if not candidates:
        return Err(CauldronError(kind="not_found", message=_NOTHING_QUALIFIES))
    return Ok(candidates)


def _parse_all(texts: list[str]) -> Result[list[NativeApplicationDescriptor], CauldronError]:
    out: list[NativeApplicationDescriptor] = []
    for text in texts:
        parsed = parse_descriptor(text)
        if isinstance(parsed, Err):
            return parsed
        out.append(parsed.value)
    return Ok(out)


def choose_descriptor(
    store: VersionStore,
    decisions: DecisionProvider,
    *,
    platform: Platform | None = None,
    only_released: bool = False,
    only_non_released: bool = False,
    message: str = "Choose a native application version",
) -> Result[NativeApplicationDescriptor, CauldronError]:
    candidates = _candidates(
        store,
        platform=platform,
        only_released=only_released,
        only_non_released=only_non_released,
    )
    if isinstance(candidates, Err):
        return candidates
    return parse_descriptor(decisions.choose_one(message, candidates.value))


def choose_descriptors(
    store: VersionStore,
    decisions: DecisionProvider,
    *,
    platform: Platform | None = None,
    only_released: bool = False,
    only_non_released: bool = False,
    message: str = "Choose one or more native application versions",
) -> Result[list[NativeApplicationDescriptor], CauldronError]:
    candidates = _candidates(
        store,
        platform=platform,
        only_released=only_released,
        only_non_released=only_non_released,
    )
    if isinstance(candidates, Err):
        return candidates
    return _parse_all(decisions.choose_many(message, candidates.value))
