"""Semantic versions and npm-style version ranges.

Native application versions in the cauldron are raw strings ("17", "1.2",
"4.0.1-beta") and are never rewritten. ``normalize_to_semver`` maps them to a
three-component form for comparison only.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Literal

_SEMVER_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)

_FULL_PREFIX_RE = re.compile(r"^\d+\.\d+\.\d+")
_MISSING_PATCH_RE = re.compile(r"^(\d+\.\d+)(.*)$", re.DOTALL)
_MISSING_MINOR_RE = re.compile(r"^(\d+)(.*)$", re.DOTALL)

_NUMERIC_PREFIX_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)")
_CONTAINER_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+$")

_WILDCARDS = ("x", "X", "*")
_PARTIAL_RE = re.compile(
    r"^v?(\d+|[xX*])(?:\.(\d+|[xX*])(?:\.(\d+|[xX*])"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?)?)?$"
)
_COMPARATOR_RE = re.compile(r"^(<=|>=|<|>|=|~>|~|\^)?(.*)$")
_HYPHEN_RE = re.compile(r"^\s*(\S+)\s+-\s+(\S+)\s*$")
_OP_SPACE_RE = re.compile(r"(<=|>=|<|>|=|~>|~|\^)\s+")

Operator = Literal["<", "<=", ">", ">=", "="]


def _prerelease_key(prerelease: tuple[str, ...]) -> tuple[tuple[int, int, str], ...]:
    # Numeric identifiers sort before alphanumeric ones.
    return tuple((0, int(p), "") if p.isdigit() else (1, 0, p) for p in prerelease)


@total_ordering
@dataclass(frozen=True, slots=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = field(default=(), compare=False)

    @property
    def core(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def _key(self) -> tuple[object, ...]:
        # A release sorts after all of its prereleases.
        return (*self.core, 0 if self.prerelease else 1, _prerelease_key(self.prerelease))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() < other._key()

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        return text


def parse_semver(text: str) -> SemVer | None:
    m = _SEMVER_RE.match(text.strip())
    if m is None:
        return None
    prerelease = tuple(m.group(4).split(".")) if m.group(4) else ()
    build = tuple(m.group(5).split(".")) if m.group(5) else ()
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)), prerelease, build)


def normalize_to_semver(raw: str) -> str | None:
    """Best-effort three-component form of a raw version, for comparison only.

    "1.2.3-beta" -> "1.2.3-beta", "1.2" -> "1.2.0", "17" -> "17.0.0".
    Returns None when the raw version does not start with a number.
    """
    if _FULL_PREFIX_RE.match(raw):
        return raw
    m = _MISSING_PATCH_RE.match(raw)
    if m is not None:
        return f"{m.group(1)}.0{m.group(2)}"
    m = _MISSING_MINOR_RE.match(raw)
    if m is not None:
        return f"{m.group(1)}.0.0{m.group(2)}"
    return None


def is_valid_container_version(version: str) -> bool:
    return _CONTAINER_VERSION_RE.match(version) is not None


def bump_patch(version: str) -> str | None:
    """Increment the patch component of a ``major.minor.patch`` prefix.

    Anything after the numeric prefix is dropped. Returns None when there is
    no numeric prefix to bump.
    """
    m = _NUMERIC_PREFIX_RE.match(version.strip())
    if m is None:
        return None
    return f"{int(m.group(1))}.{int(m.group(2))}.{int(m.group(3)) + 1}"


def is_newer(candidate: str, current: str) -> bool | None:
    """Return True if candidate > current, None if either cannot be compared."""
    a = parse_semver(normalize_to_semver(candidate) or "")
    b = parse_semver(normalize_to_semver(current) or "")
    if a is None or b is None:
        return None
    return a > b


# -----------------------------------------------------------------------------
# Ranges
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Comparator:
    op: Operator
    version: SemVer

    def test(self, version: SemVer) -> bool:
        match self.op:
            case "<":
                return version < self.version
            case "<=":
                return version <= self.version
            case ">":
                return version > self.version
            case ">=":
                return version >= self.version
            case "=":
                return version == self.version


@dataclass(frozen=True, slots=True)
class VersionRange:
    """A union (``||``) of comparator sets; each set is an intersection."""

    raw: str
    sets: tuple[tuple[Comparator, ...], ...]

    def satisfied_by(self, version: SemVer) -> bool:
        return any(_set_satisfied(comparators, version) for comparators in self.sets)


def _set_satisfied(comparators: tuple[Comparator, ...], version: SemVer) -> bool:
    if not all(c.test(version) for c in comparators):
        return False
    if not version.prerelease:
        return True
    # Prereleases only match a set that names a prerelease of the same core version.
    return any(c.version.prerelease and c.version.core == version.core for c in comparators)


@dataclass(frozen=True, slots=True)
class _Partial:
    major: int | None
    minor: int | None
    patch: int | None
    prerelease: tuple[str, ...]


def _parse_partial(text: str) -> _Partial | None:
    if text == "":
        return _Partial(None, None, None, ())
    m = _PARTIAL_RE.match(text)
    if m is None:
        return None

    def num(group: str | None) -> int | None:
        if group is None or group in _WILDCARDS:
            return None
        return int(group)

    major, minor, patch = num(m.group(1)), num(m.group(2)), num(m.group(3))
    # "1.x.3" is treated as "1.x"
    if major is None:
        minor = None
    if minor is None:
        patch = None
    prerelease = tuple(m.group(4).split(".")) if m.group(4) and patch is not None else ()
    return _Partial(major, minor, patch, prerelease)


_NOTHING = (Comparator("<", SemVer(0, 0, 0, ("0",))),)


def _exact(p: _Partial) -> SemVer:
    return SemVer(p.major or 0, p.minor or 0, p.patch or 0, p.prerelease)


def _desugar(op: str, p: _Partial) -> tuple[Comparator, ...]:
    if op in ("", "="):
        if p.major is None:
            return ()
        if p.minor is None:
            return (
                Comparator(">=", SemVer(p.major, 0, 0)),
                Comparator("<", SemVer(p.major + 1, 0, 0)),
            )
        if p.patch is None:
            return (
                Comparator(">=", SemVer(p.major, p.minor, 0)),
                Comparator("<", SemVer(p.major, p.minor + 1, 0)),
            )
        return (Comparator("=", _exact(p)),)

    if op in ("~", "~>"):
        if p.major is None:
            return ()
        if p.minor is None:
            return _desugar("", p)
        return (
            Comparator(">=", _exact(p)),
            Comparator("<", SemVer(p.major, p.minor + 1, 0)),
        )

    if op == "^":
        if p.major is None:
            return ()
        if p.minor is None:
            return _desugar("", p)
        lower = Comparator(">=", _exact(p))
        if p.major > 0:
            upper = SemVer(p.major + 1, 0, 0)
        elif p.minor > 0 or p.patch is None:
            upper = SemVer(0, p.minor + 1, 0)
        else:
            upper = SemVer(0, 0, p.patch + 1)
        return (lower, Comparator("<", upper))

    if op == ">":
        if p.major is None:
            return _NOTHING
        if p.minor is None:
            return (Comparator(">=", SemVer(p.major + 1, 0, 0)),)
        if p.patch is None:
            return (Comparator(">=", SemVer(p.major, p.minor + 1, 0)),)
        return (Comparator(">", _exact(p)),)

    if op == ">=":
        if p.major is None:
            return ()
        return (Comparator(">=", _exact(p)),)

    if op == "<":
        if p.major is None:
            return _NOTHING
        return (Comparator("<", _exact(p)),)

    if op == "<=":
        if p.major is None:
            return ()
        if p.minor is None:
            return (Comparator("<", SemVer(p.major + 1, 0, 0)),)
        if p.patch is None:
            return (Comparator("<", SemVer(p.major, p.minor + 1, 0)),)
        return (Comparator("<=", _exact(p)),)

    raise AssertionError(f"unexpected range operator: {op}")


def _parse_hyphen(low: str, high: str) -> tuple[Comparator, ...] | None:
    lo = _parse_partial(low)
    hi = _parse_partial(high)
    if lo is None or hi is None:
        return None
    comparators: list[Comparator] = []
    if lo.major is not None:
        comparators.append(Comparator(">=", _exact(lo)))
    if hi.major is not None:
        comparators.extend(_desugar("<=", hi))
    return tuple(comparators)


def _parse_set(text: str) -> tuple[Comparator, ...] | None:
    hyphen = _HYPHEN_RE.match(text)
    if hyphen is not None:
        return _parse_hyphen(hyphen.group(1), hyphen.group(2))

    comparators: list[Comparator] = []
    for token in _OP_SPACE_RE.sub(r"\1", text).split():
        m = _COMPARATOR_RE.match(token)
        if m is None:
            return None
        partial = _parse_partial(m.group(2))
        if partial is None:
            return None
        comparators.extend(_desugar(m.group(1) or "", partial))
    return tuple(comparators)


def parse_range(text: str) -> VersionRange | None:
    """Parse an npm-style range (``>=18``, ``^1.2``, ``1.x || 2.0.0 - 2.3``).

    Returns None if any part of the range is malformed.
    """
    sets: list[tuple[Comparator, ...]] = []
    for part in text.split("||"):
        parsed = _parse_set(part.strip())
        if parsed is None:
            return None
        sets.append(parsed)
    return VersionRange(raw=text, sets=tuple(sets))


def satisfies(version: str, range_text: str) -> bool:
    """Return True if a (strict) semver string satisfies a range."""
    parsed_version = parse_semver(version)
    parsed_range = parse_range(range_text)
    if parsed_version is None or parsed_range is None:
        return False
    return parsed_range.satisfied_by(parsed_version)
