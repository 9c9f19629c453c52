"""Package paths for native dependencies, MiniApps and JS API implementations.

A package path is either a registry package (``name`` or ``name@version``,
scoped names allowed) or a git / file system location.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_GIT_RE = re.compile(r"^(git\+|git://|git@|github:|gitlab:|bitbucket:|https?://)|\.git(#.*)?$")
_FILE_PREFIXES = ("file:", "/", "./", "../", "~/")


@dataclass(frozen=True, slots=True)
class PackagePath:
    raw: str

    @classmethod
    def parse(cls, text: str) -> PackagePath:
        return cls(raw=text.strip())

    @property
    def is_git_path(self) -> bool:
        return _GIT_RE.search(self.raw) is not None

    @property
    def is_file_path(self) -> bool:
        return self.raw.startswith(_FILE_PREFIXES) or self.raw in (".", "..")

    @property
    def is_registry_path(self) -> bool:
        return not self.is_git_path and not self.is_file_path

    @property
    def name(self) -> str:
        if not self.is_registry_path:
            return self.raw
        at = self.raw.rfind("@")
        if at <= 0:
            return self.raw
        return self.raw[:at]

    @property
    def version(self) -> str | None:
        if not self.is_registry_path:
            return None
        at = self.raw.rfind("@")
        if at <= 0:
            return None
        return self.raw[at + 1 :] or None

    def same_name(self, other: PackagePath) -> bool:
        return self.name == other.name

    def same_name_and_version(self, other: PackagePath) -> bool:
        return self.name == other.name and self.version == other.version

    def __str__(self) -> str:
        return self.raw


def find_by_name(paths: list[PackagePath], target: PackagePath) -> PackagePath | None:
    """Return the first path sharing ``target``'s package name."""
    for path in paths:
        if path.same_name(target):
            return path
    return None
