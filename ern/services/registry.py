"""Thin probes against the npm registry."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ern.core.config import DEFAULT_NPM_COMMAND, RegistryConfig
from ern.core.result import Err, Ok, Result
from ern.core.structured import as_str_dict
from ern.platform.process import run as run_process
from ern.services.cauldron.package_path import PackagePath


@dataclass(frozen=True, slots=True)
class RegistryError:
    message: str
    hint: str | None = None


class PackageRegistry(Protocol):
    def package_exists(self, name: str) -> bool: ...

    def is_published(self, package: PackagePath) -> bool: ...

    def dependencies(self, package: PackagePath) -> Result[dict[str, str], RegistryError]: ...


class NpmRegistry:
    """Registry probes through ``npm view``.

    Existence probes never fail: any lookup error means "does not exist".
    """

    def __init__(
        self,
        *,
        cwd: Path,
        npm: str = DEFAULT_NPM_COMMAND,
        timeout: float | None = None,
    ) -> None:
        self._cwd = cwd
        self._npm = npm
        self._timeout = timeout

    @classmethod
    def from_config(cls, config: RegistryConfig, *, cwd: Path) -> NpmRegistry:
        return cls(cwd=cwd, npm=config.npm, timeout=config.timeout)

    def _view(self, *args: str) -> Result[str, RegistryError]:
        result = run_process([self._npm, "view", *args], cwd=self._cwd, timeout=self._timeout)
        if isinstance(result, Err):
            return Err(
                RegistryError(
                    message=f"npm view {args[0]} failed",
                    hint=result.error.stderr.strip() or None,
                )
            )
        return Ok(result.value)

    def package_exists(self, name: str) -> bool:
        out = self._view(name, "name")
        return isinstance(out, Ok) and bool(out.value.strip())

    def is_published(self, package: PackagePath) -> bool:
        if not package.is_registry_path:
            return False
        out = self._view(package.raw, "version")
        return isinstance(out, Ok) and bool(out.value.strip())

    def dependencies(self, package: PackagePath) -> Result[dict[str, str], RegistryError]:
        """Declared dependencies of a published package (name -> range)."""
        out = self._view(package.raw, "dependencies", "--json")
        if isinstance(out, Err):
            return out

        text = out.value.strip()
        if not text:
            return Ok({})
        try:
            obj: object = json.loads(text)
        except json.JSONDecodeError as e:
            return Err(RegistryError(message=f"unexpected npm output for {package}", hint=str(e)))

        data = as_str_dict(obj)
        if data is None:
            return Err(RegistryError(message=f"unexpected npm output for {package}"))
        return Ok({k: v for k, v in data.items() if isinstance(v, str)})
