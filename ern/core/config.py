"""Typed configuration loading and access.

Configuration lives in an ``ern.toml`` file:

    [cauldron]
    path = "cauldron"          # directory holding cauldron.json
    git = true                 # commit every transaction into a git repo

    [container]
    containergen_dir = "~/.ern/containergen"
    maven_group_id = "com.walmartlabs.ern"
    generator = "ern-container-gen"  # <generator> <descriptor> <out_dir> <composite_dir>

    [registry]
    npm = "npm"
    timeout = 60.0
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_float, get_str, get_table

__all__ = [
    "CauldronConfig",
    "Config",
    "ConfigError",
    "ContainerConfig",
    "RegistryConfig",
    "load_config",
    "load_config_or_default",
    "DEFAULT_CONTAINERGEN_DIR",
    "DEFAULT_MAVEN_GROUP_ID",
    "DEFAULT_GENERATOR_COMMAND",
]

DEFAULT_CAULDRON_PATH = "cauldron"
DEFAULT_CONTAINERGEN_DIR = "~/.ern/containergen"
DEFAULT_MAVEN_GROUP_ID = "com.walmartlabs.ern"
DEFAULT_GENERATOR_COMMAND = "ern-container-gen"
DEFAULT_NPM_COMMAND = "npm"
DEFAULT_REGISTRY_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class CauldronConfig:
    """Where the cauldron lives and how it is persisted."""

    path: str = DEFAULT_CAULDRON_PATH
    git: bool = True


@dataclass(frozen=True, slots=True)
class ContainerConfig:
    containergen_dir: str = DEFAULT_CONTAINERGEN_DIR
    maven_group_id: str = DEFAULT_MAVEN_GROUP_ID
    generator: str = DEFAULT_GENERATOR_COMMAND

    def out_dir(self, platform: str) -> Path:
        """Container generator output directory for a platform."""
        return Path(self.containergen_dir).expanduser() / "out" / platform


@dataclass(frozen=True, slots=True)
class RegistryConfig:
    npm: str = DEFAULT_NPM_COMMAND
    timeout: float = DEFAULT_REGISTRY_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    cauldron: CauldronConfig = field(default_factory=CauldronConfig)
    container: ContainerConfig = field(default_factory=ContainerConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        cauldron: StrDict = get_table(data, "cauldron") or {}
        container: StrDict = get_table(data, "container") or {}
        registry: StrDict = get_table(data, "registry") or {}

        git = get_bool(cauldron, "git")
        timeout = get_float(registry, "timeout")

        return cls(
            cauldron=CauldronConfig(
                path=get_str(cauldron, "path") or DEFAULT_CAULDRON_PATH,
                git=True if git is None else git,
            ),
            container=ContainerConfig(
                containergen_dir=get_str(container, "containergen_dir")
                or DEFAULT_CONTAINERGEN_DIR,
                maven_group_id=get_str(container, "maven_group_id") or DEFAULT_MAVEN_GROUP_ID,
                generator=get_str(container, "generator") or DEFAULT_GENERATOR_COMMAND,
            ),
            registry=RegistryConfig(
                npm=get_str(registry, "npm") or DEFAULT_NPM_COMMAND,
                timeout=DEFAULT_REGISTRY_TIMEOUT_SECONDS if timeout is None else timeout,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to ern.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result
    return Ok(Config.from_dict(result.value))


def load_config_or_default(path: Path) -> Config:
    """Load config from file, or return the default config if it cannot be read."""
    result = load_config(path)
    if isinstance(result, Ok):
        return result.value
    return Config()
