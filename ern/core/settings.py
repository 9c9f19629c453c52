"""User-level key/value settings.

Backs ``ern config <key> [value]``. Values are stored as strings in

  <user-config-dir>/settings.json
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from ern.core.result import Err, Ok, Result
from ern.core.structured import as_str_dict
from ern.platform.files import atomic_write_text
from ern.platform.paths import user_config_dir

__all__ = [
    "SettingsError",
    "get_value",
    "load_settings",
    "set_value",
    "settings_path",
]


@dataclass(frozen=True, slots=True)
class SettingsError:
    message: str
    path: Path | None = None


def settings_path() -> Path:
    return user_config_dir() / "settings.json"


def load_settings(path: Path | None = None) -> Result[dict[str, str], SettingsError]:
    path = path or settings_path()
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Ok({})
    except OSError as e:
        return Err(SettingsError(f"Error reading {path}: {e}", path=path))

    try:
        obj: object = json.loads(raw)
    except json.JSONDecodeError as e:
        return Err(SettingsError(f"Invalid JSON in settings: {e}", path=path))

    data = as_str_dict(obj)
    if data is None:
        return Err(SettingsError("Settings root must be a JSON object", path=path))
    return Ok({k: v for k, v in data.items() if isinstance(v, str)})


def get_value(key: str, *, path: Path | None = None) -> Result[str | None, SettingsError]:
    """Return the value stored under ``key``, or None when unset."""
    result = load_settings(path)
    if isinstance(result, Err):
        return result
    return Ok(result.value.get(key))


def set_value(key: str, value: str, *, path: Path | None = None) -> Result[None, SettingsError]:
    path = path or settings_path()
    if not key.strip():
        return Err(SettingsError("settings key must not be empty", path=path))

    result = load_settings(path)
    if isinstance(result, Err):
        return result

    data = result.value
    data[key] = value
    try:
        atomic_write_text(path, json.dumps(data, indent=2, sort_keys=True) + "\n")
    except OSError as e:
        return Err(SettingsError(f"Could not write {path}: {e}", path=path))
    return Ok(None)
