"""YAML-backed settings for wikdict."""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from wikdict.exceptions import ConfigError

CONFIG_ENV_VAR = "WIKDICT_CONFIG"
DEFAULT_HOME = Path.home() / ".wikdict"
DEFAULT_CONFIG_PATH = DEFAULT_HOME / "config.yaml"


@dataclass
class Settings:
    """Locations and limits used by :class:`wikdict.Dictionary`."""

    data_dir: Path = DEFAULT_HOME
    resource_dirs: list[Path] = field(default_factory=list)
    database_name: str = "dictionary.db"
    archive_name: str = "dictionary.db.xz"
    preferences_path: Optional[Path] = None
    load_limit: int = 1000
    search_limit: int = 100
    history_size: int = 20
    buffer_multiplier: int = 10
    debounce: float = 0.0

    @property
    def resolved_preferences_path(self) -> Path:
        return self.preferences_path or self.data_dir / "preferences.db"


_PATH_FIELDS = {"data_dir", "preferences_path"}
_INT_FIELDS = {"load_limit", "search_limit", "history_size", "buffer_multiplier"}
_STR_FIELDS = {"database_name", "archive_name"}


def load_settings(
    source: Union[str, Path, Dict[str, Any], None] = None,
) -> Settings:
    """Load settings from a YAML file, YAML string, or mapping.

    Without a source, ``$WIKDICT_CONFIG`` or ``~/.wikdict/config.yaml`` is
    read when it exists; otherwise defaults are returned.

    Raises:
        ConfigError: if the YAML is invalid or a value has the wrong type.
        FileNotFoundError: if an explicit file path does not exist.
    """
    base_dir: Optional[Path] = None

    if source is None:
        env = os.environ.get(CONFIG_ENV_VAR)
        if env:
            source = Path(env)
        elif DEFAULT_CONFIG_PATH.is_file():
            source = DEFAULT_CONFIG_PATH
        else:
            return Settings()

    if isinstance(source, dict):
        data = source
    elif isinstance(source, Path) or _is_file_path(source):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        base_dir = path.parent
        with open(path, "r", encoding="utf-8") as f:
            data = _load_yaml(f)
    else:
        data = _load_yaml(source)

    return _parse_settings(data, base_dir)


def _is_file_path(s: str) -> bool:
    """Check if a string looks like a file path rather than inline YAML."""
    if "\n" in s or ": " in s:
        return False
    if "/" in s or "\\" in s:
        return True
    return s.endswith((".yaml", ".yml"))


def _load_yaml(stream) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(stream)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        raise ConfigError(
            f"Invalid YAML: {e}", line=mark.line + 1 if mark else None,
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("YAML root must be a mapping (dictionary)")
    return data


def _parse_settings(data: Dict[str, Any], base_dir: Optional[Path]) -> Settings:
    known = {f.name for f in dataclasses.fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown setting(s): {', '.join(unknown)}")

    values: Dict[str, Any] = {}
    for key, value in data.items():
        if key in _PATH_FIELDS:
            if value is None and key == "preferences_path":
                values[key] = None
                continue
            values[key] = _path(key, value, base_dir)
        elif key == "resource_dirs":
            if not isinstance(value, list):
                raise ConfigError("Field 'resource_dirs' must be a list")
            values[key] = [_path(key, v, base_dir) for v in value]
        elif key in _INT_FIELDS:
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"Field {key!r} must be a positive integer")
            values[key] = value
        elif key in _STR_FIELDS:
            if not isinstance(value, str) or not value:
                raise ConfigError(f"Field {key!r} must be a non-empty string")
            values[key] = value
        elif key == "debounce":
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                raise ConfigError("Field 'debounce' must be a non-negative number")
            values[key] = float(value)

    return Settings(**values)


def _path(key: str, value: Any, base_dir: Optional[Path]) -> Path:
    if not isinstance(value, str) or not value:
        raise ConfigError(f"Field {key!r} must be a path string")
    path = Path(value).expanduser()
    # Relative paths in a config file are relative to that file
    if base_dir is not None and not path.is_absolute():
        path = base_dir / path
    return path
