"""Configuration manager for loading and caching config."""

import time
from pathlib import Path
from typing import Any

import yaml


class ConfigFileNotFoundError(FileNotFoundError):
    """Raised when a configuration file cannot be found."""

    def __init__(self, filename: str) -> None:
        """Initialize the error with the missing filename."""
        self.filename = filename
        super().__init__(filename)

    def __str__(self) -> str:
        """Return a readable error message."""
        return (
            f"Config file '{self.filename}' not found in current directory or "
            "~/.config/routerchat/"
        )


class ConfigFileEmptyError(ValueError):
    """Raised when a configuration file is empty or corrupted."""

    def __init__(self, path: Path) -> None:
        """Initialize the error with the invalid config path."""
        self.path = path
        super().__init__(path)

    def __str__(self) -> str:
        """Return a readable error message."""
        return f"Config file is empty or corrupted: {self.path}"


class _ConfigCacheState:
    def __init__(self) -> None:
        self.cache: dict[str, Any] = {}
        self.path: Path | None = None
        self.mtime: float = 0
        self.check_time: float = 0


_CONFIG_STATE = _ConfigCacheState()
CONFIG_CACHE_TTL = 5  # Check file modification time every 5 seconds
DEFAULT_CONFIG_FILENAME = "config.yaml"


def _config_dirs() -> list[Path]:
    return [Path(), Path.home() / ".config" / "routerchat"]


def _resolve_config_path(filename: str) -> Path:
    candidate = Path(filename)
    if candidate.is_absolute():
        if candidate.exists():
            return candidate
        raise ConfigFileNotFoundError(filename)

    for directory in _config_dirs():
        path = directory / filename
        if path.exists():
            return path
    raise ConfigFileNotFoundError(filename)


def get_config(filename: str = DEFAULT_CONFIG_FILENAME) -> dict[str, Any]:
    """Load configuration from YAML file with caching.

    Only reloads if file has been modified (checked every `CONFIG_CACHE_TTL`
    seconds) or a different file is requested.

    Raises:
        ConfigFileNotFoundError: No config file exists.
        ConfigFileEmptyError: The file parses to nothing or to a non-mapping.

    """
    current_time = time.time()

    if (
        current_time - _CONFIG_STATE.check_time > CONFIG_CACHE_TTL
        or not _CONFIG_STATE.cache
        or _CONFIG_STATE.path is None
        or _CONFIG_STATE.path.name != Path(filename).name
    ):
        _CONFIG_STATE.check_time = current_time

        filepath = _resolve_config_path(filename)
        file_mtime = filepath.stat().st_mtime

        if (
            file_mtime != _CONFIG_STATE.mtime
            or filepath != _CONFIG_STATE.path
            or not _CONFIG_STATE.cache
        ):
            with filepath.open(encoding="utf-8") as file:
                loaded_config = yaml.safe_load(file)
            # Handle empty/corrupted YAML that returns None
            if not isinstance(loaded_config, dict):
                raise ConfigFileEmptyError(filepath)
            _CONFIG_STATE.cache = loaded_config
            _CONFIG_STATE.path = filepath
            _CONFIG_STATE.mtime = file_mtime

    return _CONFIG_STATE.cache


def get_config_or_default(filename: str = DEFAULT_CONFIG_FILENAME) -> dict[str, Any]:
    """Load configuration, returning an empty mapping when no file exists."""
    try:
        return get_config(filename)
    except ConfigFileNotFoundError:
        return {}


def clear_config_cache() -> None:
    """Clear the config cache to force a reload on next `get_config()` call."""
    _CONFIG_STATE.cache = {}
    _CONFIG_STATE.path = None
    _CONFIG_STATE.mtime = 0
    _CONFIG_STATE.check_time = 0


def get_float_setting(config: dict[str, Any], key: str, default: float) -> float:
    """Read a positive number from config with safe fallback."""
    raw_value = config.get(key, default)

    if isinstance(raw_value, bool):
        return default

    try:
        value = float(raw_value)
    except (TypeError, ValueError):
        return default

    if value <= 0:
        return default
    return value
