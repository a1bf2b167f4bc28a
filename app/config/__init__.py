"""Updater configuration loaded from JSON resources and the environment."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from importlib import resources
from math import isfinite
from pathlib import Path
from typing import Any, Mapping

_CONFIG_RESOURCE = "update.json"
_APP_CONFIG_CACHE: AppConfig | None = None

UPDATE_SOURCE_ENV = "COMET_UPDATE_SOURCE"
UPDATE_DIR_ENV = "COMET_UPDATE_DIR"
AUTO_UPDATE_ENV = "COMET_AUTO_UPDATE"

DEFAULT_DOWNLOAD_DIR_NAME = "Update"
DEFAULT_NETWORK_TIMEOUT = 30.0
DEFAULT_MAX_ARCHIVE_ENTRIES = 2000
DEFAULT_MAX_ARCHIVE_FILE_SIZE = 250 * 1024 * 1024
DEFAULT_MAX_ARCHIVE_TOTAL_BYTES = 500 * 1024 * 1024
DEFAULT_MAX_COMPRESSION_RATIO = 100

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class UpdateConfig:
    """Where updates come from and how they are fetched."""

    source: str | None
    download_dir_name: str
    download_directory: Path | None
    auto_update: bool
    network_timeout_seconds: float


@dataclass(frozen=True)
class ArchiveLimitsConfig:
    """Bounds applied when extracting downloaded packages."""

    max_entries: int
    max_file_size: int
    max_total_bytes: int
    max_compression_ratio: int


@dataclass(frozen=True)
class AppConfig:
    update: UpdateConfig
    archive: ArchiveLimitsConfig


def get_app_config() -> AppConfig:
    """Return the cached application configuration."""

    global _APP_CONFIG_CACHE
    if _APP_CONFIG_CACHE is None:
        _APP_CONFIG_CACHE = load_app_config()
    return _APP_CONFIG_CACHE


def reset_app_config_cache() -> None:
    """Reset the cached configuration for subsequent reloads."""

    global _APP_CONFIG_CACHE
    _APP_CONFIG_CACHE = None


def load_app_config(path: str | Path | None = None) -> AppConfig:
    """Load configuration from ``path`` or the bundled JSON resource.

    Environment variables override the ``update`` section after parsing.
    """

    data = _read_config_data(path)
    update_section = data.get("update") if isinstance(data, Mapping) else None
    archive_section = data.get("archive") if isinstance(data, Mapping) else None
    update = _apply_environment(_parse_update_section(update_section))
    archive = _parse_archive_section(archive_section)
    return AppConfig(update=update, archive=archive)


def get_update_config() -> UpdateConfig:
    return get_app_config().update


def get_archive_limits_config() -> ArchiveLimitsConfig:
    return get_app_config().archive


def _read_config_data(path: str | Path | None) -> Mapping[str, Any]:
    if path is not None:
        return _load_json_from_path(Path(path).expanduser())
    return _load_default_config_data()


def _load_json_from_path(path: Path) -> Mapping[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError:
        return {}
    return _parse_json(raw)


def _load_default_config_data() -> Mapping[str, Any]:
    try:
        resource = resources.files(__package__).joinpath(_CONFIG_RESOURCE)
        raw = resource.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return {}
    return _parse_json(raw)


def _parse_json(raw: str) -> Mapping[str, Any]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    if isinstance(parsed, Mapping):
        return parsed
    return {}


def _parse_update_section(section: Mapping[str, Any] | None) -> UpdateConfig:
    if not isinstance(section, Mapping):
        section = {}
    download_directory = _coerce_text(section.get("download_directory"))
    return UpdateConfig(
        source=_coerce_text(section.get("source")),
        download_dir_name=_coerce_text(section.get("download_dir_name"))
        or DEFAULT_DOWNLOAD_DIR_NAME,
        download_directory=Path(download_directory).expanduser() if download_directory else None,
        auto_update=_coerce_bool(section.get("auto_update"), default=False),
        network_timeout_seconds=_coerce_positive_float(
            section.get("network_timeout_seconds"), default=DEFAULT_NETWORK_TIMEOUT
        ),
    )


def _parse_archive_section(section: Mapping[str, Any] | None) -> ArchiveLimitsConfig:
    if not isinstance(section, Mapping):
        section = {}
    return ArchiveLimitsConfig(
        max_entries=_coerce_positive_int(
            section.get("max_entries"), default=DEFAULT_MAX_ARCHIVE_ENTRIES
        ),
        max_file_size=_coerce_positive_int(
            section.get("max_file_size"), default=DEFAULT_MAX_ARCHIVE_FILE_SIZE
        ),
        max_total_bytes=_coerce_positive_int(
            section.get("max_total_bytes"), default=DEFAULT_MAX_ARCHIVE_TOTAL_BYTES
        ),
        max_compression_ratio=_coerce_positive_int(
            section.get("max_compression_ratio"), default=DEFAULT_MAX_COMPRESSION_RATIO
        ),
    )


def _apply_environment(config: UpdateConfig) -> UpdateConfig:
    source = _coerce_text(os.environ.get(UPDATE_SOURCE_ENV))
    if source is not None:
        config = replace(config, source=source)
    directory = _coerce_text(os.environ.get(UPDATE_DIR_ENV))
    if directory is not None:
        config = replace(config, download_directory=Path(directory).expanduser())
    auto_update = os.environ.get(AUTO_UPDATE_ENV)
    if auto_update is not None:
        config = replace(config, auto_update=_coerce_bool(auto_update, default=config.auto_update))
    return config


def _coerce_text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    return cleaned or None


def _coerce_bool(value: Any, *, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    return default


def _coerce_positive_int(value: Any, *, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        if not isfinite(value):
            return default
        candidate = int(value)
    elif isinstance(value, str):
        try:
            candidate = int(float(value))
        except (ValueError, OverflowError):
            return default
    else:
        return default
    if candidate <= 0:
        return default
    return candidate


def _coerce_positive_float(value: Any, *, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        candidate = float(value)
    elif isinstance(value, str):
        try:
            candidate = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    if not isfinite(candidate) or candidate <= 0:
        return default
    return candidate


__all__ = [
    "AUTO_UPDATE_ENV",
    "AppConfig",
    "ArchiveLimitsConfig",
    "DEFAULT_DOWNLOAD_DIR_NAME",
    "DEFAULT_MAX_ARCHIVE_ENTRIES",
    "DEFAULT_MAX_ARCHIVE_FILE_SIZE",
    "DEFAULT_MAX_ARCHIVE_TOTAL_BYTES",
    "DEFAULT_MAX_COMPRESSION_RATIO",
    "DEFAULT_NETWORK_TIMEOUT",
    "UPDATE_DIR_ENV",
    "UPDATE_SOURCE_ENV",
    "UpdateConfig",
    "get_app_config",
    "get_archive_limits_config",
    "get_update_config",
    "load_app_config",
    "reset_app_config_cache",
]
