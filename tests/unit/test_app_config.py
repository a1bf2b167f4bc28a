import json
from dataclasses import asdict
from pathlib import Path

import pytest

from app.config import (
    AUTO_UPDATE_ENV,
    DEFAULT_NETWORK_TIMEOUT,
    UPDATE_DIR_ENV,
    UPDATE_SOURCE_ENV,
    AppConfig,
    ArchiveLimitsConfig,
    get_app_config,
    load_app_config,
    reset_app_config_cache,
)
from services.update import constants
from services.update.archive import ArchiveLimits


def test_default_config_values() -> None:
    reset_app_config_cache()
    config = load_app_config()
    assert isinstance(config, AppConfig)
    assert config.update.source is None
    assert config.update.download_dir_name == "Update"
    assert config.update.download_directory is None
    assert config.update.auto_update is False
    assert config.update.network_timeout_seconds == pytest.approx(30.0)
    assert config.archive == ArchiveLimitsConfig(
        max_entries=2000,
        max_file_size=250 * 1024 * 1024,
        max_total_bytes=500 * 1024 * 1024,
        max_compression_ratio=100,
    )


def test_load_app_config_from_custom_path(tmp_path) -> None:
    custom_config = {
        "update": {
            "source": "https://updates.example.com/manifest.json",
            "download_dir_name": "AppUpdate",
            "auto_update": True,
            "network_timeout_seconds": 5,
        },
        "archive": {"max_entries": 10},
    }
    config_path = tmp_path / "update.json"
    config_path.write_text(json.dumps(custom_config), encoding="utf-8")

    config = load_app_config(config_path)
    assert config.update.source == "https://updates.example.com/manifest.json"
    assert config.update.download_dir_name == "AppUpdate"
    assert config.update.auto_update is True
    assert config.update.network_timeout_seconds == pytest.approx(5.0)
    assert config.archive.max_entries == 10
    assert config.archive.max_compression_ratio == 100


def test_invalid_config_values_fall_back_to_defaults(tmp_path) -> None:
    config_path = tmp_path / "update.json"
    config_path.write_text(
        json.dumps(
            {
                "update": {
                    "source": 42,
                    "download_dir_name": "  ",
                    "auto_update": "maybe",
                    "network_timeout_seconds": -1,
                },
                "archive": {"max_entries": True, "max_file_size": "lots"},
            }
        ),
        encoding="utf-8",
    )

    config = load_app_config(config_path)
    assert config.update.source is None
    assert config.update.download_dir_name == "Update"
    assert config.update.auto_update is False
    assert config.update.network_timeout_seconds == pytest.approx(30.0)
    assert config.archive.max_entries == 2000
    assert config.archive.max_file_size == 250 * 1024 * 1024


def test_unreadable_config_uses_defaults(tmp_path) -> None:
    config_path = tmp_path / "update.json"
    config_path.write_text("{broken", encoding="utf-8")

    config = load_app_config(config_path)
    assert config.update.download_dir_name == "Update"
    assert load_app_config(tmp_path / "missing.json").update.auto_update is False


def test_environment_overrides(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv(UPDATE_SOURCE_ENV, "file:///srv/updates/manifest.json")
    monkeypatch.setenv(UPDATE_DIR_ENV, str(tmp_path / "downloads"))
    monkeypatch.setenv(AUTO_UPDATE_ENV, "yes")

    config = load_app_config()
    assert config.update.source == "file:///srv/updates/manifest.json"
    assert config.update.download_directory == Path(tmp_path / "downloads")
    assert config.update.auto_update is True


def test_get_app_config_is_cached() -> None:
    reset_app_config_cache()
    assert get_app_config() is get_app_config()


def test_update_defaults_match_config_defaults(tmp_path) -> None:
    config = load_app_config(tmp_path / "missing.json")

    assert ArchiveLimits(**asdict(config.archive)) == ArchiveLimits()
    assert constants.DEFAULT_NETWORK_TIMEOUT == DEFAULT_NETWORK_TIMEOUT
    assert config.update.network_timeout_seconds == constants.DEFAULT_NETWORK_TIMEOUT
