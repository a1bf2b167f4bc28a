from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from shared import logging_config


def _flush_managed_handlers() -> None:
    for handler in logging.getLogger().handlers:
        if getattr(handler, logging_config._HANDLER_TAG, False):  # type: ignore[attr-defined]
            handler.flush()


@pytest.fixture(autouse=True)
def reset_logging():
    logging_config._reset_for_tests()
    try:
        yield
    finally:
        logging_config._reset_for_tests()


def test_logging_creates_file_at_info_level(tmp_path, monkeypatch):
    monkeypatch.setenv("COMET_LOG_DIR", str(tmp_path))

    log_path = logging_config.ensure_app_logging()
    assert log_path == tmp_path / "update.log"
    assert logging_config.get_file_log_verbosity() == logging_config.LogVerbosity.INFO
    logging.getLogger("services.update.coordinator").debug("debug message")
    logging.getLogger("services.update.coordinator").info("info message")
    _flush_managed_handlers()

    contents = log_path.read_text(encoding="utf-8")
    assert "debug message" not in contents
    assert "info message" in contents


def test_log_file_env_takes_precedence(tmp_path, monkeypatch):
    monkeypatch.setenv("COMET_LOG_DIR", str(tmp_path / "ignored"))
    monkeypatch.setenv("COMET_LOG_FILE", str(tmp_path / "custom" / "run.log"))

    assert logging_config.ensure_app_logging() == tmp_path / "custom" / "run.log"


def test_logging_configuration_is_idempotent(tmp_path, monkeypatch):
    monkeypatch.setenv("COMET_LOG_DIR", str(tmp_path))

    first_path = logging_config.ensure_app_logging()
    second_path = logging_config.ensure_app_logging()

    assert first_path == second_path
    file_handlers = [
        handler
        for handler in logging.getLogger().handlers
        if getattr(handler, logging_config._HANDLER_TAG, False)  # type: ignore[attr-defined]
        and isinstance(handler, logging.FileHandler)
    ]
    assert len(file_handlers) == 1
    assert Path(file_handlers[0].baseFilename) == first_path


def test_can_adjust_file_log_verbosity(tmp_path, monkeypatch):
    monkeypatch.setenv("COMET_LOG_DIR", str(tmp_path))

    log_path = logging_config.ensure_app_logging()
    logging_config.set_file_log_verbosity("verbose")
    logging.getLogger("tests.logging").debug("debug message")
    _flush_managed_handlers()

    assert "debug message" in log_path.read_text(encoding="utf-8")
    assert logging_config.get_file_log_verbosity() == logging_config.LogVerbosity.VERBOSE


def test_unknown_verbosity_is_rejected():
    with pytest.raises(ValueError, match="Unsupported log verbosity"):
        logging_config.set_file_log_verbosity("chatty")


def test_home_directory_is_redacted(tmp_path, monkeypatch):
    if os.path.normpath(str(Path.home())) in {os.sep, "."}:
        pytest.skip("Home directory is the filesystem root")
    monkeypatch.setenv("COMET_LOG_DIR", str(tmp_path))

    log_path = logging_config.ensure_app_logging()
    logging.getLogger("tests.logging").warning("Download directory: %s", Path.home() / "Update")
    _flush_managed_handlers()

    contents = log_path.read_text(encoding="utf-8")
    assert logging_config.USER_HOME_PLACEHOLDER in contents
