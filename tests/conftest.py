from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_project_root_on_path() -> None:
    """Guarantee the repository root is discoverable for absolute imports."""

    root = Path(__file__).resolve().parent.parent
    root_str = str(root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)


_ensure_project_root_on_path()


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory):
    """Keep log files and updater environment overrides out of the real user profile."""

    log_dir = tmp_path_factory.mktemp("logs")
    monkeypatch.setenv("COMET_LOG_DIR", str(log_dir))
    monkeypatch.delenv("COMET_LOG_FILE", raising=False)
    for name in ("COMET_UPDATE_SOURCE", "COMET_UPDATE_DIR", "COMET_AUTO_UPDATE"):
        monkeypatch.delenv(name, raising=False)

    from app.config import reset_app_config_cache
    from shared import logging_config

    reset_app_config_cache()
    yield
    logging_config._reset_for_tests()
    reset_app_config_cache()
