"""Filesystem helpers for the temporary download directory."""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

_LOGGER = logging.getLogger(__name__)

__all__ = ["FileSystemWorkspace"]


class FileSystemWorkspace:
    def __init__(self, temp_root: Path | None = None) -> None:
        self._temp_root = Path(temp_root) if temp_root is not None else None

    def create_directory(self, path: Path) -> Path:
        path = Path(path)
        path.mkdir(parents=True, exist_ok=True)
        _LOGGER.debug("Ensured directory %s", path)
        return path

    def delete_directory(self, path: Path) -> None:
        path = Path(path)
        if not path.exists():
            _LOGGER.debug("Directory %s already removed", path)
            return
        shutil.rmtree(path)
        _LOGGER.info("Removed directory %s", path)

    def create_temp_path(self, name: str) -> Path:
        """Return ``<temp>/<name>`` without creating it."""

        root = self._temp_root or Path(tempfile.gettempdir())
        return root / name
