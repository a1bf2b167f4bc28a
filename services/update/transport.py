"""Byte transfer for update packages."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import IO

from urllib.request import urlopen

from services.update.constants import DEFAULT_NETWORK_TIMEOUT, DOWNLOAD_CHUNK_SIZE
from services.update.models import DownloadError
from services.update.probe import local_path_from_url

_LOGGER = logging.getLogger(__name__)

__all__ = ["UrlTransport", "open_location", "read_location_text"]


def open_location(location: str, *, timeout: float = DEFAULT_NETWORK_TIMEOUT) -> IO[bytes]:
    """Open ``location`` for binary reading; ``file://`` URLs are opened directly."""

    local_path = local_path_from_url(location)
    if local_path is not None:
        return local_path.open("rb")
    return urlopen(location, timeout=timeout)  # nosec - caller supplied URL


def read_location_text(location: str, *, timeout: float = DEFAULT_NETWORK_TIMEOUT) -> str:
    with open_location(location, timeout=timeout) as source:
        return source.read().decode("utf-8-sig")


class UrlTransport:
    """Download packages over HTTP(S) or copy them from ``file://`` URLs."""

    def __init__(self, *, timeout: float = DEFAULT_NETWORK_TIMEOUT) -> None:
        self._timeout = timeout

    def download(self, location: str, destination: Path) -> Path:
        destination = Path(destination)
        _LOGGER.info("Downloading update package from %s", location)
        destination.parent.mkdir(parents=True, exist_ok=True)
        partial = destination.with_name(destination.name + ".part")
        try:
            with open_location(location, timeout=self._timeout) as response, partial.open(
                "wb"
            ) as target:
                shutil.copyfileobj(response, target, DOWNLOAD_CHUNK_SIZE)
            partial.replace(destination)
        except (OSError, ValueError) as exc:
            partial.unlink(missing_ok=True)
            raise DownloadError(f"Failed to download update package: {exc}") from exc
        _LOGGER.debug("Downloaded update package to %s", destination)
        return destination
