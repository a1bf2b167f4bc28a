"""Source validation helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, url2pathname, urlopen

from services.update.constants import DEFAULT_NETWORK_TIMEOUT, SUPPORTED_SOURCE_SCHEMES

_LOGGER = logging.getLogger(__name__)

__all__ = ["UrlSourceProbe", "is_url_formatted", "local_path_from_url"]


def is_url_formatted(source: str) -> bool:
    """Return ``True`` when ``source`` is an absolute URL with a supported scheme."""

    if not isinstance(source, str) or not source.strip() or source != source.strip():
        return False
    if any(character.isspace() for character in source):
        return False
    try:
        parsed = urlparse(source)
    except ValueError:
        return False
    scheme = parsed.scheme.lower()
    if scheme not in SUPPORTED_SOURCE_SCHEMES:
        return False
    if scheme == "file":
        return bool(parsed.path)
    return bool(parsed.netloc)


def local_path_from_url(source: str) -> Path | None:
    """Return the filesystem path of a ``file://`` URL, or ``None`` for remote URLs."""

    parsed = urlparse(source)
    if parsed.scheme.lower() != "file":
        return None
    return Path(url2pathname(parsed.path))


class UrlSourceProbe:
    """Check sources with ``urllib``; ``file://`` sources are checked on disk."""

    def __init__(self, *, timeout: float = DEFAULT_NETWORK_TIMEOUT) -> None:
        self._timeout = timeout

    def is_well_formed(self, source: str) -> bool:
        return is_url_formatted(source)

    def is_reachable(self, source: str) -> bool:
        local_path = local_path_from_url(source)
        if local_path is not None:
            exists = local_path.is_file()
            if not exists:
                _LOGGER.debug("Local update source missing: %s", local_path)
            return exists

        request = Request(source, method="HEAD")
        try:
            with urlopen(request, timeout=self._timeout) as response:  # nosec - caller supplied URL
                status = getattr(response, "status", 200)
        except HTTPError as exc:
            _LOGGER.debug("Update source %s answered HTTP %s", source, exc.code)
            return False
        except (URLError, OSError, ValueError) as exc:
            _LOGGER.debug("Update source %s unreachable: %s", source, exc)
            return False
        return 200 <= status < 400
