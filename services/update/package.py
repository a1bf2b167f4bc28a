"""Resolve update sources into downloadable package references."""

from __future__ import annotations

import json
import logging
import re
from urllib.parse import urljoin, urlparse

from services.update.constants import DEFAULT_NETWORK_TIMEOUT, MANIFEST_SUFFIX
from services.update.models import InvalidPackageSourceError, PackageReference
from services.update.transport import read_location_text

_LOGGER = logging.getLogger(__name__)

__all__ = ["ManifestPackageResolver", "is_manifest_source", "parse_package_manifest"]

_SHA256_PATTERN = re.compile(r"[0-9a-f]{64}")


def is_manifest_source(source: str) -> bool:
    return urlparse(source).path.lower().endswith(MANIFEST_SUFFIX)


def parse_package_manifest(source: str, text: str) -> PackageReference:
    """Build a :class:`PackageReference` from the JSON manifest published at ``source``."""

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidPackageSourceError(
            f"Package manifest at {source} is not valid JSON: {exc}"
        ) from exc
    if not isinstance(data, dict):
        raise InvalidPackageSourceError(
            f"Package manifest at {source} must be a JSON object"
        )

    download = _clean_text(data.get("download") or data.get("url"))
    if download is None:
        raise InvalidPackageSourceError(
            f"Package manifest at {source} is missing a download location"
        )

    version = _clean_text(data.get("version"))
    if version is not None:
        version = version.lstrip("v")

    return PackageReference(
        source=source,
        download_location=urljoin(source, download),
        version=version,
        sha256=_clean_digest(data.get("sha256")),
    )


class ManifestPackageResolver:
    """Read JSON manifests; any other source is treated as the package artifact itself."""

    def __init__(self, *, timeout: float = DEFAULT_NETWORK_TIMEOUT) -> None:
        self._timeout = timeout
        self._cache: dict[str, PackageReference] = {}

    def resolve(self, source: str) -> PackageReference:
        cached = self._cache.get(source)
        if cached is not None:
            return cached

        if not is_manifest_source(source):
            _LOGGER.debug("Source %s is a bare package artifact", source)
            reference = PackageReference(source=source, download_location=source)
        else:
            _LOGGER.debug("Reading package manifest from %s", source)
            try:
                text = read_location_text(source, timeout=self._timeout)
            except (OSError, ValueError) as exc:
                raise InvalidPackageSourceError(
                    f"Failed to read package manifest: {exc}"
                ) from exc
            reference = parse_package_manifest(source, text)
            _LOGGER.info(
                "Package manifest %s describes version %s at %s",
                source,
                reference.version,
                reference.download_location,
            )
        self._cache[source] = reference
        return reference


def _clean_text(raw: object) -> str | None:
    if not isinstance(raw, str):
        return None
    cleaned = raw.strip()
    return cleaned or None


def _clean_digest(raw: object) -> str | None:
    value = _clean_text(raw)
    if value is None:
        return None
    if ":" in value:
        algorithm, value = value.split(":", 1)
        if algorithm.strip().lower() != "sha256":
            _LOGGER.debug("Ignoring unsupported digest algorithm '%s'", algorithm.strip())
            return None
    value = value.strip().lower()
    if not _SHA256_PATTERN.fullmatch(value):
        _LOGGER.debug("Package digest was not a valid SHA-256 hex string")
        return None
    return value
