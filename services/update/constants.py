"""Constants shared across the update service modules."""

from __future__ import annotations

from app.config import (
    DEFAULT_MAX_ARCHIVE_ENTRIES as MAX_ARCHIVE_ENTRIES,
    DEFAULT_MAX_ARCHIVE_FILE_SIZE as MAX_ARCHIVE_FILE_SIZE,
    DEFAULT_MAX_ARCHIVE_TOTAL_BYTES as MAX_ARCHIVE_TOTAL_BYTES,
    DEFAULT_MAX_COMPRESSION_RATIO as MAX_COMPRESSION_RATIO,
    DEFAULT_NETWORK_TIMEOUT,
)

SUPPORTED_SOURCE_SCHEMES = ("http", "https", "file")
MANIFEST_SUFFIX = ".json"
DOWNLOAD_CHUNK_SIZE = 65536

UPDATE_FAILURE_MARKER_SUFFIX = ".update_failed.json"
VERSION_FILE_NAME = "VERSION"

__all__ = [
    "DEFAULT_NETWORK_TIMEOUT",
    "DOWNLOAD_CHUNK_SIZE",
    "MANIFEST_SUFFIX",
    "MAX_ARCHIVE_ENTRIES",
    "MAX_ARCHIVE_FILE_SIZE",
    "MAX_ARCHIVE_TOTAL_BYTES",
    "MAX_COMPRESSION_RATIO",
    "SUPPORTED_SOURCE_SCHEMES",
    "UPDATE_FAILURE_MARKER_SUFFIX",
    "VERSION_FILE_NAME",
]
