"""Archive handling helpers for the update service."""

from __future__ import annotations

import logging
import shutil
import zipfile
from dataclasses import dataclass
from pathlib import Path

from services.update import constants
from services.update.models import ExtractionError


_LOGGER = logging.getLogger(__name__)

__all__ = ["ArchiveLimits", "ZipArchiver", "extract_zip_safely", "find_entry_for_target"]


@dataclass(frozen=True)
class ArchiveLimits:
    """Upper bounds applied while expanding untrusted archives."""

    max_entries: int = constants.MAX_ARCHIVE_ENTRIES
    max_file_size: int = constants.MAX_ARCHIVE_FILE_SIZE
    max_total_bytes: int = constants.MAX_ARCHIVE_TOTAL_BYTES
    max_compression_ratio: int = constants.MAX_COMPRESSION_RATIO


class ZipArchiver:
    """Extract ZIP packages while enforcing :class:`ArchiveLimits`."""

    def __init__(self, limits: ArchiveLimits | None = None) -> None:
        self._limits = limits or ArchiveLimits()

    def extract(self, archive_path: Path, destination: Path) -> Path:
        archive_path = Path(archive_path)
        destination = Path(destination)
        _LOGGER.info("Extracting update archive %s into %s", archive_path, destination)
        destination.mkdir(parents=True, exist_ok=True)
        try:
            with zipfile.ZipFile(archive_path) as archive:
                extract_zip_safely(archive, destination, self._limits)
        except (OSError, zipfile.BadZipFile) as exc:
            raise ExtractionError(f"Failed to extract update archive: {exc}") from exc
        return destination


def extract_zip_safely(
    archive: zipfile.ZipFile, target_dir: Path, limits: ArchiveLimits | None = None
) -> None:
    limits = limits or ArchiveLimits()
    root = target_dir.resolve()
    total_bytes = 0
    processed_entries = 0
    for member in archive.infolist():
        name = member.filename
        if not name:
            continue
        processed_entries += 1
        if processed_entries > limits.max_entries:
            _LOGGER.error(
                "Archive entry count %s exceeded limit %s",
                processed_entries,
                limits.max_entries,
            )
            raise ExtractionError("Update archive contained too many entries")
        path = Path(name)
        if path.is_absolute() or name.startswith(("/", "\\")):
            raise ExtractionError("Update archive contained an absolute path entry")
        destination = (root / path).resolve()
        try:
            destination.relative_to(root)
        except ValueError:
            raise ExtractionError("Update archive contained an unsafe relative path")
        if member.is_dir():
            destination.mkdir(parents=True, exist_ok=True)
            continue
        if member.file_size > limits.max_file_size:
            _LOGGER.error(
                "Archive member %s exceeded file size limit (%s > %s)",
                name,
                member.file_size,
                limits.max_file_size,
            )
            raise ExtractionError("Update archive contained an oversized file")
        if member.compress_size == 0 and member.file_size > 0:
            _LOGGER.error("Archive member %s reported zero compression size", name)
            raise ExtractionError("Update archive contained a suspiciously compressed file")
        if (
            member.compress_size > 0
            and member.file_size > member.compress_size * limits.max_compression_ratio
        ):
            _LOGGER.error(
                "Archive member %s exceeded compression ratio limit (%s > %s)",
                name,
                member.file_size,
                member.compress_size * limits.max_compression_ratio,
            )
            raise ExtractionError("Update archive exceeded safe compression ratio")
        total_bytes += member.file_size
        if total_bytes > limits.max_total_bytes:
            _LOGGER.error(
                "Archive expanded to %s bytes which exceeds limit %s",
                total_bytes,
                limits.max_total_bytes,
            )
            raise ExtractionError("Update archive expanded beyond safe limits")
        destination.parent.mkdir(parents=True, exist_ok=True)
        with archive.open(member) as source, destination.open("wb") as target:
            shutil.copyfileobj(source, target)
        _LOGGER.debug("Extracted archive member %s to %s", name, destination)

    _LOGGER.info(
        "Extracted %s entries totalling %s bytes", processed_entries, total_bytes
    )


def find_entry_for_target(directory: Path, target_name: str) -> Path | None:
    """Return the extracted file that replaces an executable called ``target_name``."""

    lowered = target_name.lower()
    candidates = [
        path
        for path in directory.rglob("*")
        if path.is_file() and path.name.lower() == lowered
    ]
    if not candidates:
        return None

    def _sort_key(path: Path) -> tuple[int, str]:
        return (len(path.relative_to(directory).parts), str(path).lower())

    candidates.sort(key=_sort_key)
    chosen = candidates[0]
    _LOGGER.debug("Selected replacement %s for %s", chosen, target_name)
    return chosen
