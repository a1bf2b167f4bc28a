"""Data models and errors used by the update coordinator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Tuple
from urllib.parse import unquote, urlparse


class UpdateState(str, Enum):
    """Lifecycle states of a single update attempt."""

    NOT_CHECKED = "not_checked"
    UPDATED = "updated"
    OUTDATED = "outdated"
    DOWNLOADING = "downloading"
    DOWNLOAD_FAILED = "download_failed"
    EXTRACT_FAILED = "extract_failed"
    INSTALL_PENDING = "install_pending"
    INSTALL_FAILED = "install_failed"


class UpdateErrorKind(str, Enum):
    """Distinguishable failure kinds reported by :class:`UpdateError`."""

    GENERIC = "generic"
    CONCURRENT_OPERATION = "concurrent_operation"
    MISSING_SOURCE = "missing_source"
    MALFORMED_SOURCE = "malformed_source"
    SOURCE_UNREACHABLE = "source_unreachable"
    MISSING_DOWNLOAD_PATH = "missing_download_path"
    ALREADY_CHECKED = "already_checked"
    INVALID_STATE = "invalid_state"
    SOURCE_LOCKED = "source_locked"
    INVALID_PACKAGE_SOURCE = "invalid_package_source"
    DOWNLOAD_FAILED = "download_failed"
    EXTRACT_FAILED = "extract_failed"
    INSTALL_FAILED = "install_failed"


class UpdateError(RuntimeError):
    """Raised when an update cannot be checked, downloaded or installed."""

    kind: UpdateErrorKind = UpdateErrorKind.GENERIC


class ConcurrentOperationError(UpdateError):
    kind = UpdateErrorKind.CONCURRENT_OPERATION


class MissingSourceError(UpdateError):
    kind = UpdateErrorKind.MISSING_SOURCE


class MalformedSourceError(UpdateError):
    kind = UpdateErrorKind.MALFORMED_SOURCE


class SourceUnreachableError(UpdateError):
    kind = UpdateErrorKind.SOURCE_UNREACHABLE


class MissingDownloadPathError(UpdateError):
    kind = UpdateErrorKind.MISSING_DOWNLOAD_PATH


class AlreadyCheckedError(UpdateError):
    kind = UpdateErrorKind.ALREADY_CHECKED


class InvalidStateError(UpdateError):
    """Raised when a lifecycle phase is invoked from the wrong state."""

    kind = UpdateErrorKind.INVALID_STATE


class SourceLockedError(UpdateError):
    kind = UpdateErrorKind.SOURCE_LOCKED


class InvalidPackageSourceError(UpdateError):
    """Raised when the package source cannot be read or does not describe a package."""

    kind = UpdateErrorKind.INVALID_PACKAGE_SOURCE


class DownloadError(UpdateError):
    kind = UpdateErrorKind.DOWNLOAD_FAILED


class ExtractionError(UpdateError):
    kind = UpdateErrorKind.EXTRACT_FAILED


class InstallError(UpdateError):
    kind = UpdateErrorKind.INSTALL_FAILED


@dataclass(frozen=True)
class PackageReference:
    """Where the package artifact for a source can be downloaded from."""

    source: str
    download_location: str
    version: str | None = None
    sha256: str | None = None

    @property
    def file_name(self) -> str:
        path = unquote(urlparse(self.download_location).path)
        name = PurePosixPath(path.replace("\\", "/")).name
        return name or "package.zip"


@dataclass(frozen=True)
class InstallationRequest:
    """Ask an external installer to replace ``target_path`` after ``process_id`` exits."""

    archive_path: Path
    extracted_directory: Path
    target_path: Path
    process_id: int


@dataclass(frozen=True)
class InstallationPlan:
    """Describe how the installer launcher should be executed."""

    command: Tuple[str, ...]
    working_directory: Path | None = None
