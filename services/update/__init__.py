"""Public API for the update service package."""

from __future__ import annotations

from services.update.archive import ArchiveLimits, ZipArchiver
from services.update.builder import (
    build_default_collaborators,
    build_update_coordinator,
    running_executable_path,
)
from services.update.collaborators import (
    Archiver,
    Installer,
    PackageResolver,
    SourceProbe,
    Transport,
    VersionComparator,
    Workspace,
)
from services.update.constants import (
    MAX_ARCHIVE_ENTRIES,
    MAX_ARCHIVE_FILE_SIZE,
    MAX_ARCHIVE_TOTAL_BYTES,
    MAX_COMPRESSION_RATIO,
    UPDATE_FAILURE_MARKER_SUFFIX,
)
from services.update.coordinator import UpdateCollaborators, UpdateCoordinator
from services.update.installers import ScriptInstaller
from services.update.models import (
    AlreadyCheckedError,
    ConcurrentOperationError,
    DownloadError,
    ExtractionError,
    InstallError,
    InstallationPlan,
    InstallationRequest,
    InvalidPackageSourceError,
    InvalidStateError,
    MalformedSourceError,
    MissingDownloadPathError,
    MissingSourceError,
    PackageReference,
    SourceLockedError,
    SourceUnreachableError,
    UpdateError,
    UpdateErrorKind,
    UpdateState,
)
from services.update.package import ManifestPackageResolver
from services.update.probe import UrlSourceProbe
from services.update.recovery import consume_update_failure_notice
from services.update.transport import UrlTransport
from services.update.versioning import ManifestVersionComparator
from services.update.workspace import FileSystemWorkspace

__all__ = [
    "MAX_ARCHIVE_ENTRIES",
    "MAX_ARCHIVE_FILE_SIZE",
    "MAX_ARCHIVE_TOTAL_BYTES",
    "MAX_COMPRESSION_RATIO",
    "UPDATE_FAILURE_MARKER_SUFFIX",
    "AlreadyCheckedError",
    "ArchiveLimits",
    "Archiver",
    "ConcurrentOperationError",
    "DownloadError",
    "ExtractionError",
    "FileSystemWorkspace",
    "InstallError",
    "InstallationPlan",
    "InstallationRequest",
    "Installer",
    "InvalidPackageSourceError",
    "InvalidStateError",
    "MalformedSourceError",
    "ManifestPackageResolver",
    "ManifestVersionComparator",
    "MissingDownloadPathError",
    "MissingSourceError",
    "PackageReference",
    "PackageResolver",
    "ScriptInstaller",
    "SourceLockedError",
    "SourceProbe",
    "SourceUnreachableError",
    "Transport",
    "UpdateCollaborators",
    "UpdateCoordinator",
    "UpdateError",
    "UpdateErrorKind",
    "UpdateState",
    "UrlSourceProbe",
    "UrlTransport",
    "VersionComparator",
    "Workspace",
    "ZipArchiver",
    "build_default_collaborators",
    "build_update_coordinator",
    "consume_update_failure_notice",
    "running_executable_path",
]
