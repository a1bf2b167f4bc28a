"""Helpers for constructing an update coordinator with default collaborators."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from app.config import AppConfig, get_app_config
from services.update.archive import ArchiveLimits, ZipArchiver
from services.update.collaborators import CheckCommand, Installer, ProgressCallback
from services.update.coordinator import UpdateCollaborators, UpdateCoordinator, log_update_check
from services.update.installers import ScriptInstaller
from services.update.package import ManifestPackageResolver
from services.update.probe import UrlSourceProbe
from services.update.transport import UrlTransport
from services.update.versioning import ManifestVersionComparator
from services.update.workspace import FileSystemWorkspace
from shared.logging_config import ensure_app_logging


_LOGGER = logging.getLogger(__name__)


def running_executable_path() -> Path:
    """Return the path of the executable hosting this process."""

    return Path(sys.executable).resolve()


def build_default_collaborators(
    config: AppConfig | None = None,
    *,
    installer: Installer | None = None,
    check_command: CheckCommand = log_update_check,
    progress: ProgressCallback | None = None,
) -> UpdateCollaborators:
    """Wire the ``urllib``/``zipfile`` backed collaborators described by ``config``."""

    config = config or get_app_config()
    timeout = config.update.network_timeout_seconds
    limits = ArchiveLimits(
        max_entries=config.archive.max_entries,
        max_file_size=config.archive.max_file_size,
        max_total_bytes=config.archive.max_total_bytes,
        max_compression_ratio=config.archive.max_compression_ratio,
    )
    resolver = ManifestPackageResolver(timeout=timeout)
    return UpdateCollaborators(
        probe=UrlSourceProbe(timeout=timeout),
        comparator=ManifestVersionComparator(resolver),
        resolver=resolver,
        transport=UrlTransport(timeout=timeout),
        archiver=ZipArchiver(limits),
        workspace=FileSystemWorkspace(),
        installer=installer or ScriptInstaller(),
        check_command=check_command,
        progress=progress,
    )


def build_update_coordinator(
    source: str | None = None,
    *,
    download_directory: str | Path | None = None,
    executable_path: str | Path | None = None,
    auto_update: bool | None = None,
    config: AppConfig | None = None,
    collaborators: UpdateCollaborators | None = None,
    check_immediately: bool = True,
    configure_logging: bool = True,
) -> UpdateCoordinator:
    """Resolve defaults once and return a coordinator.

    Unset values come from ``config``: the configured source, a temporary
    ``Update`` directory, the running executable and auto-update disabled.
    With ``check_immediately`` the first update check runs before returning.
    """

    if configure_logging:
        ensure_app_logging()
    config = config or get_app_config()
    collaborators = collaborators or build_default_collaborators(config)

    if source is None:
        source = config.update.source
    if download_directory is None:
        download_directory = config.update.download_directory or (
            collaborators.workspace.create_temp_path(config.update.download_dir_name)
        )
    if executable_path is None:
        executable_path = running_executable_path()
    if auto_update is None:
        auto_update = config.update.auto_update

    _LOGGER.debug(
        "Update coordinator configured (source=%s, download_directory=%s, executable=%s, auto_update=%s)",
        source,
        download_directory,
        executable_path,
        auto_update,
    )

    if not check_immediately:
        return UpdateCoordinator(
            collaborators,
            source_location=source,
            download_directory=download_directory,
            executable_path=executable_path,
            auto_update=auto_update,
        )
    return UpdateCoordinator.create(
        collaborators, source, download_directory, executable_path, auto_update
    )


__all__ = [
    "build_default_collaborators",
    "build_update_coordinator",
    "running_executable_path",
]
