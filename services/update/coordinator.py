"""Update lifecycle coordinator: check, download, extract and install."""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from services.update.collaborators import (
    Archiver,
    CheckCommand,
    Installer,
    PackageResolver,
    ProgressCallback,
    SourceProbe,
    Transport,
    VersionComparator,
    Workspace,
)
from services.update.hashing import verify_sha256
from services.update.models import (
    AlreadyCheckedError,
    ConcurrentOperationError,
    DownloadError,
    ExtractionError,
    InstallError,
    InstallationRequest,
    InvalidPackageSourceError,
    InvalidStateError,
    MalformedSourceError,
    MissingDownloadPathError,
    MissingSourceError,
    SourceLockedError,
    SourceUnreachableError,
    UpdateError,
    UpdateState,
)
from services.update.state_machine import UpdateLifecycle

_LOGGER = logging.getLogger(__name__)

__all__ = ["UpdateCollaborators", "UpdateCoordinator", "log_update_check"]


def log_update_check(executable_path: str, source: str) -> None:
    _LOGGER.info("Checking %s for updates from %s", executable_path or "<unset>", source)


@dataclass
class UpdateCollaborators:
    """Everything the coordinator delegates to."""

    probe: SourceProbe
    comparator: VersionComparator
    resolver: PackageResolver
    transport: Transport
    archiver: Archiver
    workspace: Workspace
    installer: Installer
    check_command: CheckCommand = log_update_check
    progress: ProgressCallback | None = None


class UpdateCoordinator:
    """Own one update session and enforce the order of its phases.

    Every phase is blocking.  ``state`` only moves forward; a failed download,
    extraction or installation ends the session in the matching failure state.
    """

    def __init__(
        self,
        collaborators: UpdateCollaborators,
        *,
        source_location: str | None = None,
        download_directory: str | Path = "",
        executable_path: str | Path = "",
        auto_update: bool = False,
        package_download_path: str | Path = "",
    ) -> None:
        self._collaborators = collaborators
        self._lifecycle = UpdateLifecycle()
        self._in_progress = False
        self._downloaded = False
        self._extracted = False
        self._source_location = source_location
        self.download_directory = download_directory
        self.executable_path = executable_path
        self.auto_update = auto_update
        self.package_download_path = package_download_path

    @classmethod
    def create(
        cls,
        collaborators: UpdateCollaborators,
        source_location: str | None,
        download_directory: str | Path,
        executable_path: str | Path,
        auto_update: bool = False,
    ) -> "UpdateCoordinator":
        """Construct a coordinator and immediately run :meth:`initialize`."""

        coordinator = cls(collaborators)
        coordinator.initialize(source_location, download_directory, executable_path, auto_update)
        return coordinator

    @property
    def source_location(self) -> str | None:
        return self._source_location

    @source_location.setter
    def source_location(self, value: str | None) -> None:
        if self._in_progress or self._lifecycle.state is not UpdateState.NOT_CHECKED:
            raise SourceLockedError("The source cannot change once checking has begun.")
        self._source_location = value

    @property
    def download_directory(self) -> str:
        return self._download_directory

    @download_directory.setter
    def download_directory(self, value: str | Path) -> None:
        self._download_directory = str(value) if value is not None else ""

    @property
    def executable_path(self) -> str:
        return self._executable_path

    @executable_path.setter
    def executable_path(self, value: str | Path) -> None:
        self._executable_path = str(value) if value is not None else ""

    @property
    def package_download_path(self) -> str:
        return self._package_download_path

    @package_download_path.setter
    def package_download_path(self, value: str | Path) -> None:
        self._package_download_path = str(value) if value is not None else ""

    @property
    def state(self) -> UpdateState:
        return self._lifecycle.state

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    def initialize(
        self,
        source_location: str | None,
        download_directory: str | Path,
        executable_path: str | Path,
        auto_update: bool,
    ) -> None:
        """Apply configuration, check for an update and optionally start the download.

        Extraction and installation are never started from here.
        """

        self.source_location = source_location
        self.download_directory = download_directory
        self.executable_path = executable_path
        self.auto_update = auto_update

        self.check_for_update()

        if self.state is UpdateState.OUTDATED and self.auto_update:
            self._prepare_update()
            self.download()

    def check_for_update(self) -> UpdateState:
        """Validate the configuration and record whether an update is available."""

        self._ensure_idle()
        source = self._source_location
        if source is None:
            raise MissingSourceError("The source must be set before checking for updates.")
        probe = self._collaborators.probe
        if not probe.is_well_formed(source):
            raise MalformedSourceError(f"The source uri is not well formatted: {source!r}")
        if not probe.is_reachable(source):
            raise SourceUnreachableError(f"The remote source file is not found: {source}")
        if not self._download_directory.strip():
            raise MissingDownloadPathError("The download path is null or whitespace.")
        if self.state is not UpdateState.NOT_CHECKED:
            raise AlreadyCheckedError("Already checked for updates.")

        with self._running():
            self._collaborators.check_command(self._executable_path, source)
            try:
                outdated = self._collaborators.comparator.is_update_required(
                    self._executable_path, source
                )
            except (OSError, ValueError) as exc:
                raise InvalidPackageSourceError(
                    f"Unable to read the package source {source}: {exc}"
                ) from exc
            self._lifecycle.advance(UpdateState.OUTDATED if outdated else UpdateState.UPDATED)
        _LOGGER.info("Update check finished: %s", self.state.value)
        return self.state

    def update_required(self) -> bool:
        if self._source_location is None:
            raise MissingSourceError("The source must be set before checking for updates.")
        return self._collaborators.comparator.is_update_required(
            self._executable_path, self._source_location
        )

    def download(self) -> Path:
        """Download the package artifact to :attr:`package_download_path`."""

        self._ensure_idle()
        self._lifecycle.require(UpdateState.OUTDATED, action="download the update package")
        source = self._source_location
        if source is None:
            raise MissingSourceError("The source must be set before downloading an update.")
        self._lifecycle.advance(UpdateState.DOWNLOADING)

        with self._phase("download the update package", UpdateState.DOWNLOAD_FAILED, DownloadError):
            reference = self._collaborators.resolver.resolve(source)
            if not self._package_download_path.strip():
                self._package_download_path = str(
                    Path(self._download_directory) / reference.file_name
                )
            destination = Path(self._package_download_path)
            _LOGGER.info(
                "Downloading %s to %s", reference.download_location, destination
            )
            self._collaborators.transport.download(reference.download_location, destination)
            if reference.sha256:
                verify_sha256(destination, reference.sha256)
                _LOGGER.info("Verified package hash for %s", destination.name)

        self._downloaded = True
        return destination

    def extract(self) -> Path:
        """Expand the downloaded package into :attr:`download_directory`."""

        self._ensure_idle()
        self._lifecycle.require(UpdateState.DOWNLOADING, action="extract the update package")
        if not self._downloaded:
            raise InvalidStateError("Cannot extract before the download has completed.")

        destination = Path(self._download_directory)
        with self._phase("extract the update package", UpdateState.EXTRACT_FAILED, ExtractionError):
            self._collaborators.archiver.extract(Path(self._package_download_path), destination)

        self._extracted = True
        return destination

    def install(self) -> InstallationRequest:
        """Hand the extracted package to the installer that runs after this process exits."""

        self._ensure_idle()
        self._lifecycle.require(UpdateState.DOWNLOADING, action="install the update package")
        if not self._extracted:
            raise InvalidStateError("Cannot install before the package has been extracted.")
        if not self._executable_path.strip():
            raise InvalidStateError("Cannot install without an executable path.")

        request = InstallationRequest(
            archive_path=Path(self._package_download_path),
            extracted_directory=Path(self._download_directory),
            target_path=Path(self._executable_path),
            process_id=os.getpid(),
        )
        with self._phase("install the update package", UpdateState.INSTALL_FAILED, InstallError):
            self._collaborators.installer.install(request)

        self._lifecycle.advance(UpdateState.INSTALL_PENDING)
        return request

    def cleanup(self) -> None:
        """Remove the download directory; safe to call repeatedly."""

        self._ensure_idle()
        if not self._download_directory.strip():
            return
        self._collaborators.workspace.delete_directory(Path(self._download_directory))

    def _prepare_update(self) -> None:
        self._collaborators.workspace.create_directory(Path(self._download_directory))
        self._notify("Created download directory.")
        self._notify(f"Directory: {self._download_directory}")

    def _notify(self, message: str) -> None:
        _LOGGER.info(message)
        if self._collaborators.progress is not None:
            self._collaborators.progress(message)

    def _ensure_idle(self) -> None:
        if self._in_progress:
            raise ConcurrentOperationError("Another update process is already in progress.")

    @contextmanager
    def _running(self) -> Iterator[None]:
        self._ensure_idle()
        self._in_progress = True
        try:
            yield
        finally:
            self._in_progress = False

    @contextmanager
    def _phase(
        self, action: str, failure_state: UpdateState, error_type: type[UpdateError]
    ) -> Iterator[None]:
        with self._running():
            try:
                yield
            except OSError as exc:
                self._fail(failure_state, action, exc)
                raise error_type(f"Failed to {action}: {exc}") from exc
            except Exception as exc:
                self._fail(failure_state, action, exc)
                raise

    def _fail(self, failure_state: UpdateState, action: str, exc: Exception) -> None:
        _LOGGER.warning("Unable to %s: %s", action, exc)
        self._lifecycle.advance(failure_state)
