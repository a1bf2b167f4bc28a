"""Protocols for the collaborators the update coordinator delegates to."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Protocol

from services.update.models import InstallationRequest, PackageReference

CheckCommand = Callable[[str, str], object]
ProgressCallback = Callable[[str], None]


class SourceProbe(Protocol):
    """Validate that a source identifier is usable."""

    def is_well_formed(self, source: str) -> bool:
        """Return ``True`` when ``source`` is a syntactically valid URL."""

    def is_reachable(self, source: str) -> bool:
        """Return ``True`` when ``source`` can be retrieved."""


class PackageResolver(Protocol):
    def resolve(self, source: str) -> PackageReference:
        """Return the package reference described by ``source``."""


class VersionComparator(Protocol):
    def is_update_required(self, executable_path: str, source: str) -> bool:
        """Return ``True`` when the package at ``source`` is newer than the executable."""


class Transport(Protocol):
    def download(self, location: str, destination: Path) -> Path:
        """Copy the bytes at ``location`` into ``destination``."""


class Archiver(Protocol):
    def extract(self, archive_path: Path, destination: Path) -> Path:
        """Expand ``archive_path`` into ``destination``."""


class Workspace(Protocol):
    def create_directory(self, path: Path) -> Path:
        ...

    def delete_directory(self, path: Path) -> None:
        ...

    def create_temp_path(self, name: str) -> Path:
        ...


class Installer(Protocol):
    """Consume installation requests produced by the coordinator."""

    def install(self, request: InstallationRequest) -> None:
        """Schedule the replacement described by ``request``."""


__all__ = [
    "Archiver",
    "CheckCommand",
    "Installer",
    "PackageResolver",
    "ProgressCallback",
    "SourceProbe",
    "Transport",
    "VersionComparator",
    "Workspace",
]
