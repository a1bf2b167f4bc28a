"""Build installation plans for extracted update packages."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from services.update.archive import find_entry_for_target
from services.update.installer_script import write_update_script
from services.update.models import InstallError, InstallationPlan, InstallationRequest
from services.update.recovery import get_failure_marker_path


_LOGGER = logging.getLogger(__name__)

__all__ = ["build_installation_plan", "stage_update"]


def build_installation_plan(
    request: InstallationRequest, *, windows: bool | None = None
) -> InstallationPlan:
    """Stage the extracted package and return the launcher command for ``request``."""

    if windows is None:
        windows = os.name == "nt"
    install_root = request.target_path.parent
    stage_dir = stage_update(request)
    failure_marker = get_failure_marker_path(install_root)
    script_path = write_update_script(windows=windows)

    if windows:
        command = (
            "powershell",
            "-NoProfile",
            "-WindowStyle",
            "Hidden",
            "-ExecutionPolicy",
            "Bypass",
            "-File",
            str(script_path),
            "-ProcessId",
            str(request.process_id),
            "-StagePath",
            str(stage_dir),
            "-InstallPath",
            str(install_root),
            "-ExecutablePath",
            str(request.target_path),
            "-FailureMarkerPath",
            str(failure_marker),
        )
    else:
        command = (
            "/bin/sh",
            str(script_path),
            str(request.process_id),
            str(stage_dir),
            str(install_root),
            str(request.target_path),
            str(failure_marker),
        )
    return InstallationPlan(command, working_directory=script_path.parent)


def stage_update(request: InstallationRequest) -> Path:
    """Copy the package tree holding the replacement executable next to the install root."""

    replacement = find_entry_for_target(request.extracted_directory, request.target_path.name)
    if replacement is None:
        raise InstallError(
            f"Update package does not contain a replacement for {request.target_path.name}"
        )

    install_root = request.target_path.parent
    package_root = replacement.parent
    stage_dir = install_root.parent / f"{install_root.name}.update"
    if stage_dir.exists():
        shutil.rmtree(stage_dir)

    archive_name = request.archive_path.name

    def _ignore(directory: str, names: list[str]) -> set[str]:
        return {
            name for name in names if name == archive_name or name.endswith(".part")
        }

    _LOGGER.debug("Copying extracted package from %s to %s", package_root, stage_dir)
    try:
        shutil.copytree(package_root, stage_dir, ignore=_ignore)
    except OSError as exc:
        raise InstallError(f"Failed to stage update: {exc}") from exc
    _LOGGER.info(
        "Staged update at %s for executable %s", stage_dir, request.target_path
    )
    return stage_dir
