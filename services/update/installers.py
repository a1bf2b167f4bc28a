"""Installer implementations that hand the swap to an external process."""

from __future__ import annotations

import logging
import os
import subprocess
from typing import Any

from services.update.installation_planner import build_installation_plan
from services.update.models import InstallError, InstallationPlan, InstallationRequest

_LOGGER = logging.getLogger(__name__)

__all__ = ["ScriptInstaller", "launch_plan"]


class ScriptInstaller:
    """Stage the update and launch a script that installs it once this process exits.

    The script waits for ``request.process_id`` to terminate, so the caller is
    expected to close the application after :meth:`install` returns.
    """

    def __init__(self, *, windows: bool | None = None) -> None:
        self._windows = windows

    def install(self, request: InstallationRequest) -> None:
        plan = build_installation_plan(request, windows=self._windows)
        _LOGGER.debug("Installation plan command: %s", plan.command)
        launch_plan(plan)
        _LOGGER.info(
            "Scheduled replacement of %s after process %s exits",
            request.target_path,
            request.process_id,
        )


def launch_plan(plan: InstallationPlan) -> None:
    popen_kwargs: dict[str, Any] = {
        "stdin": subprocess.DEVNULL,
        "stdout": subprocess.DEVNULL,
        "stderr": subprocess.DEVNULL,
    }
    if os.name == "nt":  # pragma: no cover - exercised on Windows
        creationflags = getattr(subprocess, "CREATE_NO_WINDOW", 0)
        creationflags |= getattr(subprocess, "DETACHED_PROCESS", 0)
        if creationflags:
            popen_kwargs["creationflags"] = creationflags
    else:
        popen_kwargs["start_new_session"] = True
    try:
        subprocess.Popen(
            list(plan.command),
            cwd=str(plan.working_directory) if plan.working_directory else None,
            **popen_kwargs,
        )
    except OSError as exc:
        raise InstallError(f"Failed to launch installer: {exc}") from exc
