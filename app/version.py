"""Version of the running updater build."""

from __future__ import annotations

import os
import subprocess
from functools import lru_cache
from importlib import resources

_FALLBACK_VERSION = "0.0.0.dev0"
_VERSION_ENV = "COMET_APP_VERSION"


def _version_from_env() -> str | None:
    value = os.environ.get(_VERSION_ENV)
    if value and value.strip():
        return _strip_tag_prefix(value)
    return None


def _read_version_file() -> str | None:
    try:
        text = resources.files(__package__).joinpath("VERSION").read_text(encoding="utf-8")
    except (FileNotFoundError, ModuleNotFoundError, OSError):
        return None
    return _strip_tag_prefix(text) or None


def _version_from_git() -> str | None:
    try:
        output = subprocess.check_output(
            ["git", "describe", "--tags", "--abbrev=0"],
            stderr=subprocess.DEVNULL,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    return _strip_tag_prefix(output) or None


def _strip_tag_prefix(raw_version: str) -> str:
    version = raw_version.strip()
    return version[1:] if version[:1] in {"v", "V"} else version


@lru_cache(maxsize=1)
def get_app_version() -> str:
    """Return the version of this build.

    ``COMET_APP_VERSION`` wins, then the bundled ``VERSION`` file, then the
    latest git tag of a source checkout.
    """

    for resolver in (_version_from_env, _read_version_file, _version_from_git):
        version = resolver()
        if version:
            return version
    return _FALLBACK_VERSION


__all__ = ["get_app_version"]
