"""Helpers for comparing the installed version against a package source."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from packaging.version import InvalidVersion, Version

from app.version import get_app_version
from services.update.collaborators import PackageResolver
from services.update.constants import VERSION_FILE_NAME

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "ManifestVersionComparator",
    "compare_versions",
    "installed_version_for",
    "is_version_newer",
]


def compare_versions(current_version: str, candidate: str) -> int:
    """Compare ``candidate`` against ``current_version``.

    Returns ``1`` when ``candidate`` is newer, ``-1`` when it is older and ``0``
    when the versions are equivalent.  Strings that are not PEP 440 versions
    are compared token by token.
    """

    if candidate == current_version:
        return 0

    try:
        candidate_version = Version(candidate)
        current_version_parsed = Version(current_version)
    except InvalidVersion:
        return _fallback_compare(current_version, candidate)

    if candidate_version == current_version_parsed:
        return 0
    if candidate_version > current_version_parsed:
        return 1
    return -1


def is_version_newer(current_version: str, candidate: str) -> bool:
    """Return ``True`` if ``candidate`` is newer than ``current_version``."""

    return compare_versions(current_version, candidate) > 0


def installed_version_for(executable_path: str) -> str:
    """Return the version of the executable at ``executable_path``.

    A ``VERSION`` file next to the executable wins; otherwise the running
    application's version is used.
    """

    if executable_path:
        version_file = Path(executable_path).parent / VERSION_FILE_NAME
        try:
            text = version_file.read_text(encoding="utf-8").strip()
        except OSError:
            text = ""
        if text:
            return text.lstrip("v")
    return get_app_version()


class ManifestVersionComparator:
    """Compare the installed version with the version published by the package source."""

    def __init__(
        self,
        resolver: PackageResolver,
        *,
        installed_version: Callable[[str], str] = installed_version_for,
    ) -> None:
        self._resolver = resolver
        self._installed_version = installed_version

    def is_update_required(self, executable_path: str, source: str) -> bool:
        reference = self._resolver.resolve(source)
        if reference.version is None:
            _LOGGER.warning("Package source %s does not publish a version", source)
            return False

        current = self._installed_version(executable_path)
        newer = is_version_newer(current, reference.version)
        if newer:
            _LOGGER.info("Update available: %s -> %s", current, reference.version)
        else:
            _LOGGER.debug("Current version %s is up to date", current)
        return newer


def _fallback_compare(current_version: str, candidate: str) -> int:
    def tokenize(version: str) -> list[tuple[int, object]]:
        tokens: list[tuple[int, object]] = []
        for raw in version.replace("-", ".").replace("+", ".").split("."):
            if not raw:
                continue
            if raw.isdigit():
                tokens.append((0, int(raw)))
            else:
                tokens.append((1, raw.lower()))
        return tokens

    current_tokens = tokenize(current_version)
    candidate_tokens = tokenize(candidate)
    length = max(len(current_tokens), len(candidate_tokens))
    for index in range(length):
        current_token = current_tokens[index] if index < len(current_tokens) else (0, 0)
        candidate_token = candidate_tokens[index] if index < len(candidate_tokens) else (0, 0)
        if candidate_token != current_token:
            return 1 if candidate_token > current_token else -1
    return 0
