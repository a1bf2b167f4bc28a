"""Hashing helpers for package verification."""

from __future__ import annotations

import hashlib
from pathlib import Path

from services.update.models import DownloadError


def calculate_sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as source:
        for chunk in iter(lambda: source.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def verify_sha256(path: Path, expected: str) -> None:
    actual = calculate_sha256(path)
    if expected.strip().lower() != actual.lower():
        raise DownloadError(
            f"Package hash mismatch: expected {expected} but received {actual}"
        )
