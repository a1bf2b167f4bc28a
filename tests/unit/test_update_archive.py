from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

from services.update.archive import ArchiveLimits, ZipArchiver, find_entry_for_target
from services.update.models import ExtractionError
from tests.unit.update_test_utils import build_update_archive


def test_zip_archiver_extracts_into_destination(tmp_path: Path) -> None:
    archive_path = build_update_archive(tmp_path)
    destination = tmp_path / "update"

    result = ZipArchiver().extract(archive_path, destination)

    assert result == destination
    assert (destination / "app" / "app.bin").read_bytes() == b"new binary"
    assert (destination / "app" / "lib" / "support.so").read_bytes() == b"support"


def test_zip_archiver_rejects_path_traversal(tmp_path: Path) -> None:
    archive_path = tmp_path / "evil.zip"
    with zipfile.ZipFile(archive_path, "w") as archive:
        archive.writestr("../escape.txt", "nope")

    with pytest.raises(ExtractionError, match="unsafe"):
        ZipArchiver().extract(archive_path, tmp_path / "update")

    assert not (tmp_path / "escape.txt").exists()


def test_zip_archiver_enforces_entry_limit(tmp_path: Path) -> None:
    archive_path = build_update_archive(tmp_path)

    with pytest.raises(ExtractionError, match="too many entries"):
        ZipArchiver(ArchiveLimits(max_entries=1)).extract(archive_path, tmp_path / "update")


def test_zip_archiver_enforces_compression_ratio(tmp_path: Path) -> None:
    archive_path = tmp_path / "bomb.zip"
    with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("zeros.bin", b"\0" * 1_000_000)

    with pytest.raises(ExtractionError, match="compression ratio"):
        ZipArchiver(ArchiveLimits(max_compression_ratio=10)).extract(
            archive_path, tmp_path / "update"
        )


def test_zip_archiver_wraps_corrupt_archive(tmp_path: Path) -> None:
    archive_path = tmp_path / "broken.zip"
    archive_path.write_bytes(b"this is not a zip file")

    with pytest.raises(ExtractionError, match="Failed to extract"):
        ZipArchiver().extract(archive_path, tmp_path / "update")


def test_find_entry_for_target_prefers_shallowest_match(tmp_path: Path) -> None:
    (tmp_path / "app" / "nested").mkdir(parents=True)
    shallow = tmp_path / "app" / "App.bin"
    shallow.write_bytes(b"a")
    (tmp_path / "app" / "nested" / "app.bin").write_bytes(b"b")

    assert find_entry_for_target(tmp_path, "app.bin") == shallow
    assert find_entry_for_target(tmp_path, "other.bin") is None
