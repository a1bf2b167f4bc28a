from __future__ import annotations

from pathlib import Path

import pytest

from services.update.models import PackageReference
from services.update.versioning import (
    ManifestVersionComparator,
    compare_versions,
    installed_version_for,
    is_version_newer,
)


@pytest.mark.parametrize(
    ("current", "candidate", "expected"),
    [
        ("1.0.0", "1.0.1", 1),
        ("1.0.1", "1.0.0", -1),
        ("1.0", "1.0.0", 0),
        ("1.2.0", "1.10.0", 1),
        ("2.0.0rc1", "2.0.0", 1),
        ("build-7", "build-12", 1),
    ],
)
def test_compare_versions(current: str, candidate: str, expected: int) -> None:
    assert compare_versions(current, candidate) == expected


def test_is_version_newer() -> None:
    assert is_version_newer("1.0.0", "2.0.0") is True
    assert is_version_newer("2.0.0", "2.0.0") is False


def test_installed_version_prefers_version_file(tmp_path: Path) -> None:
    executable = tmp_path / "app.bin"
    (tmp_path / "VERSION").write_text("v3.4.5\n", encoding="utf-8")

    assert installed_version_for(str(executable)) == "3.4.5"


def test_installed_version_falls_back_to_app_version(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr("services.update.versioning.get_app_version", lambda: "0.9.0")

    assert installed_version_for(str(tmp_path / "app.bin")) == "0.9.0"
    assert installed_version_for("") == "0.9.0"


class _Resolver:
    def __init__(self, version: str | None) -> None:
        self.version = version

    def resolve(self, source: str) -> PackageReference:
        return PackageReference(source=source, download_location=source, version=self.version)


@pytest.mark.parametrize(
    ("remote", "expected"),
    [("2.0.0", True), ("1.0.0", False), ("0.5.0", False), (None, False)],
)
def test_manifest_comparator(remote: str | None, expected: bool) -> None:
    comparator = ManifestVersionComparator(
        _Resolver(remote), installed_version=lambda executable: "1.0.0"
    )

    assert comparator.is_update_required("/opt/app/app.bin", "https://example.com/m.json") is expected
