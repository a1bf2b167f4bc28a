from __future__ import annotations

from pathlib import Path
from urllib.error import HTTPError, URLError

import pytest

from services.update.probe import UrlSourceProbe, is_url_formatted, local_path_from_url


@pytest.mark.parametrize(
    "source",
    [
        "https://example.com/pkg.zip",
        "http://updates.local:8080/app/manifest.json",
        "file:///srv/updates/pkg.zip",
    ],
)
def test_well_formed_sources(source: str) -> None:
    assert is_url_formatted(source) is True


@pytest.mark.parametrize(
    "source",
    [
        "not a url",
        "",
        "   ",
        "example.com/pkg.zip",
        "ftp://example.com/pkg.zip",
        "https://",
        " https://example.com/pkg.zip",
        "https://example.com/my pkg.zip",
    ],
)
def test_malformed_sources(source: str) -> None:
    assert is_url_formatted(source) is False


def test_local_path_only_for_file_urls(tmp_path: Path) -> None:
    package = tmp_path / "pkg.zip"

    assert local_path_from_url(package.as_uri()) == package
    assert local_path_from_url("https://example.com/pkg.zip") is None


def test_file_source_reachability(tmp_path: Path) -> None:
    package = tmp_path / "pkg.zip"
    probe = UrlSourceProbe()

    assert probe.is_reachable(package.as_uri()) is False

    package.write_bytes(b"zip")

    assert probe.is_reachable(package.as_uri()) is True


def test_remote_source_reachability_uses_head_request(monkeypatch: pytest.MonkeyPatch) -> None:
    requests: list[tuple[str, str, float]] = []

    class FakeResponse:
        status = 200

        def __enter__(self) -> "FakeResponse":
            return self

        def __exit__(self, *exc_info: object) -> None:
            return None

    def fake_urlopen(request, timeout):  # type: ignore[no-untyped-def]
        requests.append((request.full_url, request.get_method(), timeout))
        return FakeResponse()

    monkeypatch.setattr("services.update.probe.urlopen", fake_urlopen)

    assert UrlSourceProbe(timeout=5).is_reachable("https://example.com/pkg.zip") is True
    assert requests == [("https://example.com/pkg.zip", "HEAD", 5)]


@pytest.mark.parametrize(
    "error",
    [
        HTTPError("https://example.com/pkg.zip", 404, "Not Found", None, None),  # type: ignore[arg-type]
        URLError("name resolution failed"),
        TimeoutError("timed out"),
    ],
)
def test_remote_source_failures_are_unreachable(
    monkeypatch: pytest.MonkeyPatch, error: Exception
) -> None:
    def fake_urlopen(request, timeout):  # type: ignore[no-untyped-def]
        raise error

    monkeypatch.setattr("services.update.probe.urlopen", fake_urlopen)

    assert UrlSourceProbe().is_reachable("https://example.com/pkg.zip") is False
