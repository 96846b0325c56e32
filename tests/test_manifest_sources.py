# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the layered manifest sources."""

from __future__ import annotations

import io
import json
import urllib.error
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from polyver.errors import ManifestFetchError, ManifestNotFoundError, ManifestParseError
from polyver.manifest.default import ManifestService
from polyver.manifest.models import Manifest, parse_manifest
from polyver.manifest.sources import CachedSource, EmbeddedSource, FallbackSource, FileSource, HTTPSource


def _manifest(*versions: str) -> Manifest:
    return parse_manifest(
        json.dumps(
            {
                "version": 1,
                "versions": {
                    version: {"linux-amd64": {"url": f"https://dl.example/{version}.tar.gz"}} for version in versions
                },
            }
        )
    )


class CountingSource:
    """Serve a fixed manifest per runtime and count fetches."""

    def __init__(self, manifests: dict[str, Manifest]) -> None:
        self.manifests = manifests
        self.calls: list[str] = []

    def get_manifest(self, runtime: str) -> Manifest:
        self.calls.append(runtime)
        if runtime not in self.manifests:
            raise ManifestNotFoundError(runtime)
        return self.manifests[runtime]

    def list_runtimes(self) -> list[str]:
        return sorted(self.manifests)


class Clock:
    def __init__(self) -> None:
        self.now = datetime(2025, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now


class FakeResponse(io.BytesIO):
    status = 200


def test_cached_source_serves_fresh_entries(tmp_path: Path) -> None:
    inner = CountingSource({"node": _manifest("1.0.0")})
    clock = Clock()
    source = CachedSource(inner, tmp_path / "cache", timedelta(hours=1), clock=clock)

    first = source.get_manifest("node")
    clock.now += timedelta(minutes=59)
    second = source.get_manifest("node")

    assert first == second
    assert inner.calls == ["node"]
    assert source.cache_path("node").is_file()


def test_cached_source_refetches_after_ttl(tmp_path: Path) -> None:
    inner = CountingSource({"node": _manifest("1.0.0")})
    clock = Clock()
    source = CachedSource(inner, tmp_path / "cache", timedelta(hours=1), clock=clock)
    source.get_manifest("node")

    inner.manifests["node"] = _manifest("1.0.0", "1.1.0")
    clock.now += timedelta(hours=2)

    assert source.get_manifest("node").list_versions() == ["1.0.0", "1.1.0"]
    assert inner.calls == ["node", "node"]


def test_cached_source_ignores_corrupt_entry(tmp_path: Path) -> None:
    inner = CountingSource({"ruby": _manifest("3.3.0")})
    source = CachedSource(inner, tmp_path, clock=Clock())
    source.cache_path("ruby").write_text("garbage", encoding="utf-8")

    assert source.get_manifest("ruby").list_versions() == ["3.3.0"]
    assert inner.calls == ["ruby"]


def test_force_refresh_bypasses_cache(tmp_path: Path) -> None:
    inner = CountingSource({"node": _manifest("1.0.0")})
    source = CachedSource(inner, tmp_path, clock=Clock())
    source.get_manifest("node")
    inner.manifests["node"] = _manifest("2.0.0")

    assert source.force_refresh("node").list_versions() == ["2.0.0"]
    assert source.get_manifest("node").list_versions() == ["2.0.0"]
    assert inner.calls == ["node", "node"]


def test_clear_cache_removes_entries(tmp_path: Path) -> None:
    inner = CountingSource({"node": _manifest("1.0.0"), "ruby": _manifest("3.3.0")})
    source = CachedSource(inner, tmp_path / "cache", clock=Clock())
    source.get_manifest("node")
    source.get_manifest("ruby")

    source.clear_cache()

    assert list((tmp_path / "cache").iterdir()) == []
    CachedSource(inner, tmp_path / "missing").clear_cache()


def test_fallback_uses_secondary_on_failure(offline_source) -> None:
    secondary = CountingSource({"node": _manifest("1.0.0")})
    fallback = FallbackSource(offline_source, secondary)

    assert fallback.get_manifest("node") == secondary.get_manifest("node")
    assert fallback.list_runtimes() == ["node"]
    assert offline_source.calls == 1


def test_fallback_propagates_secondary_failure(offline_source) -> None:
    fallback = FallbackSource(offline_source, CountingSource({}))

    with pytest.raises(ManifestNotFoundError):
        fallback.get_manifest("zig")


class BrokenSource:
    """Fail every lookup with an error outside the manifest family."""

    def get_manifest(self, runtime: str) -> Manifest:
        raise RuntimeError(f"backend exploded fetching {runtime}")

    def list_runtimes(self) -> list[str]:
        raise RuntimeError("backend exploded listing runtimes")


def test_fallback_recovers_from_unexpected_primary_errors() -> None:
    secondary = CountingSource({"ruby": _manifest("3.3.0")})
    fallback = FallbackSource(BrokenSource(), secondary)

    assert fallback.get_manifest("ruby").list_versions() == ["3.3.0"]
    assert fallback.list_runtimes() == ["ruby"]


def test_http_source_rejects_schemeless_base_as_fetch_error() -> None:
    source = HTTPSource("manifests.internal/polyver")

    with pytest.raises(ManifestFetchError):
        source.get_manifest("node")


def test_service_with_schemeless_remote_uses_embedded(tmp_path: Path) -> None:
    service = ManifestService(tmp_path, environ={"POLYVER_MANIFEST_URL": "manifests.internal/polyver"})

    assert service.get_manifest("node") == service.embedded.get_manifest("node")
    manifest, from_remote = service.force_refresh_runtime("python")
    assert not from_remote
    assert manifest == service.embedded.get_manifest("python")


def test_http_source_parses_response() -> None:
    payload = _manifest("1.0.0").to_json().encode()
    requests: list[str] = []

    def opener(request, timeout):
        requests.append(request.full_url)
        return FakeResponse(payload)

    source = HTTPSource("https://manifests.example/", opener=opener)

    assert source.get_manifest("node").list_versions() == ["1.0.0"]
    assert requests == ["https://manifests.example/node.json"]


def test_http_source_maps_404_to_not_found() -> None:
    def opener(request, timeout):
        raise urllib.error.HTTPError(request.full_url, 404, "Not Found", None, None)

    with pytest.raises(ManifestNotFoundError):
        HTTPSource("https://manifests.example", opener=opener).get_manifest("zig")


def test_http_source_wraps_other_failures() -> None:
    def server_error(request, timeout):
        raise urllib.error.HTTPError(request.full_url, 503, "Unavailable", None, None)

    def unreachable(request, timeout):
        raise urllib.error.URLError("connection refused")

    with pytest.raises(ManifestFetchError, match="HTTP 503"):
        HTTPSource("https://m.example", opener=server_error).get_manifest("node")
    with pytest.raises(ManifestFetchError, match="connection refused"):
        HTTPSource("https://m.example", opener=unreachable).get_manifest("node")
    with pytest.raises(ManifestFetchError):
        HTTPSource("https://m.example").list_runtimes()


def test_file_source_reads_directory(tmp_path: Path) -> None:
    (tmp_path / "node.json").write_text(_manifest("1.0.0").to_json(), encoding="utf-8")
    (tmp_path / "bad.json").write_text("{", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
    source = FileSource(tmp_path)

    assert source.list_runtimes() == ["bad", "node"]
    assert source.get_manifest("node").list_versions() == ["1.0.0"]
    with pytest.raises(ManifestParseError):
        source.get_manifest("bad")
    with pytest.raises(ManifestNotFoundError):
        source.get_manifest("ruby")


def test_embedded_manifests_are_bundled() -> None:
    source = EmbeddedSource()

    assert {"node", "python", "ruby"} <= set(source.list_runtimes())
    assert source.get_manifest("node").list_versions()
    with pytest.raises(ManifestNotFoundError):
        source.get_manifest("cobol")


def test_service_falls_back_to_embedded(tmp_path: Path, offline_source) -> None:
    service = ManifestService(tmp_path, remote=offline_source)

    manifest, from_remote = service.force_refresh_runtime("node")

    assert not from_remote
    assert manifest == service.embedded.get_manifest("node")
    assert service.get_manifest("ruby") == service.embedded.get_manifest("ruby")
    assert "python" in service.list_available_runtimes()


def test_service_refresh_prefers_remote(tmp_path: Path) -> None:
    remote = CountingSource({"node": _manifest("99.0.0")})
    service = ManifestService(tmp_path, remote=remote)

    manifest, from_remote = service.force_refresh_runtime("node")

    assert from_remote
    assert manifest.list_versions() == ["99.0.0"]
    assert service.cached.cache_path("node").is_file()

    service.clear_all_cache()

    assert not service.cached.cache_path("node").exists()

