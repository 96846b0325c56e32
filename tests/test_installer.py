# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the runtime installer."""

from __future__ import annotations

import io
import os
import tarfile
from pathlib import Path

import pytest

from polyver.context import AppContext
from polyver.errors import ChecksumMismatchError, PlatformUnavailableError, PolyverError, UnknownRuntimeError
from polyver.installer import Installer
from polyver.manifest.default import ManifestService
from polyver.manifest.sources import EmbeddedSource, FileSource
from polyver.runtimes import register_builtin_providers

PLATFORM = "linux-amd64"

posix_only = pytest.mark.skipif(os.name == "nt", reason="POSIX executable bits")


@pytest.fixture
def manifest_dir(tmp_path: Path, write_json) -> Path:
    directory = tmp_path / "manifests"
    write_json(
        directory / "node.json",
        {
            "version": 1,
            "versions": {
                "20.18.0": {PLATFORM: {"url": "https://dl.example/node-v20.18.0-linux-x64.tar.gz", "sha256": "aa"}},
                "22.11.0": {
                    PLATFORM: {"url": "https://dl.example/node-v22.11.0-linux-x64.tar.gz"},
                    "windows-386": None,
                },
                "9.11.2": {PLATFORM: {"url": "https://dl.example/node-v9.11.2-linux-x64.tar.gz"}},
                "23.0.0": {"darwin-arm64": {"url": "https://dl.example/node-v23.0.0-darwin-arm64.tar.gz"}},
            },
        },
    )
    return directory


@pytest.fixture
def install_context(context: AppContext, manifest_dir: Path) -> AppContext:
    register_builtin_providers(context.registry, context.paths, context.resolver, environ={"PATH": ""})
    context.manifests = ManifestService(context.paths.manifest_cache_dir(), remote=FileSource(manifest_dir))
    return context


class FakeDownloader:
    """Write a small Node-shaped tarball instead of downloading."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def __call__(self, url: str, dest: Path, sha256: str = "", *, progress=None) -> str:
        self.calls.append((url, sha256))
        dest.parent.mkdir(parents=True, exist_ok=True)
        with tarfile.open(dest, "w:gz") as bundle:
            for name in ("node-v/bin/node", "node-v/bin/npm", "node-v/bin/corepack"):
                data = b"#!/bin/sh\nexit 0\n"
                info = tarfile.TarInfo(name)
                info.size = len(data)
                info.mode = 0o755
                bundle.addfile(info, io.BytesIO(data))
        if progress is not None:
            progress(1, 1)
        return sha256 or "digest"


@posix_only
def test_install_extracts_and_rebuilds_shims(install_context: AppContext) -> None:
    downloader = FakeDownloader()
    progress: list[tuple[int, int | None]] = []

    result = Installer(install_context, downloader=downloader).install(
        "node",
        "22.11.0",
        PLATFORM,
        progress=lambda done, total: progress.append((done, total)),
    )

    assert result.path == install_context.paths.runtime_version_path("node", "22.11.0")
    assert (result.path / "bin" / "node").is_file()
    assert result.verified is False
    assert downloader.calls == [("https://dl.example/node-v22.11.0-linux-x64.tar.gz", "")]
    assert progress == [(1, 1)]
    assert result.shims is not None
    assert {"node", "npm", "npx", "corepack"} <= set(result.shims.shim_map)
    assert install_context.shim_cache.lookup("corepack") == ("node", True)


def test_install_reports_verified_download(install_context: AppContext) -> None:
    result = Installer(install_context, downloader=FakeDownloader()).install("node", "20.18.0", PLATFORM)

    assert result.verified is True


def test_install_verifies_against_published_checksum_listing(
    install_context: AppContext,
    manifest_dir: Path,
    write_json,
) -> None:
    write_json(
        manifest_dir / "node.json",
        {
            "version": 1,
            "versions": {
                "22.11.0": {
                    PLATFORM: {
                        "url": "https://dl.example/v22.11.0/node-v22.11.0-linux-x64.tar.gz",
                        "sha256_url": "https://dl.example/v22.11.0/SHASUMS256.txt",
                        "sha256_source": "upstream",
                    }
                },
            },
        },
    )
    lookups: list[tuple[str, str]] = []

    def lookup(listing_url: str, archive_url: str) -> str:
        lookups.append((listing_url, archive_url))
        return "c" * 64

    downloader = FakeDownloader()
    result = Installer(install_context, downloader=downloader, checksum_lookup=lookup).install(
        "node", "22.11.0", PLATFORM
    )

    assert result.verified is True
    assert lookups == [
        ("https://dl.example/v22.11.0/SHASUMS256.txt", "https://dl.example/v22.11.0/node-v22.11.0-linux-x64.tar.gz")
    ]
    assert downloader.calls == [("https://dl.example/v22.11.0/node-v22.11.0-linux-x64.tar.gz", "c" * 64)]


def test_embedded_node_builds_carry_checksum_listings() -> None:
    manifest = EmbeddedSource().get_manifest("node")

    for version in manifest.list_versions():
        download = manifest.get_download(version, PLATFORM)
        assert download is not None
        assert download.sha256 or download.sha256_url


def test_install_refuses_existing_version(install_context: AppContext) -> None:
    install_context.paths.runtime_version_path("node", "22.11.0").mkdir(parents=True)

    with pytest.raises(PolyverError, match="already installed"):
        Installer(install_context, downloader=FakeDownloader()).install("node", "22.11.0", PLATFORM)


def test_install_unknown_runtime(install_context: AppContext) -> None:
    with pytest.raises(UnknownRuntimeError):
        Installer(install_context, downloader=FakeDownloader()).install("cobol", "1.0.0", PLATFORM)


def test_unavailable_and_unknown_platforms_differ(install_context: AppContext) -> None:
    installer = Installer(install_context, downloader=FakeDownloader())

    with pytest.raises(PlatformUnavailableError) as unavailable:
        installer.install("node", "22.11.0", "windows-386")
    with pytest.raises(PlatformUnavailableError) as unknown:
        installer.install("node", "22.11.0", "darwin-amd64")

    assert unavailable.value.known is True
    assert "is not available for windows-386" in str(unavailable.value)
    assert unknown.value.known is False
    assert "no download information" in str(unknown.value)


def test_unsupported_platform_key_is_rejected(install_context: AppContext) -> None:
    installer = Installer(install_context, downloader=FakeDownloader())

    with pytest.raises(PolyverError, match="unsupported platform 'plan9-mips'"):
        installer.install("node", "22.11.0", "plan9-mips")
    with pytest.raises(PolyverError, match="unsupported platform"):
        installer.list_available("node", "linux-x64")


def test_failed_download_leaves_no_install(install_context: AppContext) -> None:
    def failing(url: str, dest: Path, sha256: str = "", *, progress=None) -> str:
        raise ChecksumMismatchError(sha256, "bb")

    with pytest.raises(ChecksumMismatchError):
        Installer(install_context, downloader=failing).install("node", "20.18.0", PLATFORM)

    assert not install_context.paths.runtime_version_path("node", "20.18.0").exists()


def test_uninstall_removes_version(install_context: AppContext) -> None:
    installer = Installer(install_context, downloader=FakeDownloader())
    installer.install("node", "20.18.0", PLATFORM)
    installer.install("node", "22.11.0", PLATFORM)

    removed = installer.uninstall("node", "22.11.0")

    assert not removed.exists()
    with pytest.raises(PolyverError, match="is not installed"):
        installer.uninstall("node", "22.11.0")


def test_first_install_becomes_global_default(install_context: AppContext) -> None:
    installer = Installer(install_context, downloader=FakeDownloader())

    first = installer.install("node", "20.18.0", PLATFORM)
    second = installer.install("node", "22.11.0", PLATFORM)

    assert first.set_global is True
    assert second.set_global is False
    assert install_context.resolver.global_version("node") == "20.18.0"


def test_install_keeps_existing_global_default(install_context: AppContext) -> None:
    install_context.resolver.set_global_version("node", "18.0.0")

    result = Installer(install_context, downloader=FakeDownloader()).install("node", "22.11.0", PLATFORM)

    assert result.set_global is False
    assert install_context.resolver.global_version("node") == "18.0.0"


def test_uninstall_refuses_active_global_version(install_context: AppContext) -> None:
    installer = Installer(install_context, downloader=FakeDownloader())
    result = installer.install("node", "22.11.0", PLATFORM)

    with pytest.raises(PolyverError, match="active global version") as excinfo:
        installer.uninstall("node", "22.11.0")

    assert "polyver global node <version>" in str(excinfo.value)
    assert result.path.is_dir()


def test_list_available_sorted_newest_first(install_context: AppContext) -> None:
    available = Installer(install_context).list_available("node", PLATFORM)

    assert [item.version.raw for item in available] == ["22.11.0", "20.18.0", "9.11.2"]
    assert available[0].download is not None


def test_list_available_unknown_runtime(install_context: AppContext) -> None:
    with pytest.raises(UnknownRuntimeError):
        Installer(install_context).list_available("cobol", PLATFORM)


def test_embedded_manifest_used_when_remote_fails(context: AppContext) -> None:
    register_builtin_providers(context.registry, context.paths, context.resolver, environ={"PATH": ""})

    available = Installer(context).list_available("node", PLATFORM)

    assert available
    assert {item.version.raw for item in available} <= set(EmbeddedSource().get_manifest("node").list_versions())
