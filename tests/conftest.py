# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from polyver.config import VersionResolver
from polyver.console import get_console_manager
from polyver.context import AppContext
from polyver.errors import ManifestFetchError
from polyver.filesystem import make_executable
from polyver.manifest.default import ManifestService
from polyver.manifest.models import Manifest
from polyver.paths import Paths
from polyver.runtime.registry import Registry
from polyver.runtime.version import DetectedVersion, InstalledVersion
from polyver.shim.cache import ShimNameCache


@dataclass
class FakeProvider:
    """Minimal provider whose installed versions map to executable paths."""

    name: str
    shim_names: tuple[str, ...] = ()
    installed: dict[str, Path] = field(default_factory=dict)
    reshim: bool = False
    display_name: str = ""

    def __post_init__(self) -> None:
        if not self.display_name:
            self.display_name = self.name.title()

    def shims(self) -> list[str]:
        return list(self.shim_names) or [self.name]

    def is_installed(self, version: str) -> bool:
        return version in self.installed

    def install_path(self, version: str) -> Path:
        return self.installed[version].parent

    def executable_path(self, version: str) -> Path:
        if version not in self.installed:
            raise FileNotFoundError(version)
        return self.installed[version]

    def list_installed(self) -> list[InstalledVersion]:
        return []

    def global_version(self) -> str:
        raise NotImplementedError

    def set_global_version(self, version: str) -> None:
        raise NotImplementedError

    def local_version(self) -> str:
        raise NotImplementedError

    def set_local_version(self, version: str) -> None:
        raise NotImplementedError

    def current_version(self) -> str:
        raise NotImplementedError

    def detect_installed(self) -> list[DetectedVersion]:
        return []

    def should_reshim_after(self, shim_name: str, args: Sequence[str]) -> bool:
        return self.reshim


@dataclass
class FakeRunner:
    """Process runner recording launches instead of starting processes."""

    exit_code: int = 0
    calls: list[tuple[str, str, list[str]]] = field(default_factory=list)

    def execute(self, path: str, args: Sequence[str]) -> int:
        self.calls.append(("execute", path, list(args)))
        return self.exit_code

    def execute_and_wait(self, path: str, args: Sequence[str]) -> int:
        self.calls.append(("wait", path, list(args)))
        return self.exit_code


class OfflineSource:
    """Remote manifest source that always fails."""

    def __init__(self) -> None:
        self.calls = 0

    def get_manifest(self, runtime: str) -> Manifest:
        self.calls += 1
        raise ManifestFetchError("offline")

    def list_runtimes(self) -> list[str]:
        raise ManifestFetchError("offline")


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep tests away from the real data root and debug settings."""

    monkeypatch.setenv("POLYVER_ROOT", str(tmp_path / "env-root"))
    monkeypatch.delenv("POLYVER_DEBUG", raising=False)
    monkeypatch.delenv("POLYVER_MANIFEST_URL", raising=False)
    get_console_manager().clear()


@pytest.fixture
def paths(tmp_path: Path) -> Paths:
    return Paths(tmp_path / "root")


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    directory = tmp_path / "work"
    directory.mkdir()
    return directory


@pytest.fixture
def resolver(paths: Paths, workdir: Path) -> VersionResolver:
    return VersionResolver(paths, cwd=lambda: workdir)


@pytest.fixture
def registry() -> Registry:
    return Registry()


@pytest.fixture
def offline_source() -> OfflineSource:
    return OfflineSource()


@pytest.fixture
def manifests(paths: Paths, offline_source: OfflineSource) -> ManifestService:
    return ManifestService(paths.manifest_cache_dir(), remote=offline_source)


@pytest.fixture
def context(
    paths: Paths,
    registry: Registry,
    resolver: VersionResolver,
    manifests: ManifestService,
) -> AppContext:
    return AppContext(
        paths=paths,
        registry=registry,
        resolver=resolver,
        shim_cache=ShimNameCache(paths.shim_map_path()),
        manifests=manifests,
    )


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_provider() -> Callable[..., FakeProvider]:
    return FakeProvider


@pytest.fixture
def write_json() -> Callable[[Path, object], Path]:
    """Return a helper writing ``data`` as JSON to ``path`` (parents created)."""

    def _write(path: Path, data: object) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_executable_file() -> Callable[[Path], Path]:
    """Return a helper creating an executable script at ``path``."""

    def _create(path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
        make_executable(path)
        return path

    return _create
