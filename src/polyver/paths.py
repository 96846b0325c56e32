# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Filesystem layout for the polyver data root."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .platform import OS_LINUX, current_os, is_windows

ROOT_ENV: Final[str] = "POLYVER_ROOT"
XDG_DATA_HOME_ENV: Final[str] = "XDG_DATA_HOME"
APP_DIRNAME: Final[str] = "polyver"
DOT_DIRNAME: Final[str] = ".polyver"

SHIMS_SUBDIR: Final[str] = "shims"
VERSIONS_SUBDIR: Final[str] = "versions"
CONFIG_SUBDIR: Final[str] = "config"
CACHE_SUBDIR: Final[str] = "cache"
MANIFESTS_SUBDIR: Final[str] = "manifests"

LOCAL_CONFIG_DIRNAME: Final[str] = ".polyver"
RUNTIMES_FILENAME: Final[str] = "runtimes.json"
SHIM_MAP_FILENAME: Final[str] = "shim-map.json"
VCS_MARKER: Final[str] = ".git"


def default_root(environ: Mapping[str, str] | None = None) -> Path:
    """Return the data root honouring ``POLYVER_ROOT`` and XDG conventions.

    Args:
        environ: Environment mapping to consult; defaults to :data:`os.environ`.

    Returns:
        Path: Absolute directory holding shims, versions, config and caches.
    """

    env = os.environ if environ is None else environ
    override = env.get(ROOT_ENV)
    if override:
        return Path(override).expanduser().absolute()

    home = Path(env.get("HOME") or Path.home()).expanduser()
    if current_os() == OS_LINUX:
        xdg = env.get(XDG_DATA_HOME_ENV)
        base = Path(xdg).expanduser() if xdg else home / ".local" / "share"
        return (base / APP_DIRNAME).absolute()
    return (home / DOT_DIRNAME).absolute()


@dataclass(frozen=True, slots=True)
class Paths:
    """Directories derived from the polyver data root."""

    root: Path

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] | None = None) -> Paths:
        return cls(root=default_root(environ))

    @property
    def shims(self) -> Path:
        return self.root / SHIMS_SUBDIR

    @property
    def versions(self) -> Path:
        return self.root / VERSIONS_SUBDIR

    @property
    def config(self) -> Path:
        return self.root / CONFIG_SUBDIR

    @property
    def cache(self) -> Path:
        return self.root / CACHE_SUBDIR

    def directories(self) -> tuple[Path, ...]:
        """Return every directory that should exist under the root."""

        return (self.root, self.shims, self.versions, self.config, self.cache)

    def ensure(self) -> None:
        """Create the directory tree when missing."""

        for directory in self.directories():
            directory.mkdir(parents=True, exist_ok=True)

    def runtime_version_path(self, runtime: str, version: str) -> Path:
        return self.versions / runtime / version

    def global_config_path(self) -> Path:
        return self.config / RUNTIMES_FILENAME

    def shim_path(self, shim_name: str) -> Path:
        """Return the on-disk location of the shim called ``shim_name``."""

        if is_windows():
            return self.shims / f"{shim_name}.cmd"
        return self.shims / shim_name

    def shim_map_path(self) -> Path:
        return self.cache / SHIM_MAP_FILENAME

    def manifest_cache_dir(self) -> Path:
        return self.cache / MANIFESTS_SUBDIR


def local_config_path(directory: Path) -> Path:
    """Return the project-local ``runtimes.json`` path for ``directory``."""

    return directory / LOCAL_CONFIG_DIRNAME / RUNTIMES_FILENAME


__all__ = [
    "LOCAL_CONFIG_DIRNAME",
    "Paths",
    "ROOT_ENV",
    "RUNTIMES_FILENAME",
    "SHIM_MAP_FILENAME",
    "VCS_MARKER",
    "default_root",
    "local_config_path",
]
