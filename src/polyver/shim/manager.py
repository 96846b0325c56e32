# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Create, remove and regenerate shim launchers."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from ..errors import PolyverError
from ..filesystem import is_executable_file, make_executable, write_text_atomic
from ..paths import Paths
from ..platform import WINDOWS_PATH_SUFFIXES, is_windows
from ..runtime.registry import Registry
from .cache import ShimMap, ShimNameCache

LOGGER = logging.getLogger(__name__)

SHIM_MARKER: Final[str] = "polyver-shim"
SHIM_MODULE: Final[str] = "polyver.shim"
BIN_SUBDIR: Final[str] = "bin"

_POSIX_TEMPLATE: Final[str] = '#!/bin/sh\n# {marker}\nexec "{python}" -m {module} "$0" "$@"\n'
_WINDOWS_TEMPLATE: Final[str] = '@echo off\r\nrem {marker}\r\n"{python}" -m {module} "%~f0" %*\r\nexit /b %ERRORLEVEL%\r\n'

RehashCallback = Callable[[str, str], None]


@dataclass(slots=True)
class RehashResult:
    """Summary of a shim regeneration."""

    shim_map: ShimMap = field(default_factory=dict)
    removed: list[str] = field(default_factory=list)

    @property
    def shims_by_runtime(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for shim_name, runtime in self.shim_map.items():
            grouped.setdefault(runtime, []).append(shim_name)
        for names in grouped.values():
            names.sort()
        return grouped

    @property
    def total_shims(self) -> int:
        return len(self.shim_map)


def render_shim(python: str) -> str:
    """Return the launcher script body that forwards to the dispatcher."""

    template = _WINDOWS_TEMPLATE if is_windows() else _POSIX_TEMPLATE
    return template.format(marker=SHIM_MARKER, python=python, module=SHIM_MODULE)


def find_executables(directory: Path) -> list[str]:
    """Return shim names for the executables directly inside ``directory``.

    On Windows the ``.exe``/``.cmd``/``.bat`` suffix is dropped from the name.
    """

    try:
        entries = sorted(directory.iterdir())
    except OSError:
        return []
    names: list[str] = []
    for entry in entries:
        if not is_executable_file(entry):
            continue
        if is_windows():
            if entry.suffix.lower() in WINDOWS_PATH_SUFFIXES:
                names.append(entry.stem)
        else:
            names.append(entry.name)
    return names


class ShimManager:
    """Maintain the shim directory and the shim name cache.

    Args:
        paths: Data-root layout.
        registry: Providers supplying the core shim names per runtime.
        cache: Shim name cache rewritten after every regeneration.
        python: Interpreter the launchers invoke.
    """

    def __init__(
        self,
        paths: Paths,
        registry: Registry,
        cache: ShimNameCache,
        *,
        python: str | None = None,
    ) -> None:
        self._paths = paths
        self._registry = registry
        self._cache = cache
        self._python = python or sys.executable

    def create_shim(self, shim_name: str) -> Path:
        path = self._paths.shim_path(shim_name)
        try:
            write_text_atomic(path, render_shim(self._python))
            if not is_windows():
                make_executable(path)
        except OSError as exc:
            raise PolyverError(f"failed to create shim {shim_name}: {exc}") from exc
        return path

    def create_shims(self, shim_names: Iterable[str]) -> None:
        for shim_name in shim_names:
            self.create_shim(shim_name)

    def remove_shim(self, shim_name: str) -> None:
        path = self._paths.shim_path(shim_name)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise PolyverError(f"failed to remove shim {shim_name}: {exc}") from exc

    def list_shims(self) -> list[str]:
        """Return the names of the shims currently on disk."""

        directory = self._paths.shims
        if not directory.is_dir():
            return []
        names = [entry.stem if is_windows() else entry.name for entry in directory.iterdir() if entry.is_file()]
        return sorted(names)

    def runtime_shims(self, runtime: str) -> list[str]:
        """Return the core shim names declared by ``runtime``'s provider."""

        if not self._registry.has(runtime):
            return [runtime]
        return list(self._registry.get(runtime).shims())

    def build_shim_map(self, callback: RehashCallback | None = None) -> ShimMap:
        """Scan installed versions and return the shim-to-runtime map.

        Raises:
            PolyverError: If nothing is installed.
        """

        versions_dir = self._paths.versions
        if not versions_dir.is_dir():
            raise PolyverError("no versions directory found - no runtimes installed yet")

        shim_map: ShimMap = {}
        for runtime_dir in sorted(path for path in versions_dir.iterdir() if path.is_dir()):
            runtime = runtime_dir.name
            version_dirs = sorted(path for path in runtime_dir.iterdir() if path.is_dir())
            if not version_dirs:
                continue
            if callback is not None:
                display = self._registry.get(runtime).display_name if self._registry.has(runtime) else runtime
                callback(runtime, display)
            for shim_name in self.runtime_shims(runtime):
                shim_map.setdefault(shim_name, runtime)
            for version_dir in version_dirs:
                scan_dirs = [version_dir / BIN_SUBDIR]
                if is_windows():
                    scan_dirs.extend([version_dir, version_dir / "Scripts"])
                for scan_dir in scan_dirs:
                    for shim_name in find_executables(scan_dir):
                        shim_map.setdefault(shim_name, runtime)

        if not shim_map:
            raise PolyverError("no runtimes installed - nothing to reshim")
        return shim_map

    def rehash(self, callback: RehashCallback | None = None) -> RehashResult:
        """Regenerate every shim and rewrite the shim name cache.

        Shims left over from executables that no longer exist are removed.
        """

        shim_map = self.build_shim_map(callback)
        self._paths.shims.mkdir(parents=True, exist_ok=True)
        result = RehashResult(shim_map=shim_map)
        for stale in self.list_shims():
            if stale not in shim_map and self._is_managed_shim(self._paths.shim_path(stale)):
                self.remove_shim(stale)
                result.removed.append(stale)
        self.create_shims(sorted(shim_map))
        self._cache.save(shim_map)
        self._cache.reset()
        LOGGER.debug("rehash complete shims=%d removed=%d", result.total_shims, len(result.removed))
        return result

    @staticmethod
    def _is_managed_shim(path: Path) -> bool:
        try:
            return SHIM_MARKER in path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return False


__all__ = [
    "RehashResult",
    "SHIM_MARKER",
    "ShimManager",
    "find_executables",
    "render_shim",
]
