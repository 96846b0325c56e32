# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared provider implementation for runtimes installed under the data root."""

from __future__ import annotations

import logging
import re
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Final

from packaging.version import InvalidVersion
from packaging.version import Version as PackagingVersion

from ..config import VersionResolver
from ..dispatch.pathsearch import find_in_system_path
from ..errors import ConfigurationError
from ..paths import Paths
from ..platform import is_windows
from ..runtime.version import DetectedVersion, InstalledVersion, Version, sorted_version_strings

LOGGER = logging.getLogger(__name__)

SOURCE_SYSTEM: Final[str] = "system"
PROBE_TIMEOUT_SECONDS: Final[float] = 10.0


class VersionProbe:
    """Capture and validate version strings reported by executables."""

    VERSION_PATTERN = re.compile(r"(\d+(?:\.\d+)+)")

    def capture(self, command: Sequence[str]) -> str | None:
        """Return the normalised version printed by ``command`` if available."""

        try:
            completed = subprocess.run(
                list(command),
                capture_output=True,
                text=True,
                check=False,
                timeout=PROBE_TIMEOUT_SECONDS,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            LOGGER.debug("version probe failed command=%s error=%s", command, exc)
            return None
        output = completed.stdout.strip() or completed.stderr.strip()
        if not output:
            return None
        return self.normalize(output.splitlines()[0].strip())

    def normalize(self, raw: str | None) -> str | None:
        if not raw:
            return None
        match = self.VERSION_PATTERN.search(raw)
        candidate = match.group(1) if match else raw.strip()
        try:
            PackagingVersion(candidate)
        except InvalidVersion:
            return None
        return candidate


@dataclass(frozen=True, slots=True)
class VersionManagerLayout:
    """Where another version manager keeps its installs.

    ``root`` holds one directory per version; ``executables`` are tried in
    order relative to each version directory.
    """

    source: str
    root: Path
    executables: tuple[str, ...]
    strip_prefix: str = ""


class ManagedRuntime(ABC):
    """Provider backed by ``<root>/versions/<name>/<version>`` directories.

    Subclasses declare their identity through class attributes and describe
    where their main executable lives and which commands mutate packages.
    """

    NAME: ClassVar[str]
    DISPLAY_NAME: ClassVar[str]
    SHIMS: ClassVar[tuple[str, ...]]

    def __init__(
        self,
        paths: Paths,
        resolver: VersionResolver,
        *,
        probe: VersionProbe | None = None,
        environ: Mapping[str, str] | None = None,
        home: Path | None = None,
    ) -> None:
        self._paths = paths
        self._resolver = resolver
        self._probe = probe or VersionProbe()
        self._environ = environ
        self._home = home

    @property
    def name(self) -> str:
        return self.NAME

    @property
    def display_name(self) -> str:
        return self.DISPLAY_NAME

    @property
    def home(self) -> Path:
        return self._home if self._home is not None else Path.home()

    def shims(self) -> list[str]:
        return list(self.SHIMS)

    def install_path(self, version: str) -> Path:
        return self._paths.runtime_version_path(self.NAME, version)

    def is_installed(self, version: str) -> bool:
        return self.install_path(version).is_dir()

    @abstractmethod
    def executable_candidates(self) -> Sequence[str]:
        """Return main-executable paths relative to an install directory."""
        raise NotImplementedError

    def executable_path(self, version: str) -> Path:
        install_path = self.install_path(version)
        candidates = [install_path / relative for relative in self.executable_candidates()]
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        raise FileNotFoundError(f"{self.NAME} executable not found at {candidates[0]}")

    def list_installed(self) -> list[InstalledVersion]:
        """Return installed versions, newest first, flagging the global default."""

        runtime_dir = self._paths.versions / self.NAME
        if not runtime_dir.is_dir():
            return []
        try:
            global_version: str | None = self.global_version()
        except ConfigurationError:
            global_version = None
        names = sorted_version_strings(entry.name for entry in runtime_dir.iterdir() if entry.is_dir())
        return [
            InstalledVersion(
                version=Version(name),
                install_path=runtime_dir / name,
                is_global=name == global_version,
            )
            for name in names
        ]

    def global_version(self) -> str:
        return self._resolver.global_version(self.NAME)

    def set_global_version(self, version: str) -> None:
        self._resolver.set_global_version(self.NAME, version)

    def local_version(self) -> str:
        return self._resolver.local_version(self.NAME)

    def set_local_version(self, version: str) -> None:
        self._resolver.set_local_version(self.NAME, version)

    def current_version(self) -> str:
        return self._resolver.current_version(self.NAME)

    def system_locations(self) -> Sequence[Path]:
        """Return well-known system install locations of the main executable."""

        return ()

    def version_manager_layouts(self) -> Sequence[VersionManagerLayout]:
        return ()

    def version_command(self, executable: Path) -> list[str]:
        return [str(executable), "--version"]

    def detect_installed(self) -> list[DetectedVersion]:
        """Find installations of this runtime that polyver does not manage.

        The executable on ``PATH`` and well-known locations are probed with
        ``--version``; installs owned by other version managers are reported
        from their directory names without running them.
        """

        detected: list[DetectedVersion] = []
        seen: set[Path] = set()

        on_path = find_in_system_path(self.NAME, self._paths.shims, environ=self._environ)
        system_candidates = [on_path] if on_path is not None else []
        system_candidates.extend(self.system_locations())
        for candidate in system_candidates:
            if candidate in seen or not candidate.is_file():
                continue
            version = self._probe.capture(self.version_command(candidate))
            if version is None:
                continue
            seen.add(candidate)
            detected.append(DetectedVersion(version=version, path=candidate, source=SOURCE_SYSTEM, validated=True))

        for layout in self.version_manager_layouts():
            for found in _scan_layout(layout, self._probe):
                if found.path not in seen:
                    seen.add(found.path)
                    detected.append(found)
        return detected

    @abstractmethod
    def should_reshim_after(self, shim_name: str, args: Sequence[str]) -> bool:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(root={self._paths.root!s})"


def _scan_layout(layout: VersionManagerLayout, probe: VersionProbe) -> Iterable[DetectedVersion]:
    try:
        entries = sorted(layout.root.iterdir(), key=lambda entry: entry.name)
    except OSError:
        return
    for entry in entries:
        if not entry.is_dir():
            continue
        name = entry.name
        if layout.strip_prefix and name.startswith(layout.strip_prefix):
            name = name[len(layout.strip_prefix) :]
        version = probe.normalize(name)
        if version is None:
            continue
        for relative in layout.executables:
            executable = entry / relative
            if executable.is_file():
                yield DetectedVersion(version=version, path=executable, source=layout.source, validated=False)
                break


def first_arg_in(args: Sequence[str], commands: Iterable[str]) -> bool:
    return bool(args) and args[0] in set(commands)


def exe_name(stem: str) -> str:
    return f"{stem}.exe" if is_windows() else stem


__all__ = [
    "ManagedRuntime",
    "SOURCE_SYSTEM",
    "VersionManagerLayout",
    "VersionProbe",
    "exe_name",
    "first_arg_in",
]
