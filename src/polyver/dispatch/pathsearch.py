# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Locate executables on ``PATH`` and next to a runtime's main binary."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from pathlib import Path

from ..filesystem import is_executable_file, normalize_path_key
from ..platform import WINDOWS_EXEC_SUFFIXES, WINDOWS_PATH_SUFFIXES, is_windows

SCRIPTS_DIRNAME = "Scripts"


def search_path_entries(environ: Mapping[str, str] | None = None) -> list[str]:
    env = os.environ if environ is None else environ
    raw = env.get("PATH", "")
    return [entry for entry in raw.split(os.pathsep) if entry]


def find_in_system_path(
    name: str,
    excluded: Path,
    *,
    environ: Mapping[str, str] | None = None,
) -> Path | None:
    """Return the first ``name`` on ``PATH`` that does not live in ``excluded``.

    Args:
        name: Executable name without any platform suffix.
        excluded: Directory to skip, normally the shims directory.
        environ: Environment mapping to read ``PATH`` from.

    Returns:
        Path | None: The executable found, or ``None``.
    """

    excluded_key = normalize_path_key(excluded)
    suffixes: Sequence[str] = WINDOWS_PATH_SUFFIXES if is_windows() else ("",)
    for entry in search_path_entries(environ):
        if normalize_path_key(entry) == excluded_key:
            continue
        for suffix in suffixes:
            candidate = Path(entry) / f"{name}{suffix}"
            if is_executable_file(candidate):
                return candidate
    return None


def secondary_search_dirs(executable: Path) -> list[Path]:
    directory = executable.parent
    return [directory, directory / SCRIPTS_DIRNAME, directory.parent / SCRIPTS_DIRNAME]


def adjust_executable_path(executable: Path, shim_name: str, runtime: str) -> Path:
    """Return the executable that should run for ``shim_name``.

    When the shim is the runtime's own name the main executable is returned.
    Otherwise the tool is looked up next to the main executable and in the
    ``Scripts`` directories; on Windows ``.cmd`` wrappers win over ``.exe``.
    The main executable is returned when nothing better is found.
    """

    if shim_name == runtime:
        return executable
    for directory in secondary_search_dirs(executable):
        if is_windows():
            for suffix in WINDOWS_EXEC_SUFFIXES:
                candidate = directory / f"{shim_name}{suffix}"
                if candidate.exists():
                    return candidate
        else:
            candidate = directory / shim_name
            if candidate.exists():
                return candidate
    return executable


__all__ = ["adjust_executable_path", "find_in_system_path", "search_path_entries", "secondary_search_dirs"]
