# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Filesystem helpers shared by the config, shim and manifest layers."""

from __future__ import annotations

import json
import os
import stat
import tempfile
from collections.abc import Mapping
from pathlib import Path

from .platform import WINDOWS_PATH_SUFFIXES, is_windows


def write_text_atomic(path: Path, text: str) -> None:
    """Write ``text`` to ``path`` so readers never observe a partial file.

    The payload goes to a temporary sibling first and is then renamed over the
    destination.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def read_string_mapping(path: Path) -> dict[str, str]:
    """Return the flat string-to-string JSON object stored at ``path``.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the payload is not a JSON object of strings.
    """

    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    return {str(key): str(value) for key, value in data.items() if isinstance(value, str)}


def write_string_mapping(path: Path, mapping: Mapping[str, str]) -> None:
    write_text_atomic(path, json.dumps(dict(mapping), indent=2, sort_keys=True) + "\n")


def normalize_path_key(path: str | Path) -> str:
    """Return a comparison key for ``path`` (case-folded on Windows)."""

    text = os.path.normpath(os.path.abspath(os.fspath(path)))
    return os.path.normcase(text)


def is_executable_file(path: Path) -> bool:
    """Return ``True`` when ``path`` is a regular file the platform would run."""

    try:
        info = path.stat()
    except OSError:
        return False
    if not stat.S_ISREG(info.st_mode):
        return False
    if is_windows():
        return path.suffix.lower() in WINDOWS_PATH_SUFFIXES
    return bool(info.st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))


def make_executable(path: Path) -> None:
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


__all__ = [
    "is_executable_file",
    "make_executable",
    "normalize_path_key",
    "read_string_mapping",
    "write_string_mapping",
    "write_text_atomic",
]
