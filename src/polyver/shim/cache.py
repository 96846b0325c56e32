# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Persisted shim-name to runtime-name mapping."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from threading import Lock

from ..filesystem import read_string_mapping, write_string_mapping

LOGGER = logging.getLogger(__name__)

ShimMap = dict[str, str]


class ShimNameCache:
    """Lazily load and memoise the shim map stored at ``path``.

    The map is an optimisation for the dispatcher, not a source of truth:
    lookups never raise and a missing or corrupt file reads as "not found".
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = Lock()
        self._loaded = False
        self._map: ShimMap | None = None
        self._error: Exception | None = None

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> ShimMap:
        """Return the persisted map, parsing the file at most once.

        Raises:
            OSError: If the file could not be read on the first load.
            ValueError: If the file content is not a JSON object.
        """

        with self._lock:
            if not self._loaded:
                try:
                    self._map = read_string_mapping(self._path)
                except (OSError, ValueError) as exc:
                    self._error = exc
                self._loaded = True
            if self._error is not None:
                raise self._error
            if self._map is None:
                self._map = {}
            return self._map

    def save(self, mapping: Mapping[str, str]) -> None:
        """Replace the persisted map with ``mapping``.

        The in-memory copy is left untouched until :meth:`reset` is called.
        """

        write_string_mapping(self._path, mapping)
        LOGGER.debug("saved shim map path=%s entries=%d", self._path, len(mapping))

    def lookup(self, shim_name: str) -> tuple[str, bool]:
        """Return ``(runtime, True)`` for a cached shim, ``("", False)`` otherwise."""

        try:
            mapping = self.load()
        except (OSError, ValueError):
            return "", False
        runtime = mapping.get(shim_name)
        if runtime is None:
            return "", False
        return runtime, True

    def reset(self) -> None:
        """Forget the memoised map so the next :meth:`load` rereads the file."""

        with self._lock:
            self._loaded = False
            self._map = None
            self._error = None


__all__ = ["ShimMap", "ShimNameCache"]
