# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Global and directory-local version configuration.

Both files are flat JSON objects mapping runtime names to version strings::

    {"node": "22.11.0", "python": "3.12.7"}

The local file lives at ``<project>/.polyver/runtimes.json``; the global file
lives at ``<root>/config/runtimes.json``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

from pydantic import RootModel, ValidationError

from .errors import ConfigurationError
from .filesystem import write_text_atomic
from .paths import VCS_MARKER, Paths, local_config_path

LOGGER = logging.getLogger(__name__)


class RuntimesConfig(RootModel[dict[str, str]]):
    """Flat mapping of runtime name to version."""

    root: dict[str, str] = {}

    def get(self, runtime: str) -> str | None:
        return self.root.get(runtime)

    def with_version(self, runtime: str, version: str) -> RuntimesConfig:
        return RuntimesConfig({**self.root, runtime: version})

    def to_json(self) -> str:
        return self.model_dump_json(indent=2) + "\n"


def read_all_runtimes(path: Path) -> RuntimesConfig:
    """Return every runtime/version pair recorded in ``path``.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not a flat JSON object of strings.
    """

    try:
        return RuntimesConfig.model_validate_json(path.read_bytes())
    except ValidationError as exc:
        raise ValueError(f"failed to parse config file {path}: {exc}") from exc


def _read_or_empty(path: Path) -> RuntimesConfig:
    try:
        return read_all_runtimes(path)
    except FileNotFoundError:
        return RuntimesConfig()
    except (OSError, ValueError) as exc:
        LOGGER.debug("replacing unreadable config path=%s error=%s", path, exc)
        return RuntimesConfig()


def iter_search_dirs(start: Path) -> Iterator[Path]:
    """Yield ``start`` and its ancestors, stopping at a VCS root or ``/``.

    The directory holding the ``.git`` marker is yielded before the walk stops,
    so a project root's own local config is still consulted.
    """

    current = start
    while True:
        yield current
        if (current / VCS_MARKER).exists():
            return
        parent = current.parent
        if parent == current:
            return
        current = parent


class VersionResolver:
    """Resolve the active version of a runtime from local and global config.

    Args:
        paths: Data-root layout locating the global config file.
        cwd: Callable returning the directory the search starts from.
    """

    def __init__(self, paths: Paths, *, cwd: Callable[[], Path] = Path.cwd) -> None:
        self._paths = paths
        self._cwd = cwd

    @property
    def global_config_path(self) -> Path:
        return self._paths.global_config_path()

    def current_version(self, runtime: str) -> str:
        """Return the version of ``runtime`` that applies to the working directory.

        A local entry anywhere between the working directory and the enclosing
        repository root wins; otherwise the global entry is used.

        Raises:
            ConfigurationError: If neither a local nor a global entry exists.
        """

        local = self._find_local_version(runtime)
        if local:
            return local
        return self.global_version(runtime)

    def local_version(self, runtime: str) -> str:
        version = self._find_local_version(runtime)
        if not version:
            raise ConfigurationError(runtime)
        return version

    def global_version(self, runtime: str) -> str:
        path = self.global_config_path
        try:
            config = read_all_runtimes(path)
        except FileNotFoundError as exc:
            raise ConfigurationError(runtime) from exc
        except (OSError, ValueError) as exc:
            LOGGER.debug("global config unreadable path=%s error=%s", path, exc)
            raise ConfigurationError(runtime) from exc
        version = config.get(runtime)
        if not version:
            raise ConfigurationError(runtime)
        return version

    def set_global_version(self, runtime: str, version: str) -> Path:
        path = self.global_config_path
        updated = _read_or_empty(path).with_version(runtime, version)
        write_text_atomic(path, updated.to_json())
        return path

    def set_local_version(self, runtime: str, version: str, *, directory: Path | None = None) -> Path:
        """Pin ``runtime`` to ``version`` for ``directory`` (the working directory by default)."""

        path = local_config_path(directory if directory is not None else self._cwd())
        updated = _read_or_empty(path).with_version(runtime, version)
        write_text_atomic(path, updated.to_json())
        return path

    def find_local_runtimes_file(self) -> Path | None:
        """Return the nearest local config file regardless of its contents."""

        for directory in iter_search_dirs(self._cwd()):
            candidate = local_config_path(directory)
            if candidate.is_file():
                return candidate
        return None

    def _find_local_version(self, runtime: str) -> str | None:
        for directory in iter_search_dirs(self._cwd()):
            candidate = local_config_path(directory)
            if not candidate.is_file():
                continue
            try:
                version = read_all_runtimes(candidate).get(runtime)
            except (OSError, ValueError) as exc:
                LOGGER.debug("skipping unreadable local config path=%s error=%s", candidate, exc)
                continue
            if version:
                return version
        return None


__all__ = [
    "RuntimesConfig",
    "VersionResolver",
    "iter_search_dirs",
    "read_all_runtimes",
]
