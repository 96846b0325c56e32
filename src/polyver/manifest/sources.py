# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Composable manifest sources: embedded, filesystem, HTTP, cached and fallback."""

from __future__ import annotations

import http.client
import logging
import urllib.error
import urllib.request
from abc import abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Final, Protocol, runtime_checkable

from pydantic import BaseModel, ValidationError

from ..errors import ManifestFetchError, ManifestNotFoundError
from ..filesystem import write_text_atomic
from .models import Manifest, parse_manifest

LOGGER = logging.getLogger(__name__)

MANIFEST_SUFFIX: Final[str] = ".json"
CACHE_SUFFIX: Final[str] = ".cache.json"
DEFAULT_CACHE_TTL: Final[timedelta] = timedelta(hours=24)
DEFAULT_HTTP_TIMEOUT: Final[float] = 30.0
HTTP_OK_STATUS: Final[int] = 200
HTTP_NOT_FOUND_STATUS: Final[int] = 404
EMBEDDED_PACKAGE: Final[str] = "polyver.manifest"
EMBEDDED_DATA_DIR: Final[str] = "data"

Clock = Callable[[], datetime]


@runtime_checkable
class ManifestSource(Protocol):
    """Retrieve manifests from a backend."""

    @abstractmethod
    def get_manifest(self, runtime: str) -> Manifest:
        """Return the manifest for ``runtime``.

        Raises:
            ManifestNotFoundError: If the source has no manifest for ``runtime``.
            ManifestError: If the manifest cannot be fetched or parsed.
        """
        raise NotImplementedError

    @abstractmethod
    def list_runtimes(self) -> list[str]:
        """Return the runtime names this source can serve."""
        raise NotImplementedError


def _runtimes_from_names(names: list[str]) -> list[str]:
    return sorted(name[: -len(MANIFEST_SUFFIX)] for name in names if name.endswith(MANIFEST_SUFFIX))


class EmbeddedSource:
    """Read manifests bundled inside the package."""

    def __init__(self, root: Traversable | None = None) -> None:
        self._root = root if root is not None else resources.files(EMBEDDED_PACKAGE) / EMBEDDED_DATA_DIR

    def get_manifest(self, runtime: str) -> Manifest:
        entry = self._root / f"{runtime}{MANIFEST_SUFFIX}"
        if not entry.is_file():
            raise ManifestNotFoundError(runtime)
        return parse_manifest(entry.read_bytes())

    def list_runtimes(self) -> list[str]:
        if not self._root.is_dir():
            return []
        return _runtimes_from_names([entry.name for entry in self._root.iterdir() if entry.is_file()])


class FileSource:
    """Read ``<runtime>.json`` manifests from a directory."""

    def __init__(self, directory: Path) -> None:
        self._directory = directory

    def get_manifest(self, runtime: str) -> Manifest:
        path = self._directory / f"{runtime}{MANIFEST_SUFFIX}"
        try:
            data = path.read_bytes()
        except FileNotFoundError as exc:
            raise ManifestNotFoundError(runtime) from exc
        return parse_manifest(data)

    def list_runtimes(self) -> list[str]:
        return _runtimes_from_names([entry.name for entry in self._directory.iterdir() if entry.is_file()])


class HTTPSource:
    """Fetch manifests from ``<base_url>/<runtime>.json``."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        opener: Callable[..., http.client.HTTPResponse] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._opener = opener if opener is not None else urllib.request.urlopen

    @property
    def base_url(self) -> str:
        return self._base_url

    def manifest_url(self, runtime: str) -> str:
        return f"{self._base_url}/{runtime}{MANIFEST_SUFFIX}"

    def get_manifest(self, runtime: str) -> Manifest:
        url = self.manifest_url(runtime)
        LOGGER.debug("fetching manifest url=%s", url)
        try:
            request = urllib.request.Request(url, headers={"Accept": "application/json"})
            with self._opener(request, timeout=self._timeout) as response:
                status = getattr(response, "status", HTTP_OK_STATUS)
                if status == HTTP_NOT_FOUND_STATUS:
                    raise ManifestNotFoundError(runtime)
                if status != HTTP_OK_STATUS:
                    raise ManifestFetchError(f"failed to fetch manifest: HTTP {status}")
                data = response.read()
        except urllib.error.HTTPError as exc:
            if exc.code == HTTP_NOT_FOUND_STATUS:
                raise ManifestNotFoundError(runtime) from exc
            raise ManifestFetchError(f"failed to fetch manifest: HTTP {exc.code}") from exc
        except (urllib.error.URLError, OSError, http.client.HTTPException, ValueError) as exc:
            raise ManifestFetchError(f"failed to fetch manifest: {exc}") from exc
        return parse_manifest(data)

    def list_runtimes(self) -> list[str]:
        raise ManifestFetchError("listing runtimes is not supported for HTTP sources")


class _CacheEntry(BaseModel):
    """On-disk cache record."""

    cached_at: datetime
    manifest: Manifest


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CachedSource:
    """Wrap ``source`` with a per-runtime disk cache expiring after ``ttl``."""

    def __init__(
        self,
        source: ManifestSource,
        cache_dir: Path,
        ttl: timedelta = DEFAULT_CACHE_TTL,
        *,
        clock: Clock = _utcnow,
    ) -> None:
        self._source = source
        self._cache_dir = cache_dir
        self._ttl = ttl
        self._clock = clock

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def cache_path(self, runtime: str) -> Path:
        return self._cache_dir / f"{runtime}{CACHE_SUFFIX}"

    def get_manifest(self, runtime: str) -> Manifest:
        cached = self._load_from_cache(runtime)
        if cached is not None:
            return cached
        manifest = self._source.get_manifest(runtime)
        self._save_to_cache(runtime, manifest)
        return manifest

    def list_runtimes(self) -> list[str]:
        return self._source.list_runtimes()

    def force_refresh(self, runtime: str) -> Manifest:
        """Drop the cached entry for ``runtime`` and fetch it again."""

        try:
            self.cache_path(runtime).unlink(missing_ok=True)
        except OSError as exc:
            LOGGER.debug("could not remove cache entry runtime=%s error=%s", runtime, exc)
        manifest = self._source.get_manifest(runtime)
        self._save_to_cache(runtime, manifest)
        return manifest

    def clear_cache(self) -> None:
        """Remove every cached manifest file."""

        if not self._cache_dir.is_dir():
            return
        for entry in self._cache_dir.iterdir():
            if entry.is_file():
                entry.unlink()

    def _load_from_cache(self, runtime: str) -> Manifest | None:
        path = self.cache_path(runtime)
        try:
            entry = _CacheEntry.model_validate_json(path.read_bytes())
        except FileNotFoundError:
            return None
        except (OSError, ValidationError) as exc:
            LOGGER.debug("ignoring unreadable cache entry path=%s error=%s", path, exc)
            return None
        cached_at = entry.cached_at
        if cached_at.tzinfo is None:
            cached_at = cached_at.replace(tzinfo=UTC)
        if self._clock() - cached_at > self._ttl:
            return None
        return entry.manifest

    def _save_to_cache(self, runtime: str, manifest: Manifest) -> None:
        entry = _CacheEntry(cached_at=self._clock(), manifest=manifest)
        try:
            write_text_atomic(self.cache_path(runtime), entry.model_dump_json(by_alias=True))
        except OSError as exc:
            LOGGER.debug("manifest cache write failed runtime=%s error=%s", runtime, exc)


class FallbackSource:
    """Try ``primary`` first and use ``secondary`` on any failure."""

    def __init__(self, primary: ManifestSource, secondary: ManifestSource) -> None:
        self._primary = primary
        self._secondary = secondary

    def get_manifest(self, runtime: str) -> Manifest:
        try:
            return self._primary.get_manifest(runtime)
        except Exception as exc:  # noqa: BLE001
            LOGGER.debug("primary manifest source failed runtime=%s error=%s; using fallback", runtime, exc)
        return self._secondary.get_manifest(runtime)

    def list_runtimes(self) -> list[str]:
        try:
            return self._primary.list_runtimes()
        except Exception as exc:  # noqa: BLE001
            LOGGER.debug("primary source cannot list runtimes error=%s; using fallback", exc)
        return self._secondary.list_runtimes()


__all__ = [
    "CachedSource",
    "DEFAULT_CACHE_TTL",
    "DEFAULT_HTTP_TIMEOUT",
    "EmbeddedSource",
    "FallbackSource",
    "FileSource",
    "HTTPSource",
    "ManifestSource",
]
