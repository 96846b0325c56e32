# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Production manifest source stack."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from datetime import timedelta
from pathlib import Path
from typing import Final

from .models import Manifest
from .sources import DEFAULT_CACHE_TTL, CachedSource, EmbeddedSource, FallbackSource, HTTPSource, ManifestSource

LOGGER = logging.getLogger(__name__)

DEFAULT_REMOTE_URL: Final[str] = "https://manifests.polyver.dev"
REMOTE_URL_ENV: Final[str] = "POLYVER_MANIFEST_URL"


class ManifestService:
    """Own the layered manifest sources used by installers.

    The stack is ``Fallback(Cached(HTTP, ttl), Embedded)``: a cached remote
    fetch is preferred and the embedded manifests are used only when the
    remote path fails end to end.
    """

    def __init__(
        self,
        cache_dir: Path,
        *,
        remote: ManifestSource | None = None,
        embedded: EmbeddedSource | None = None,
        ttl: timedelta = DEFAULT_CACHE_TTL,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        env = os.environ if environ is None else environ
        if remote is None:
            remote = HTTPSource(env.get(REMOTE_URL_ENV) or DEFAULT_REMOTE_URL)
        self.embedded = embedded if embedded is not None else EmbeddedSource()
        self.cached = CachedSource(remote, cache_dir, ttl)
        self.source: ManifestSource = FallbackSource(self.cached, self.embedded)

    def get_manifest(self, runtime: str) -> Manifest:
        return self.source.get_manifest(runtime)

    def list_runtimes(self) -> list[str]:
        return self.source.list_runtimes()

    def force_refresh_runtime(self, runtime: str) -> tuple[Manifest, bool]:
        """Refetch ``runtime`` bypassing the cache.

        Returns:
            tuple[Manifest, bool]: The manifest and ``True`` when it came from
            the remote source, ``False`` when the embedded copy was used.

        Raises:
            ManifestError: If neither the remote nor the embedded source has it.
        """

        try:
            return self.cached.force_refresh(runtime), True
        except Exception as exc:  # noqa: BLE001
            LOGGER.debug("remote refresh failed runtime=%s error=%s", runtime, exc)
        return self.embedded.get_manifest(runtime), False

    def clear_all_cache(self) -> None:
        self.cached.clear_cache()

    def list_available_runtimes(self) -> list[str]:
        """Return runtime names known to the embedded manifests."""

        return self.embedded.list_runtimes()


__all__ = ["DEFAULT_REMOTE_URL", "REMOTE_URL_ENV", "ManifestService"]
