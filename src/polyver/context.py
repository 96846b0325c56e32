# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Application context wiring the registry, resolver, caches and manifests."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

from .config import VersionResolver
from .manifest.default import ManifestService
from .paths import Paths
from .runtime.registry import Registry
from .runtimes import register_builtin_providers
from .shim.cache import ShimNameCache
from .shim.manager import ShimManager


@dataclass(slots=True)
class AppContext:
    """Services shared by the CLI and the shim dispatcher.

    Built once per process by :meth:`create` and passed explicitly to the
    components that need it.
    """

    paths: Paths
    registry: Registry
    resolver: VersionResolver
    shim_cache: ShimNameCache
    manifests: ManifestService

    @classmethod
    def create(
        cls,
        *,
        environ: Mapping[str, str] | None = None,
        cwd: Callable[[], Path] = Path.cwd,
        manifests: ManifestService | None = None,
        register_builtins: bool = True,
    ) -> AppContext:
        """Build a context from the environment.

        Args:
            environ: Environment mapping; defaults to :data:`os.environ`.
            cwd: Callable returning the directory local config lookups start from.
            manifests: Manifest service override, mainly for tests.
            register_builtins: Register the bundled node/python/ruby providers.

        Returns:
            AppContext: Fully wired context.
        """

        env = os.environ if environ is None else environ
        paths = Paths.from_environment(env)
        resolver = VersionResolver(paths, cwd=cwd)
        registry = Registry()
        if register_builtins:
            register_builtin_providers(registry, paths, resolver, environ=env)
        if manifests is None:
            manifests = ManifestService(paths.manifest_cache_dir(), environ=env)
        return cls(
            paths=paths,
            registry=registry,
            resolver=resolver,
            shim_cache=ShimNameCache(paths.shim_map_path()),
            manifests=manifests,
        )

    def shim_manager(self) -> ShimManager:
        return ShimManager(self.paths, self.registry, self.shim_cache)


__all__ = ["AppContext"]
