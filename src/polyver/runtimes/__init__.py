# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Built-in runtime providers."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from ..config import VersionResolver
from ..paths import Paths
from ..runtime.registry import Registry
from .base import ManagedRuntime, VersionManagerLayout, VersionProbe
from .node import NodeRuntime
from .python import PythonRuntime
from .ruby import RubyRuntime

BUILTIN_RUNTIMES: tuple[type[ManagedRuntime], ...] = (NodeRuntime, PythonRuntime, RubyRuntime)


def register_builtin_providers(
    registry: Registry,
    paths: Paths,
    resolver: VersionResolver,
    *,
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> None:
    """Register one instance of every built-in runtime with ``registry``.

    Raises:
        DuplicateProviderError: If ``registry`` already holds one of them.
    """

    probe = VersionProbe()
    for runtime_cls in BUILTIN_RUNTIMES:
        registry.register(runtime_cls(paths, resolver, probe=probe, environ=environ, home=home))


__all__ = [
    "BUILTIN_RUNTIMES",
    "ManagedRuntime",
    "NodeRuntime",
    "PythonRuntime",
    "RubyRuntime",
    "VersionManagerLayout",
    "VersionProbe",
    "register_builtin_providers",
]
