# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shim launchers and the shim-name cache.

``python -m polyver.shim <shim-path> [args...]`` is what every generated shim
executes; the shim path stands in for ``argv[0]``.
"""

from __future__ import annotations

from .cache import ShimMap, ShimNameCache
from .manager import RehashResult, ShimManager

__all__ = ["RehashResult", "ShimManager", "ShimMap", "ShimNameCache"]
