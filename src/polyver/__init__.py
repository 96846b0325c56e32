# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Multi-runtime version manager with shim-based command dispatch."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
