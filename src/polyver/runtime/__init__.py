# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Provider contract, registry and version records."""

from __future__ import annotations

from .provider import Provider
from .registry import Registry
from .version import (
    AvailableVersion,
    DetectedVersion,
    InstalledVersion,
    Version,
    compare_version_strings,
    sort_versions_desc,
)

__all__ = [
    "AvailableVersion",
    "DetectedVersion",
    "InstalledVersion",
    "Provider",
    "Registry",
    "Version",
    "compare_version_strings",
    "sort_versions_desc",
]
