# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Manifest models and the layered sources that supply them."""

from __future__ import annotations

from .default import DEFAULT_REMOTE_URL, ManifestService
from .models import Availability, Download, Manifest, parse_manifest
from .sources import (
    DEFAULT_CACHE_TTL,
    CachedSource,
    EmbeddedSource,
    FallbackSource,
    FileSource,
    HTTPSource,
    ManifestSource,
)

__all__ = [
    "Availability",
    "CachedSource",
    "DEFAULT_CACHE_TTL",
    "DEFAULT_REMOTE_URL",
    "Download",
    "EmbeddedSource",
    "FallbackSource",
    "FileSource",
    "HTTPSource",
    "Manifest",
    "ManifestService",
    "ManifestSource",
    "parse_manifest",
]
