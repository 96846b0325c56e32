# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Data models describing downloadable runtime builds."""

from __future__ import annotations

from enum import StrEnum
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import ManifestParseError

SUPPORTED_MANIFEST_VERSION: Final[int] = 1


class Availability(StrEnum):
    """Outcome of looking up a version/platform pair in a manifest."""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


class Download(BaseModel):
    """Download location and checksum for one build.

    ``sha256_url`` names a published checksum listing used when ``sha256``
    itself is empty.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    sha256: str = ""
    sha256_url: str | None = None
    sha256_source: str | None = None


class Manifest(BaseModel):
    """Versioned document mapping versions to per-platform downloads.

    A ``None`` download marks a version that exists but ships no build for that
    platform; a missing platform key means there is no information at all.
    """

    model_config = ConfigDict(populate_by_name=True)

    schema_ref: str | None = Field(default=None, alias="$schema")
    version: int
    versions: dict[str, dict[str, Download | None]] = Field(default_factory=dict)

    def get_download(self, version: str, platform: str) -> Download | None:
        """Return the download for ``version`` on ``platform`` or ``None``."""

        platforms = self.versions.get(version)
        if platforms is None:
            return None
        return platforms.get(platform)

    def check_availability(self, version: str, platform: str) -> Availability:
        """Classify ``version``/``platform`` as available, unavailable or unknown."""

        platforms = self.versions.get(version)
        if platforms is None or platform not in platforms:
            return Availability.UNKNOWN
        if platforms[platform] is None:
            return Availability.UNAVAILABLE
        return Availability.AVAILABLE

    def list_versions(self) -> list[str]:
        return list(self.versions)

    def list_available_versions(self, platform: str) -> list[str]:
        """Return versions that ship a non-null download for ``platform``."""

        return [version for version, platforms in self.versions.items() if platforms.get(platform) is not None]

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=False)


def parse_manifest(data: bytes | str) -> Manifest:
    """Parse and validate a manifest payload.

    Args:
        data: Raw JSON document.

    Returns:
        Manifest: Validated manifest.

    Raises:
        ManifestParseError: If the payload is not valid JSON, does not match the
            manifest shape, or declares an unsupported schema version.
    """

    try:
        manifest = Manifest.model_validate_json(data)
    except ValidationError as exc:
        raise ManifestParseError(f"failed to parse manifest: {exc}") from exc
    if manifest.version != SUPPORTED_MANIFEST_VERSION:
        raise ManifestParseError(f"unsupported manifest version: {manifest.version}")
    return manifest


__all__ = [
    "Availability",
    "Download",
    "Manifest",
    "SUPPORTED_MANIFEST_VERSION",
    "parse_manifest",
]
