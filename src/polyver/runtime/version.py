# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Version value objects and best-effort numeric ordering."""

from __future__ import annotations

import re
from collections.abc import Iterable, MutableSequence
from dataclasses import dataclass, field
from functools import cmp_to_key
from pathlib import Path

from ..manifest.models import Download

_SEGMENT_SPLIT = re.compile(r"[.\-]")


def parse_version_parts(raw: str) -> tuple[int, ...]:
    """Return the numeric segments of ``raw``.

    A leading ``v`` is ignored, segments are split on ``.`` and ``-`` and
    anything that is not a plain integer is skipped, so ``"3.11.0-rc1"``
    becomes ``(3, 11, 0)``.
    """

    text = raw.strip()
    if text.startswith("v"):
        text = text[1:]
    parts: list[int] = []
    for segment in _SEGMENT_SPLIT.split(text):
        if segment.isdigit():
            parts.append(int(segment))
    return tuple(parts)


def compare_version_strings(left: str, right: str) -> int:
    """Return a positive, zero or negative value comparing ``left`` with ``right``."""

    left_parts = parse_version_parts(left)
    right_parts = parse_version_parts(right)
    width = max(len(left_parts), len(right_parts))
    for index in range(width):
        left_value = left_parts[index] if index < len(left_parts) else 0
        right_value = right_parts[index] if index < len(right_parts) else 0
        if left_value != right_value:
            return left_value - right_value
    return 0


@dataclass(frozen=True, slots=True)
class Version:
    """Raw version string with parsed numeric components.

    Equality is an exact raw-string match: ``Version("1.2.3")`` and
    ``Version("v1.2.3")`` are different values.
    """

    raw: str
    parts: tuple[int, ...] = field(default=(), compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.parts:
            object.__setattr__(self, "parts", parse_version_parts(self.raw))

    @property
    def major(self) -> int:
        return self.parts[0] if self.parts else 0

    @property
    def minor(self) -> int:
        return self.parts[1] if len(self.parts) > 1 else 0

    @property
    def patch(self) -> int:
        return self.parts[2] if len(self.parts) > 2 else 0

    def equal(self, other: Version) -> bool:
        return self.raw == other.raw

    def compare(self, other: Version) -> int:
        return compare_version_strings(self.raw, other.raw)

    def __str__(self) -> str:
        return self.raw


@dataclass(frozen=True, slots=True)
class InstalledVersion:
    """An installed runtime version and where it lives."""

    version: Version
    install_path: Path
    is_global: bool = False

    def __str__(self) -> str:
        marker = " (global)" if self.is_global else ""
        return f"{self.version.raw}{marker}"


@dataclass(frozen=True, slots=True)
class AvailableVersion:
    """A version that can be installed, with its download descriptor."""

    version: Version
    download: Download | None = None
    notes: str = ""

    def __str__(self) -> str:
        return f"{self.version.raw} ({self.notes})" if self.notes else self.version.raw


@dataclass(frozen=True, slots=True)
class DetectedVersion:
    """A runtime found on disk outside of polyver's management."""

    version: str
    path: Path
    source: str
    validated: bool = False

    def __str__(self) -> str:
        return f"v{self.version} ({self.source}) {self.path}"


def sort_versions_desc(versions: MutableSequence[AvailableVersion]) -> None:
    """Sort ``versions`` in place, newest first."""

    ordered = sorted(
        versions,
        key=cmp_to_key(lambda left, right: compare_version_strings(left.version.raw, right.version.raw)),
        reverse=True,
    )
    versions[:] = ordered


def sorted_version_strings(values: Iterable[str], *, descending: bool = True) -> list[str]:
    return sorted(values, key=cmp_to_key(compare_version_strings), reverse=descending)


__all__ = [
    "AvailableVersion",
    "DetectedVersion",
    "InstalledVersion",
    "Version",
    "compare_version_strings",
    "parse_version_parts",
    "sort_versions_desc",
    "sorted_version_strings",
]
