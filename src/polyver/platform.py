# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Operating system and architecture helpers used to build platform keys."""

from __future__ import annotations

import os
import platform as _platform
import sys
from typing import Final

OS_WINDOWS: Final[str] = "windows"
OS_DARWIN: Final[str] = "darwin"
OS_LINUX: Final[str] = "linux"

ARCH_AMD64: Final[str] = "amd64"
ARCH_ARM64: Final[str] = "arm64"
ARCH_386: Final[str] = "386"
ARCH_ARM: Final[str] = "arm"

ARCH_ALIASES: Final[dict[str, str]] = {
    "amd64": ARCH_AMD64,
    "x86_64": ARCH_AMD64,
    "x64": ARCH_AMD64,
    "arm64": ARCH_ARM64,
    "aarch64": ARCH_ARM64,
    "i386": ARCH_386,
    "i686": ARCH_386,
    "x86": ARCH_386,
    "armv7l": ARCH_ARM,
    "armv6l": ARCH_ARM,
}

VALID_PLATFORMS: Final[tuple[str, ...]] = (
    "windows-amd64",
    "windows-arm64",
    "windows-386",
    "darwin-amd64",
    "darwin-arm64",
    "linux-amd64",
    "linux-arm64",
    "linux-arm",
    "linux-386",
)

# Wrapper scripts come first so that npm-style ``.cmd`` launchers win over raw binaries.
WINDOWS_EXEC_SUFFIXES: Final[tuple[str, ...]] = (".cmd", ".exe")
WINDOWS_PATH_SUFFIXES: Final[tuple[str, ...]] = (".exe", ".cmd", ".bat")


def current_os() -> str:
    """Return the normalised operating system name."""

    if sys.platform.startswith("win"):
        return OS_WINDOWS
    if sys.platform == "darwin":
        return OS_DARWIN
    return OS_LINUX


def current_arch() -> str:
    """Return the normalised CPU architecture name."""

    machine = _platform.machine().lower()
    return ARCH_ALIASES.get(machine, machine)


def current_platform() -> str:
    """Return the ``<os>-<arch>`` key for the running interpreter."""

    return f"{current_os()}-{current_arch()}"


def is_valid_platform(key: str) -> bool:
    return key in VALID_PLATFORMS


def is_windows() -> bool:
    return os.name == "nt"


__all__ = [
    "ARCH_386",
    "ARCH_AMD64",
    "ARCH_ARM",
    "ARCH_ARM64",
    "OS_DARWIN",
    "OS_LINUX",
    "OS_WINDOWS",
    "VALID_PLATFORMS",
    "WINDOWS_EXEC_SUFFIXES",
    "WINDOWS_PATH_SUFFIXES",
    "current_arch",
    "current_os",
    "current_platform",
    "is_valid_platform",
    "is_windows",
]
