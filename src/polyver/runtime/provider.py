# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Contract implemented by every managed runtime."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from .version import DetectedVersion, InstalledVersion


@runtime_checkable
class Provider(Protocol):
    """Describe one runtime whose versions polyver installs and switches.

    Providers are registered once at start-up and are only mutated through the
    explicit version-setting calls.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the lowercase runtime identifier (for example ``"node"``)."""
        raise NotImplementedError

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Return the human-readable runtime name (for example ``"Node.js"``)."""
        raise NotImplementedError

    @abstractmethod
    def shims(self) -> Sequence[str]:
        """Return the executable names this runtime owns."""
        raise NotImplementedError

    @abstractmethod
    def is_installed(self, version: str) -> bool:
        """Return whether ``version`` is present on disk."""
        raise NotImplementedError

    @abstractmethod
    def install_path(self, version: str) -> Path:
        """Return the installation directory for ``version``."""
        raise NotImplementedError

    @abstractmethod
    def executable_path(self, version: str) -> Path:
        """Return the absolute path to the main executable of ``version``.

        Raises:
            FileNotFoundError: If the executable does not exist.
        """
        raise NotImplementedError

    @abstractmethod
    def list_installed(self) -> list[InstalledVersion]:
        """Return every installed version."""
        raise NotImplementedError

    @abstractmethod
    def global_version(self) -> str:
        """Return the global default version.

        Raises:
            ConfigurationError: If no global version is configured.
        """
        raise NotImplementedError

    @abstractmethod
    def set_global_version(self, version: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def local_version(self) -> str:
        """Return the directory-local version for the working directory.

        Raises:
            ConfigurationError: If no local version applies.
        """
        raise NotImplementedError

    @abstractmethod
    def set_local_version(self, version: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def current_version(self) -> str:
        """Return the active version, local first and then global."""
        raise NotImplementedError

    @abstractmethod
    def detect_installed(self) -> list[DetectedVersion]:
        """Return installations of this runtime found outside polyver."""
        raise NotImplementedError

    @abstractmethod
    def should_reshim_after(self, shim_name: str, args: Sequence[str]) -> bool:
        """Return whether running ``shim_name args`` may add or remove executables."""
        raise NotImplementedError


__all__ = ["Provider"]
