# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception taxonomy shared by the resolver, dispatcher and manifest layers."""

from __future__ import annotations

from collections.abc import Sequence


class PolyverError(RuntimeError):
    """Base error carrying the exit status a command should terminate with."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


class ConfigurationError(PolyverError):
    """Raised when no version is configured for a runtime."""

    def __init__(self, runtime: str) -> None:
        super().__init__(f"no version configured for {runtime}")
        self.runtime = runtime


class NotInstalledError(PolyverError):
    """Raised when a configured version is missing on disk."""

    def __init__(self, runtime: str, version: str) -> None:
        super().__init__(f"{runtime} {version} is configured but not installed")
        self.runtime = runtime
        self.version = version


class UnknownRuntimeError(PolyverError, KeyError):
    """Raised when a runtime name has no registered provider."""

    def __init__(self, name: str, available: Sequence[str] = ()) -> None:
        self.name = name
        self.available = tuple(available)
        listing = ", ".join(self.available) if self.available else "none"
        super().__init__(f"unknown runtime '{name}' (available runtimes: {listing})")

    def __str__(self) -> str:
        return str(self.args[0])


class DuplicateProviderError(PolyverError, ValueError):
    """Raised when registering a provider whose name is already taken."""

    def __init__(self, name: str) -> None:
        super().__init__(f"provider '{name}' is already registered")
        self.name = name


class LaunchError(PolyverError):
    """Raised when a resolved executable could not be started."""

    def __init__(self, path: str, cause: BaseException | None = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"failed to execute {path}{detail}")
        self.path = path
        self.cause = cause


class ManifestError(PolyverError):
    """Base class for manifest retrieval and parsing failures."""


class ManifestNotFoundError(ManifestError, LookupError):
    """Raised when a source has no manifest for the requested runtime."""

    def __init__(self, runtime: str) -> None:
        super().__init__(f"manifest not found for runtime: {runtime}")
        self.runtime = runtime


class ManifestParseError(ManifestError, ValueError):
    """Raised when a manifest payload is malformed or uses an unknown schema."""


class ManifestFetchError(ManifestError):
    """Raised when a remote manifest could not be retrieved."""


class ChecksumMismatchError(PolyverError):
    """Raised when a downloaded artefact fails SHA-256 verification."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(f"checksum mismatch: expected {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class PlatformUnavailableError(PolyverError):
    """Raised when a version cannot be installed on the requested platform."""

    def __init__(self, runtime: str, version: str, platform: str, *, known: bool) -> None:
        if known:
            message = f"{runtime} {version} is not available for {platform}"
        else:
            message = f"no download information for {runtime} {version} on {platform}"
        super().__init__(message)
        self.runtime = runtime
        self.version = version
        self.platform = platform
        self.known = known


__all__ = [
    "ChecksumMismatchError",
    "ConfigurationError",
    "DuplicateProviderError",
    "LaunchError",
    "ManifestError",
    "ManifestFetchError",
    "ManifestNotFoundError",
    "ManifestParseError",
    "NotInstalledError",
    "PlatformUnavailableError",
    "PolyverError",
    "UnknownRuntimeError",
]
