# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Registry mapping runtime names to their providers."""

from __future__ import annotations

from threading import RLock

from ..errors import DuplicateProviderError, UnknownRuntimeError
from .provider import Provider


class Registry:
    """Hold the providers known to the current process.

    The registry is an explicit value built at start-up and passed to the
    resolver and dispatcher. All operations take a single lock; enumeration
    returns copies so callers never observe concurrent mutation.
    """

    def __init__(self) -> None:
        self._providers: dict[str, Provider] = {}
        self._lock = RLock()

    def register(self, provider: Provider) -> None:
        """Register ``provider`` under its name.

        Args:
            provider: Provider instance to expose through the registry.

        Raises:
            DuplicateProviderError: If a provider with the same name is already registered.
        """

        name = provider.name
        with self._lock:
            if name in self._providers:
                raise DuplicateProviderError(name)
            self._providers[name] = provider

    def unregister(self, name: str) -> None:
        """Remove the provider registered as ``name``.

        Raises:
            UnknownRuntimeError: If no provider is registered under ``name``.
        """

        with self._lock:
            if name not in self._providers:
                raise UnknownRuntimeError(name, tuple(self._providers))
            del self._providers[name]

    def get(self, name: str) -> Provider:
        """Return the provider registered as ``name``.

        Raises:
            UnknownRuntimeError: If ``name`` is unknown; the error lists the
                available runtimes.
        """

        with self._lock:
            provider = self._providers.get(name)
            if provider is None:
                raise UnknownRuntimeError(name, tuple(self._providers))
            return provider

    def get_all(self) -> list[Provider]:
        with self._lock:
            return list(self._providers.values())

    def list(self) -> list[str]:
        with self._lock:
            return list(self._providers)

    def has(self, name: str) -> bool:
        with self._lock:
            return name in self._providers

    def __len__(self) -> int:
        with self._lock:
            return len(self._providers)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._providers


__all__ = ["Registry"]
