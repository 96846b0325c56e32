# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Process runners that hand control to a resolved executable."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import sys
from abc import abstractmethod
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Protocol, runtime_checkable

from ..errors import LaunchError

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class ProcessRunner(Protocol):
    """Start ``path`` with ``args`` wired to the current standard streams."""

    @abstractmethod
    def execute(self, path: str, args: Sequence[str]) -> int:
        """Run the executable and return its exit status.

        Implementations that replace the current process never return on
        success.

        Raises:
            LaunchError: If the executable could not be started.
        """
        raise NotImplementedError

    @abstractmethod
    def execute_and_wait(self, path: str, args: Sequence[str]) -> int:
        """Run the executable as a child and return its exit status.

        Raises:
            LaunchError: If the executable could not be started.
        """
        raise NotImplementedError


def exit_status(returncode: int) -> int:
    """Translate a :mod:`subprocess` return code into a shell exit status."""

    if returncode < 0:
        return 128 + (-returncode)
    return returncode


@contextmanager
def _ignore_interrupts() -> Iterator[None]:
    """Let the child decide what SIGINT means while the parent waits."""

    previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


class SpawnRunner:
    """Spawn a child sharing stdio, wait for it and return its exit code."""

    def execute(self, path: str, args: Sequence[str]) -> int:
        return self.execute_and_wait(path, args)

    def execute_and_wait(self, path: str, args: Sequence[str]) -> int:
        command = [path, *args]
        LOGGER.debug("spawning command=%s", command)
        try:
            with _ignore_interrupts():
                completed = subprocess.run(command, check=False)
        except OSError as exc:
            raise LaunchError(path, exc) from exc
        LOGGER.debug("child exited returncode=%s", completed.returncode)
        return exit_status(completed.returncode)


class ExecRunner(SpawnRunner):
    """Replace the current process image via :func:`os.execv`."""

    def execute(self, path: str, args: Sequence[str]) -> int:
        LOGGER.debug("exec path=%s args=%s", path, list(args))
        sys.stdout.flush()
        sys.stderr.flush()
        try:
            os.execv(path, [path, *args])
        except OSError as exc:
            raise LaunchError(path, exc) from exc
        raise LaunchError(path)  # pragma: no cover - execv only returns by raising


def default_runner() -> ProcessRunner:
    """Return the runner suited to the host platform."""

    if os.name == "nt":
        return SpawnRunner()
    return ExecRunner()


__all__ = ["ExecRunner", "ProcessRunner", "SpawnRunner", "default_runner", "exit_status"]
