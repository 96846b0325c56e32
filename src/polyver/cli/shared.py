# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared utilities for CLI commands (logging, errors, context)."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import typer

from ..context import AppContext
from ..errors import PolyverError
from ..logging import fail as core_fail
from ..logging import info as core_info
from ..logging import ok as core_ok
from ..logging import warn as core_warn

CLI_NAME = "polyver"


@dataclass(slots=True)
class CLIState:
    """Options collected by the root callback."""

    use_emoji: bool = False


@dataclass(slots=True)
class CLILogger:
    """Adapter around the logging helpers respecting CLI emoji settings."""

    use_emoji: bool

    def fail(self, message: str) -> None:
        core_fail(message, use_emoji=self.use_emoji)

    def warn(self, message: str) -> None:
        core_warn(message, use_emoji=self.use_emoji)

    def ok(self, message: str) -> None:
        core_ok(message, use_emoji=self.use_emoji)

    def info(self, message: str) -> None:
        core_info(message, use_emoji=self.use_emoji)

    def echo(self, message: str = "") -> None:
        """Write ``message`` to stdout using Typer's echo helper."""

        typer.echo(message)


def build_cli_logger(ctx: typer.Context | None) -> CLILogger:
    """Return a :class:`CLILogger` honouring the root ``--emoji`` flag."""

    state = ctx.obj if ctx is not None and isinstance(ctx.obj, CLIState) else CLIState()
    return CLILogger(use_emoji=state.use_emoji)


def load_context() -> AppContext:
    return AppContext.create()


@contextmanager
def cli_errors(logger: CLILogger) -> Iterator[None]:
    """Report :class:`PolyverError` failures and exit with their status."""

    try:
        yield
    except PolyverError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc


def normalize_version_argument(version: str) -> str:
    """Strip a single leading ``v``/``V`` from a user-supplied version."""

    text = version.strip()
    if text[:1] in {"v", "V"}:
        return text[1:]
    return text


__all__ = [
    "CLILogger",
    "CLIState",
    "CLI_NAME",
    "build_cli_logger",
    "cli_errors",
    "load_context",
    "normalize_version_argument",
]
