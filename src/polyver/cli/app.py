# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands and shared services."""

from __future__ import annotations

import typer

from ..logging import configure_debug_logging
from .commands import register_commands
from .options import EMOJI_OPTION
from .shared import CLIState

app = typer.Typer(
    name="polyver",
    help="Install and switch between versions of several language runtimes.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def root_callback(ctx: typer.Context, emoji: EMOJI_OPTION = False) -> None:
    """Install and switch between versions of several language runtimes."""

    configure_debug_logging()
    ctx.obj = CLIState(use_emoji=emoji)


register_commands(app)


def main() -> None:
    app()


__all__ = ["app", "main"]
