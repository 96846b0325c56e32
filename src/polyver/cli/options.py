# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Reusable Typer argument and option declarations."""

from __future__ import annotations

from typing import Annotated

import typer

RUNTIME_ARGUMENT = Annotated[str, typer.Argument(help="Runtime name, for example node or python.")]
OPTIONAL_RUNTIME_ARGUMENT = Annotated[
    str | None,
    typer.Argument(help="Runtime name; all runtimes when omitted."),
]
VERSION_ARGUMENT = Annotated[str, typer.Argument(help="Version, with or without a leading 'v'.")]
OPTIONAL_VERSION_ARGUMENT = Annotated[
    str | None,
    typer.Argument(help="Version, with or without a leading 'v'."),
]
COMMAND_ARGUMENT = Annotated[str, typer.Argument(help="Command name as typed, for example npm.")]
PLATFORM_OPTION = Annotated[
    str | None,
    typer.Option("--platform", help="Target platform key such as linux-amd64; defaults to the host."),
]
EMOJI_OPTION = Annotated[bool, typer.Option("--emoji/--no-emoji", help="Toggle emoji in CLI output.")]
YES_OPTION = Annotated[bool, typer.Option("--yes", "-y", help="Answer yes to confirmation prompts.")]
ALL_OPTION = Annotated[bool, typer.Option("--all", "-a", help="Include every configured runtime without prompting.")]
FORCE_OPTION = Annotated[bool, typer.Option("--force", "-f", help="Overwrite an existing file without asking.")]
RUNTIMES_ARGUMENT = Annotated[
    list[str] | None,
    typer.Argument(help="Runtimes to include; prompts for a selection when omitted."),
]

__all__ = [
    "ALL_OPTION",
    "COMMAND_ARGUMENT",
    "EMOJI_OPTION",
    "FORCE_OPTION",
    "OPTIONAL_RUNTIME_ARGUMENT",
    "OPTIONAL_VERSION_ARGUMENT",
    "PLATFORM_OPTION",
    "RUNTIMES_ARGUMENT",
    "RUNTIME_ARGUMENT",
    "VERSION_ARGUMENT",
    "YES_OPTION",
]
