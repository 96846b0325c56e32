# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""``init`` and ``freeze`` commands."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path

import typer

from ...config import RuntimesConfig, read_all_runtimes
from ...console import confirm
from ...context import AppContext
from ...dispatch.pathsearch import search_path_entries
from ...errors import PolyverError, UnknownRuntimeError
from ...filesystem import normalize_path_key, write_text_atomic
from ...paths import local_config_path
from ...platform import is_windows
from ..options import ALL_OPTION, FORCE_OPTION, RUNTIMES_ARGUMENT
from ..shared import CLI_NAME, CLILogger, build_cli_logger, cli_errors, load_context

SELECT_ALL = "all"


def shims_on_path(shims: Path, environ: Mapping[str, str] | None = None) -> bool:
    """Return ``True`` when ``shims`` is one of the ``PATH`` entries."""

    target = normalize_path_key(shims)
    return any(normalize_path_key(entry) == target for entry in search_path_entries(environ))


def path_setup_lines(shims: Path) -> list[str]:
    """Return the shell lines that put ``shims`` first on ``PATH``."""

    if is_windows():
        return [f'setx PATH "{shims};%PATH%"']
    return [
        "# add to ~/.bashrc, ~/.zshrc or your shell's profile",
        f'export PATH="{shims}:$PATH"',
    ]


def init_command(ctx: typer.Context) -> None:
    """Create the polyver directories and show how to put the shims on PATH."""

    logger = build_cli_logger(ctx)
    with cli_errors(logger):
        paths = load_context().paths
        try:
            paths.ensure()
        except OSError as exc:
            raise PolyverError(f"failed to create {paths.root}: {exc}") from exc
        logger.ok(f"Initialized {paths.root}")
        if shims_on_path(paths.shims):
            logger.ok(f"{paths.shims} is already on PATH")
        else:
            logger.info(f"Add {paths.shims} to PATH, before any other runtime directories:")
            for line in path_setup_lines(paths.shims):
                logger.echo(f"  {line}")
        logger.info("Next steps:")
        logger.echo(f"  {CLI_NAME} install <runtime> <version>")
        logger.echo(f"  {CLI_NAME} global <runtime> <version>")


def _display_name(context: AppContext, runtime: str) -> str:
    try:
        return context.registry.get(runtime).display_name
    except UnknownRuntimeError:
        return runtime


def parse_selection(answer: str, count: int) -> tuple[list[int], list[str]]:
    """Parse a comma-separated list of 1-based indexes.

    Returns:
        tuple[list[int], list[str]]: Zero-based indexes in first-seen order and
        the tokens that were not valid choices.
    """

    text = answer.strip()
    if text.lower() == SELECT_ALL:
        return list(range(count)), []
    chosen: list[int] = []
    invalid: list[str] = []
    for token in (part.strip() for part in text.split(",")):
        if not token:
            continue
        if not token.isdigit() or not 1 <= int(token) <= count:
            invalid.append(token)
            continue
        index = int(token) - 1
        if index not in chosen:
            chosen.append(index)
    return chosen, invalid


def _prompt_selection(
    context: AppContext,
    logger: CLILogger,
    entries: Sequence[tuple[str, str]],
) -> list[tuple[str, str]]:
    logger.info("Global versions:")
    for index, (runtime, version) in enumerate(entries, start=1):
        logger.echo(f"  [{index}] {_display_name(context, runtime)} {version}")
    try:
        answer = typer.prompt(
            f"Select runtimes to include (comma-separated numbers, or '{SELECT_ALL}')",
            default="",
            show_default=False,
            err=True,
        )
    except typer.Abort:
        answer = ""
    chosen, invalid = parse_selection(answer, len(entries))
    for token in invalid:
        logger.warn(f"Invalid selection: {token}")
    return [entries[index] for index in chosen]


def _select_named(entries: Sequence[tuple[str, str]], runtimes: Sequence[str]) -> list[tuple[str, str]]:
    configured = dict(entries)
    missing = [runtime for runtime in runtimes if runtime not in configured]
    if missing:
        raise PolyverError(f"no global version configured for: {', '.join(missing)}")
    return [(runtime, configured[runtime]) for runtime in dict.fromkeys(runtimes)]


def freeze_command(
    ctx: typer.Context,
    runtimes: RUNTIMES_ARGUMENT = None,
    include_all: ALL_OPTION = False,
    force: FORCE_OPTION = False,
) -> None:
    """Pin global versions into a runtimes file in the current directory."""

    logger = build_cli_logger(ctx)
    with cli_errors(logger):
        context = load_context()
        target = local_config_path(Path.cwd())
        if target.exists() and not force and not confirm(f"{target} already exists. Overwrite it?", default=False):
            logger.info("Canceled")
            return
        try:
            configured = read_all_runtimes(context.resolver.global_config_path)
        except FileNotFoundError as exc:
            raise PolyverError(
                f"no global configuration found; set global versions first with "
                f"'{CLI_NAME} global <runtime> <version>'"
            ) from exc
        except (OSError, ValueError) as exc:
            raise PolyverError(str(exc)) from exc
        entries = list(configured.root.items())
        if not entries:
            logger.warn("No global versions are configured; nothing to freeze")
            return

        if runtimes:
            selected = _select_named(entries, runtimes)
        elif include_all:
            selected = entries
        else:
            selected = _prompt_selection(context, logger, entries)
        if not selected:
            logger.info("Canceled")
            return

        try:
            write_text_atomic(target, RuntimesConfig(dict(selected)).to_json())
        except OSError as exc:
            raise PolyverError(f"failed to write {target}: {exc}") from exc
        logger.ok(f"Created {target} with {len(selected)} runtime(s):")
        for runtime, version in selected:
            logger.echo(f"  {_display_name(context, runtime)} {version}")


def register(app: typer.Typer) -> None:
    """Register the setup commands with ``app``."""

    app.command(name="init")(init_command)
    app.command(name="freeze")(freeze_command)


__all__ = ["freeze_command", "init_command", "parse_selection", "path_setup_lines", "register", "shims_on_path"]
