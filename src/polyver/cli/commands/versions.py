# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Commands that inspect and select runtime versions."""

from __future__ import annotations

from collections.abc import Callable

import typer
from rich import box
from rich.table import Table

from ...console import detect_tty, get_console_manager
from ...context import AppContext
from ...dispatch.dispatcher import map_to_runtime
from ...dispatch.pathsearch import adjust_executable_path
from ...errors import ConfigurationError, PolyverError
from ...installer import Installer
from ...runtime.provider import Provider
from ..options import (
    COMMAND_ARGUMENT,
    OPTIONAL_RUNTIME_ARGUMENT,
    OPTIONAL_VERSION_ARGUMENT,
    PLATFORM_OPTION,
    RUNTIME_ARGUMENT,
    VERSION_ARGUMENT,
)
from ..shared import CLI_NAME, CLILogger, build_cli_logger, cli_errors, load_context, normalize_version_argument


def _selected_providers(context: AppContext, runtime: str | None) -> list[Provider]:
    if runtime is None:
        return context.registry.get_all()
    return [context.registry.get(runtime)]


def list_command(ctx: typer.Context, runtime: OPTIONAL_RUNTIME_ARGUMENT = None) -> None:
    """List installed versions."""

    logger = build_cli_logger(ctx)
    with cli_errors(logger):
        context = load_context()
        any_installed = False
        for provider in _selected_providers(context, runtime):
            installed = provider.list_installed()
            if not installed:
                if runtime is not None:
                    logger.info(f"No {provider.display_name} versions installed")
                continue
            any_installed = True
            logger.echo(f"{provider.display_name}:")
            for item in installed:
                marker = "*" if item.is_global else " "
                logger.echo(f"  {marker} {item}")
        if runtime is None and not any_installed:
            logger.info(f"No runtimes installed; see '{CLI_NAME} list-all <runtime>'")


def list_all_command(
    ctx: typer.Context,
    runtime: RUNTIME_ARGUMENT,
    platform: PLATFORM_OPTION = None,
) -> None:
    """List versions available for installation."""

    logger = build_cli_logger(ctx)
    with cli_errors(logger):
        context = load_context()
        provider = context.registry.get(runtime)
        available = Installer(context).list_available(runtime, platform)
        if not available:
            logger.info(f"No {provider.display_name} versions available for this platform")
            return
        for item in available:
            suffix = " (installed)" if provider.is_installed(item.version.raw) else ""
            logger.echo(f"{item.version.raw}{suffix}")


def _set_version(
    logger: CLILogger,
    provider: Provider,
    version: str,
    scope: str,
    setter: Callable[[str], None],
) -> None:
    if not provider.is_installed(version):
        logger.fail(f"{provider.display_name} {version} is not installed")
        logger.info(f"Run '{CLI_NAME} list {provider.name}' to see installed versions")
        logger.info(f"Run '{CLI_NAME} install {provider.name} {version}' to install it first")
        raise typer.Exit(code=1)
    try:
        setter(version)
    except OSError as exc:
        raise PolyverError(f"failed to set {scope} version: {exc}") from exc
    logger.ok(f"Set {scope} {provider.display_name} version to {version}")


def global_command(ctx: typer.Context, runtime: RUNTIME_ARGUMENT, version: VERSION_ARGUMENT) -> None:
    """Set the global default version of a runtime."""

    logger = build_cli_logger(ctx)
    with cli_errors(logger):
        provider = load_context().registry.get(runtime)
        _set_version(logger, provider, normalize_version_argument(version), "global", provider.set_global_version)


def local_command(ctx: typer.Context, runtime: RUNTIME_ARGUMENT, version: VERSION_ARGUMENT) -> None:
    """Pin a runtime version for the current directory."""

    logger = build_cli_logger(ctx)
    with cli_errors(logger):
        provider = load_context().registry.get(runtime)
        _set_version(logger, provider, normalize_version_argument(version), "local", provider.set_local_version)


def current_command(ctx: typer.Context, runtime: OPTIONAL_RUNTIME_ARGUMENT = None) -> None:
    """Show the active version of one or all runtimes."""

    logger = build_cli_logger(ctx)
    with cli_errors(logger):
        context = load_context()
        if runtime is not None:
            provider = context.registry.get(runtime)
            version = provider.current_version()
            status = "" if provider.is_installed(version) else " (not installed)"
            logger.echo(f"{version}{status}")
            return

        table = Table(title="Active Versions", box=box.SIMPLE)
        table.add_column("Runtime")
        table.add_column("Version")
        table.add_column("Status")
        rows = 0
        for provider in context.registry.get_all():
            try:
                version = provider.current_version()
            except ConfigurationError:
                continue
            status = "installed" if provider.is_installed(version) else "not installed"
            table.add_row(provider.display_name, version, status)
            rows += 1
        if rows == 0:
            logger.info("No runtimes configured")
            return
        console = get_console_manager().get(color=detect_tty(), emoji=logger.use_emoji)
        console.print(table)


def which_command(ctx: typer.Context, command: COMMAND_ARGUMENT) -> None:
    """Show the executable a shimmed command resolves to."""

    logger = build_cli_logger(ctx)
    with cli_errors(logger):
        context = load_context()
        runtime = map_to_runtime(command, context.shim_cache, context.registry)
        provider = context.registry.get(runtime)
        version = provider.current_version()
        try:
            executable = provider.executable_path(version)
        except FileNotFoundError as exc:
            raise PolyverError(f"{provider.display_name} {version} is not properly installed: {exc}") from exc
        resolved = adjust_executable_path(executable, command, runtime)
        if not resolved.exists():
            raise PolyverError(f"executable not found: {resolved}")
        logger.echo(str(resolved))


def where_command(
    ctx: typer.Context,
    runtime: RUNTIME_ARGUMENT,
    version: OPTIONAL_VERSION_ARGUMENT = None,
) -> None:
    """Show the installation directory of a runtime version."""

    logger = build_cli_logger(ctx)
    with cli_errors(logger):
        provider = load_context().registry.get(runtime)
        selected = normalize_version_argument(version) if version is not None else provider.current_version()
        if not provider.is_installed(selected):
            raise PolyverError(f"{provider.display_name} {selected} is not installed")
        logger.echo(str(provider.install_path(selected)))


def register(app: typer.Typer) -> None:
    """Register the version selection commands with ``app``."""

    app.command(name="list")(list_command)
    app.command(name="list-all")(list_all_command)
    app.command(name="global")(global_command)
    app.command(name="local")(local_command)
    app.command(name="current")(current_command)
    app.command(name="which")(which_command)
    app.command(name="where")(where_command)


__all__ = [
    "current_command",
    "global_command",
    "list_all_command",
    "list_command",
    "local_command",
    "register",
    "where_command",
    "which_command",
]
