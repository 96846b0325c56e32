# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""``install`` and ``uninstall`` commands."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import typer
from rich.progress import BarColumn, DownloadColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from ...config import read_all_runtimes
from ...console import confirm, detect_tty, get_console_manager
from ...context import AppContext
from ...download import ProgressCallback
from ...errors import ConfigurationError, PolyverError, UnknownRuntimeError
from ...installer import InstallResult, Installer, target_platform
from ..options import (
    OPTIONAL_RUNTIME_ARGUMENT,
    OPTIONAL_VERSION_ARGUMENT,
    PLATFORM_OPTION,
    RUNTIME_ARGUMENT,
    VERSION_ARGUMENT,
    YES_OPTION,
)
from ..shared import CLI_NAME, CLILogger, build_cli_logger, cli_errors, load_context, normalize_version_argument


@contextmanager
def _download_progress(description: str, *, use_emoji: bool) -> Iterator[ProgressCallback | None]:
    """Yield a progress callback rendering a Rich bar on an interactive stderr."""

    if not detect_tty(stderr=True):
        yield None
        return
    console = get_console_manager().get(color=True, emoji=use_emoji, stderr=True)
    progress = Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        BarColumn(bar_width=None),
        DownloadColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
    task_id = progress.add_task(description, total=None)

    def update(completed: int, total: int | None) -> None:
        progress.update(task_id, completed=completed, total=total)

    with progress:
        yield update


def _install_one(
    context: AppContext,
    logger: CLILogger,
    runtime: str,
    version: str,
    platform: str | None,
) -> InstallResult:
    installer = Installer(context)
    display = context.registry.get(runtime).display_name
    logger.info(f"Installing {display} {version}...")
    with _download_progress(f"Downloading {display} {version}", use_emoji=logger.use_emoji) as progress:
        result = installer.install(runtime, version, platform, progress=progress)
    if not result.verified:
        logger.warn(f"No checksum published for {display} {version}; download was not verified")
    logger.ok(f"Installed {display} {version} to {result.path}")
    if result.set_global:
        logger.ok(f"Set {display} {version} as global version (first install)")
    return result


def _install_from_local_config(
    context: AppContext,
    logger: CLILogger,
    platform: str | None,
    *,
    assume_yes: bool,
) -> None:
    """Install every runtime pinned in the nearest local runtimes file.

    Unknown runtimes are skipped with a warning and a failed install does not
    stop the remaining ones; the command fails only after the summary.
    """

    local_file = context.resolver.find_local_runtimes_file()
    if local_file is None:
        raise PolyverError(
            f"no runtime given and no local runtimes file found; "
            f"run '{CLI_NAME} install <runtime> <version>' or create one with '{CLI_NAME} freeze'"
        )
    try:
        pinned = read_all_runtimes(local_file)
    except (OSError, ValueError) as exc:
        raise PolyverError(str(exc)) from exc
    logger.info(f"Found config: {local_file}")
    if not pinned.root:
        logger.warn(f"No runtimes listed in {local_file}")
        return

    pending: list[tuple[str, str, str]] = []
    already_installed = 0
    for runtime, version in pinned.root.items():
        try:
            provider = context.registry.get(runtime)
        except UnknownRuntimeError:
            logger.warn(f"Unknown runtime '{runtime}', skipping")
            continue
        if provider.is_installed(version):
            logger.echo(f"  {provider.display_name} {version} (already installed)")
            already_installed += 1
        else:
            logger.echo(f"  {provider.display_name} {version} (will install)")
            pending.append((runtime, provider.display_name, version))

    if not pending:
        logger.ok("All runtimes are already installed")
        return
    if not assume_yes and not confirm(f"Install {len(pending)} runtime(s)?", default=True):
        logger.info("Installation cancelled")
        return

    installed = 0
    failures: list[str] = []
    for runtime, display, version in pending:
        try:
            _install_one(context, logger, runtime, version, platform)
        except PolyverError as exc:
            logger.fail(f"{display} {version}: {exc}")
            failures.append(f"{display} {version}")
        else:
            installed += 1

    logger.info(f"Successfully installed: {installed} runtime(s)")
    if already_installed:
        logger.info(f"Already installed: {already_installed} runtime(s)")
    if failures:
        raise PolyverError(f"failed to install {len(failures)} runtime(s): {', '.join(failures)}")
    logger.ok("All runtimes installed successfully")


def install_command(
    ctx: typer.Context,
    runtime: OPTIONAL_RUNTIME_ARGUMENT = None,
    version: OPTIONAL_VERSION_ARGUMENT = None,
    platform: PLATFORM_OPTION = None,
    yes: YES_OPTION = False,
) -> None:
    """Install a runtime version, or every version pinned in the local runtimes file."""

    logger = build_cli_logger(ctx)
    with cli_errors(logger):
        target_platform(platform)
        context = load_context()
        if runtime is None:
            _install_from_local_config(context, logger, platform, assume_yes=yes)
            return
        if version is None:
            raise PolyverError(f"missing version; see '{CLI_NAME} list-all {runtime}'")
        normalized = normalize_version_argument(version)
        result = _install_one(context, logger, runtime, normalized, platform)
        if not result.set_global:
            logger.info(f"Run '{CLI_NAME} global {runtime} {normalized}' to make it the default")


def uninstall_command(ctx: typer.Context, runtime: RUNTIME_ARGUMENT, version: VERSION_ARGUMENT) -> None:
    """Remove an installed runtime version."""

    logger = build_cli_logger(ctx)
    with cli_errors(logger):
        context = load_context()
        normalized = normalize_version_argument(version)
        provider = context.registry.get(runtime)
        try:
            pinned_locally = provider.local_version() == normalized
        except ConfigurationError:
            pinned_locally = False
        if pinned_locally:
            logger.warn(f"{provider.display_name} {normalized} is pinned by the local runtimes file")
        path = Installer(context).uninstall(runtime, normalized)
        logger.ok(f"Removed {provider.display_name} {normalized} from {path}")


def register(app: typer.Typer) -> None:
    """Register the install commands with ``app``."""

    app.command(name="install")(install_command)
    app.command(name="uninstall")(uninstall_command)


__all__ = ["install_command", "register", "uninstall_command"]
