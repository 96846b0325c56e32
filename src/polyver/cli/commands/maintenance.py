# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shim regeneration, manifest refresh and system detection commands."""

from __future__ import annotations

import typer

from ...errors import ManifestError, PolyverError
from ..options import OPTIONAL_RUNTIME_ARGUMENT
from ..shared import build_cli_logger, cli_errors, load_context


def reshim_command(ctx: typer.Context) -> None:
    """Regenerate shims for every installed runtime version."""

    logger = build_cli_logger(ctx)
    with cli_errors(logger):
        manager = load_context().shim_manager()
        result = manager.rehash(lambda _runtime, display: logger.info(f"Scanning {display}..."))
        for runtime, names in sorted(result.shims_by_runtime.items()):
            logger.echo(f"{runtime}: {', '.join(names)}")
        if result.removed:
            logger.info(f"Removed stale shims: {', '.join(sorted(result.removed))}")
        logger.ok(f"Created {result.total_shims} shims")


def refresh_command(ctx: typer.Context, runtime: OPTIONAL_RUNTIME_ARGUMENT = None) -> None:
    """Drop cached manifests and fetch fresh copies."""

    logger = build_cli_logger(ctx)
    with cli_errors(logger):
        context = load_context()
        runtimes = [runtime] if runtime is not None else context.registry.list()
        if runtime is None:
            try:
                context.manifests.clear_all_cache()
            except OSError as exc:
                raise PolyverError(f"failed to clear manifest cache: {exc}") from exc
        failures = 0
        for name in runtimes:
            display = context.registry.get(name).display_name
            try:
                manifest, from_remote = context.manifests.force_refresh_runtime(name)
            except ManifestError as exc:
                logger.warn(f"{display}: {exc}")
                failures += 1
                continue
            origin = "remote" if from_remote else "embedded"
            logger.ok(f"{display}: {len(manifest.versions)} versions ({origin})")
        if failures:
            raise PolyverError(f"failed to refresh {failures} manifest(s)")


def detect_command(ctx: typer.Context, runtime: OPTIONAL_RUNTIME_ARGUMENT = None) -> None:
    """List installations that polyver does not manage."""

    logger = build_cli_logger(ctx)
    with cli_errors(logger):
        context = load_context()
        providers = context.registry.get_all() if runtime is None else [context.registry.get(runtime)]
        found = 0
        for provider in providers:
            for detected in provider.detect_installed():
                logger.echo(f"{provider.display_name}: {detected}")
                found += 1
        if found == 0:
            logger.info("No unmanaged installations found")


def register(app: typer.Typer) -> None:
    """Register the maintenance commands with ``app``."""

    app.command(name="reshim")(reshim_command)
    app.command(name="refresh")(refresh_command)
    app.command(name="detect")(detect_command)


__all__ = ["detect_command", "refresh_command", "register", "reshim_command"]
