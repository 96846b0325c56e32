# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Entry point executed by every shim."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Final

from ..console import confirm as console_confirm
from ..errors import ConfigurationError, NotInstalledError, PolyverError
from ..logging import configure_debug_logging, fail, info, ok, warn
from ..platform import WINDOWS_PATH_SUFFIXES, is_windows
from ..runtime.provider import Provider
from ..runtime.registry import Registry
from ..shim.cache import ShimNameCache
from .pathsearch import adjust_executable_path, find_in_system_path
from .process import ProcessRunner, default_runner

if TYPE_CHECKING:
    from ..context import AppContext

LOGGER = logging.getLogger(__name__)

CLI_NAME: Final[str] = "polyver"
ERROR_PREFIX: Final[str] = "polyver shim error"

ConfirmCallback = Callable[[str], bool]


def shim_name_from_argv0(argv0: str) -> str:
    """Return the shim identity encoded in ``argv0``.

    The basename is taken and ``.exe`` stripped; on Windows the ``.cmd`` and
    ``.bat`` launcher suffixes are stripped as well.
    """

    name = os.path.basename(argv0)
    suffixes = WINDOWS_PATH_SUFFIXES if is_windows() else (".exe",)
    lowered = name.lower() if is_windows() else name
    for suffix in suffixes:
        if lowered.endswith(suffix):
            return name[: -len(suffix)]
    return name


def map_to_runtime(shim_name: str, cache: ShimNameCache, registry: Registry) -> str:
    """Return the runtime owning ``shim_name`` (see :meth:`CommandDispatcher.map_to_runtime`)."""

    runtime, found = cache.lookup(shim_name)
    if found:
        return runtime
    providers = registry.get_all()
    for provider in providers:
        if shim_name in provider.shims():
            return provider.name
    for provider in providers:
        if any(shim_name.startswith(declared) for declared in provider.shims()):
            return provider.name
    return shim_name


def _confirm_reshim(prompt: str) -> bool:
    return console_confirm(prompt, default=True)


class CommandDispatcher:
    """Resolve a shim invocation to a concrete executable and run it.

    Args:
        context: Application context providing registry, resolver and paths.
        runner: Process runner; defaults to the platform runner.
        confirm: Yes/no prompt used before regenerating shims.
        environ: Environment consulted for ``PATH`` lookups.
    """

    def __init__(
        self,
        context: AppContext,
        runner: ProcessRunner | None = None,
        *,
        confirm: ConfirmCallback | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._context = context
        self._runner = runner if runner is not None else default_runner()
        self._confirm = confirm if confirm is not None else _confirm_reshim
        self._environ = environ

    def run(self, argv: Sequence[str]) -> int:
        """Dispatch ``argv`` and return the exit status to terminate with.

        ``argv[0]`` names the shim; the rest is forwarded untouched.

        Raises:
            UnknownRuntimeError: If the shim maps to no registered runtime.
            ConfigurationError: If nothing is configured and no system copy exists.
            NotInstalledError: If the configured version is missing on disk.
            LaunchError: If the resolved executable cannot be started.
        """

        if not argv:
            raise PolyverError("no command name given")
        shim_name = shim_name_from_argv0(argv[0])
        args = list(argv[1:])
        runtime = self.map_to_runtime(shim_name)
        provider = self._context.registry.get(runtime)
        LOGGER.debug("dispatch shim=%s runtime=%s", shim_name, runtime)

        try:
            version = self._context.resolver.current_version(runtime)
        except ConfigurationError:
            return self._run_unconfigured(shim_name, runtime, provider, args)

        if not provider.is_installed(version):
            fail(f"{provider.display_name} {version} is configured but not installed")
            info(f"To install, run: {CLI_NAME} install {runtime} {version}", stderr=True)
            raise NotInstalledError(runtime, version)

        try:
            executable = provider.executable_path(version)
        except FileNotFoundError as exc:
            raise PolyverError(f"could not find {runtime} {version} executable: {exc}") from exc
        executable = adjust_executable_path(executable, shim_name, runtime)
        LOGGER.debug("resolved version=%s executable=%s", version, executable)

        if provider.should_reshim_after(shim_name, args):
            exit_code = self._runner.execute_and_wait(str(executable), args)
            if exit_code == 0:
                self._prompt_reshim()
            return exit_code
        return self._runner.execute(str(executable), args)

    def map_to_runtime(self, shim_name: str) -> str:
        """Return the runtime that owns ``shim_name``.

        The shim cache is consulted first, then each provider's declared shims
        for an exact match, then for a prefix match in registration order. An
        unmatched name is assumed to be a runtime name itself.
        """

        return map_to_runtime(shim_name, self._context.shim_cache, self._context.registry)

    def _run_unconfigured(self, shim_name: str, runtime: str, provider: Provider, args: list[str]) -> int:
        system_path = find_in_system_path(shim_name, self._context.paths.shims, environ=self._environ)
        if system_path is not None:
            info(f"No {CLI_NAME} version configured for {provider.display_name}", stderr=True)
            info(f"Using system installation: {system_path}", stderr=True)
            info(f"To manage with {CLI_NAME}, run: {CLI_NAME} install {runtime} <version>", stderr=True)
            info(f"Or see available versions: {CLI_NAME} list-all {runtime}", stderr=True)
            print(file=sys.stderr)
            return self._runner.execute(str(system_path), args)

        warn(f"No {CLI_NAME} version configured for {provider.display_name}", stderr=True)
        warn("No system installation found in PATH", stderr=True)
        for line in (
            "",
            f"To install with {CLI_NAME}:",
            f"  1. See available versions: {CLI_NAME} list-all {runtime}",
            f"  2. Install a version: {CLI_NAME} install {runtime} <version>",
            f"  3. Set it globally: {CLI_NAME} global {runtime} <version>",
            "",
            "Or configure a local version in your project:",
            f"  {CLI_NAME} local {runtime} <version>",
        ):
            info(line, stderr=True)
        raise ConfigurationError(runtime)

    def _prompt_reshim(self) -> None:
        print(file=sys.stderr)
        info("Global packages were installed or removed", stderr=True)
        if not self._confirm(f"Run '{CLI_NAME} reshim' to update shims?"):
            info(f"Remember to run '{CLI_NAME} reshim' when you want to use the new executables", stderr=True)
            return
        manager = self._context.shim_manager()
        try:
            manager.rehash()
        except (PolyverError, OSError) as exc:
            fail(f"Failed to run reshim: {exc}")
            info(f"Please run manually: {CLI_NAME} reshim", stderr=True)
            return
        ok("Shims updated successfully", stderr=True)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the dispatcher for ``argv`` (``sys.argv`` by default)."""

    configure_debug_logging()
    arguments = list(sys.argv if argv is None else argv)
    from ..context import AppContext

    try:
        context = AppContext.create()
        return CommandDispatcher(context).run(arguments)
    except PolyverError as exc:
        fail(f"{ERROR_PREFIX}: {exc}")
        return exc.exit_code


__all__ = ["CommandDispatcher", "main", "map_to_runtime", "shim_name_from_argv0"]
