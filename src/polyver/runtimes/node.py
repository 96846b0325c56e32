# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Node.js provider."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Final

from ..platform import is_windows
from .base import ManagedRuntime, VersionManagerLayout

PACKAGE_COMMANDS: Final[frozenset[str]] = frozenset({"install", "i", "uninstall", "remove", "rm", "un"})
GLOBAL_FLAGS: Final[frozenset[str]] = frozenset({"-g", "--global"})


class NodeRuntime(ManagedRuntime):
    """Node.js with its bundled ``npm`` and ``npx``."""

    NAME = "node"
    DISPLAY_NAME = "Node.js"
    SHIMS = ("node", "npm", "npx")

    def executable_candidates(self) -> Sequence[str]:
        if is_windows():
            return ("node.exe",)
        return ("bin/node",)

    def should_reshim_after(self, shim_name: str, args: Sequence[str]) -> bool:
        """Return ``True`` for ``npm install -g`` style commands.

        Only global installs and removals create or delete executables.
        """

        if shim_name != "npm" or not args:
            return False
        if args[0] not in PACKAGE_COMMANDS:
            return False
        return any(arg in GLOBAL_FLAGS for arg in args)

    def system_locations(self) -> Sequence[Path]:
        if is_windows():
            return (
                Path(r"C:\Program Files\nodejs\node.exe"),
                Path(r"C:\Program Files (x86)\nodejs\node.exe"),
            )
        return (
            Path("/usr/local/bin/node"),
            Path("/opt/homebrew/bin/node"),
            Path("/usr/bin/node"),
            self.home / ".local" / "bin" / "node",
        )

    def version_manager_layouts(self) -> Sequence[VersionManagerLayout]:
        home = self.home
        return (
            VersionManagerLayout("nvm", home / ".nvm" / "versions" / "node", ("bin/node",), strip_prefix="v"),
            VersionManagerLayout("nvm", home / "AppData" / "Roaming" / "nvm", ("node.exe",), strip_prefix="v"),
            VersionManagerLayout(
                "fnm",
                home / ".local" / "share" / "fnm" / "node-versions",
                ("installation/bin/node", "installation/node.exe"),
                strip_prefix="v",
            ),
        )


__all__ = ["NodeRuntime"]
