# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Python provider."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Final

from ..platform import is_windows
from .base import ManagedRuntime, VersionManagerLayout, first_arg_in

PIP_SHIMS: Final[frozenset[str]] = frozenset({"pip", "pip3"})
PIP_COMMANDS: Final[frozenset[str]] = frozenset({"install", "uninstall"})


class PythonRuntime(ManagedRuntime):
    NAME = "python"
    DISPLAY_NAME = "Python"
    SHIMS = ("python", "python3", "pip", "pip3")

    def executable_candidates(self) -> Sequence[str]:
        # Windows embeddable packages keep python.exe at the install root.
        if is_windows():
            return ("python.exe",)
        return ("bin/python", "bin/python3")

    def should_reshim_after(self, shim_name: str, args: Sequence[str]) -> bool:
        return shim_name in PIP_SHIMS and first_arg_in(args, PIP_COMMANDS)

    def system_locations(self) -> Sequence[Path]:
        if is_windows():
            return ()
        return (
            Path("/usr/bin/python3"),
            Path("/usr/local/bin/python3"),
            Path("/opt/homebrew/bin/python3"),
        )

    def version_manager_layouts(self) -> Sequence[VersionManagerLayout]:
        home = self.home
        return (
            VersionManagerLayout(
                "pyenv",
                home / ".pyenv" / "versions",
                ("bin/python", "bin/python3", "python.exe"),
            ),
            VersionManagerLayout("pyenv", home / ".pyenv" / "pyenv-win" / "versions", ("python.exe",)),
        )


__all__ = ["PythonRuntime"]
