# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Ruby provider."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Final

from ..platform import is_windows
from .base import ManagedRuntime, VersionManagerLayout, exe_name, first_arg_in

RESHIM_COMMANDS: Final[dict[str, frozenset[str]]] = {
    "gem": frozenset({"install", "uninstall"}),
    # bundler can add binstubs on install and update
    "bundle": frozenset({"install", "update"}),
}


class RubyRuntime(ManagedRuntime):
    NAME = "ruby"
    DISPLAY_NAME = "Ruby"
    SHIMS = ("ruby", "gem", "irb", "bundle", "rake", "rdoc", "ri")

    def executable_candidates(self) -> Sequence[str]:
        return (f"bin/{exe_name('ruby')}",)

    def should_reshim_after(self, shim_name: str, args: Sequence[str]) -> bool:
        commands = RESHIM_COMMANDS.get(shim_name)
        if commands is None:
            return False
        return first_arg_in(args, commands)

    def system_locations(self) -> Sequence[Path]:
        if is_windows():
            return ()
        return (Path("/usr/bin/ruby"), Path("/usr/local/bin/ruby"), Path("/opt/homebrew/opt/ruby/bin/ruby"))

    def version_manager_layouts(self) -> Sequence[VersionManagerLayout]:
        home = self.home
        return (
            VersionManagerLayout("rbenv", home / ".rbenv" / "versions", ("bin/ruby",)),
            VersionManagerLayout("rvm", home / ".rvm" / "rubies", ("bin/ruby",), strip_prefix="ruby-"),
        )


__all__ = ["RubyRuntime"]
