# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shim dispatch: map an invoked name to a runtime version and run it."""

from __future__ import annotations

from .dispatcher import CommandDispatcher, main, shim_name_from_argv0
from .pathsearch import adjust_executable_path, find_in_system_path
from .process import ExecRunner, ProcessRunner, SpawnRunner, default_runner

__all__ = [
    "CommandDispatcher",
    "ExecRunner",
    "ProcessRunner",
    "SpawnRunner",
    "adjust_executable_path",
    "default_runner",
    "find_in_system_path",
    "main",
    "shim_name_from_argv0",
]
