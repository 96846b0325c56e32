# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the built-in runtime providers."""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

import pytest

from polyver.config import VersionResolver
from polyver.errors import ConfigurationError
from polyver.paths import Paths
from polyver.runtime.provider import Provider
from polyver.runtime.registry import Registry
from polyver.runtimes import NodeRuntime, PythonRuntime, RubyRuntime, VersionProbe, register_builtin_providers

posix_only = pytest.mark.skipif(os.name == "nt", reason="POSIX install layout")


class StubProbe(VersionProbe):
    """Report a fixed version instead of running executables."""

    def __init__(self, version: str | None) -> None:
        self.version = version
        self.commands: list[list[str]] = []

    def capture(self, command: Sequence[str]) -> str | None:
        self.commands.append(list(command))
        return self.version


@pytest.fixture
def node(paths: Paths, resolver: VersionResolver, tmp_path: Path) -> NodeRuntime:
    return NodeRuntime(paths, resolver, environ={"PATH": ""}, home=tmp_path / "home")


def test_builtin_registration(paths: Paths, resolver: VersionResolver) -> None:
    registry = Registry()

    register_builtin_providers(registry, paths, resolver)

    assert registry.list() == ["node", "python", "ruby"]
    assert all(isinstance(provider, Provider) for provider in registry.get_all())
    assert registry.get("node").display_name == "Node.js"
    assert "gem" in registry.get("ruby").shims()


@posix_only
def test_executable_path_requires_installed_binary(node: NodeRuntime, paths: Paths, make_executable_file) -> None:
    with pytest.raises(FileNotFoundError):
        node.executable_path("22.11.0")

    binary = make_executable_file(paths.runtime_version_path("node", "22.11.0") / "bin" / "node")

    assert node.is_installed("22.11.0")
    assert node.executable_path("22.11.0") == binary
    assert node.install_path("22.11.0") == paths.versions / "node" / "22.11.0"


@posix_only
def test_python_falls_back_to_python3(paths: Paths, resolver: VersionResolver, make_executable_file) -> None:
    python = PythonRuntime(paths, resolver)
    binary = make_executable_file(paths.runtime_version_path("python", "3.12.1") / "bin" / "python3")

    assert python.executable_path("3.12.1") == binary


def test_list_installed_sorted_with_global_flag(node: NodeRuntime, paths: Paths, resolver: VersionResolver) -> None:
    assert node.list_installed() == []
    for version in ("9.11.2", "22.11.0", "20.18.0"):
        paths.runtime_version_path("node", version).mkdir(parents=True)
    resolver.set_global_version("node", "20.18.0")

    installed = node.list_installed()

    assert [item.version.raw for item in installed] == ["22.11.0", "20.18.0", "9.11.2"]
    assert [item.is_global for item in installed] == [False, True, False]
    assert str(installed[1]) == "20.18.0 (global)"


def test_version_accessors_delegate_to_resolver(node: NodeRuntime, workdir: Path) -> None:
    with pytest.raises(ConfigurationError):
        node.current_version()

    node.set_global_version("20.18.0")
    assert node.current_version() == "20.18.0"

    node.set_local_version("22.11.0")
    assert node.local_version() == "22.11.0"
    assert node.global_version() == "20.18.0"
    assert node.current_version() == "22.11.0"
    assert (workdir / ".polyver" / "runtimes.json").is_file()


@pytest.mark.parametrize(
    ("shim", "args", "expected"),
    [
        ("npm", ["install", "-g", "typescript"], True),
        ("npm", ["i", "--global", "eslint"], True),
        ("npm", ["rm", "-g", "eslint"], True),
        ("npm", ["install", "lodash"], False),
        ("npm", ["run", "build", "-g"], False),
        ("npm", [], False),
        ("node", ["install", "-g"], False),
    ],
)
def test_node_reshim_rules(node: NodeRuntime, shim: str, args: list[str], expected: bool) -> None:
    assert node.should_reshim_after(shim, args) is expected


@pytest.mark.parametrize(
    ("shim", "args", "expected"),
    [
        ("pip", ["install", "black"], True),
        ("pip3", ["uninstall", "-y", "black"], True),
        ("pip", ["list"], False),
        ("python", ["-m", "pip", "install", "black"], False),
    ],
)
def test_python_reshim_rules(paths: Paths, resolver: VersionResolver, shim: str, args: list[str], expected: bool) -> None:
    assert PythonRuntime(paths, resolver).should_reshim_after(shim, args) is expected


@pytest.mark.parametrize(
    ("shim", "args", "expected"),
    [
        ("gem", ["install", "rails"], True),
        ("gem", ["uninstall", "rails"], True),
        ("bundle", ["install"], True),
        ("bundle", ["update", "rack"], True),
        ("bundle", ["exec", "rake"], False),
        ("gem", ["list"], False),
        ("ruby", ["install"], False),
    ],
)
def test_ruby_reshim_rules(paths: Paths, resolver: VersionResolver, shim: str, args: list[str], expected: bool) -> None:
    assert RubyRuntime(paths, resolver).should_reshim_after(shim, args) is expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("v22.11.0", "22.11.0"),
        ("Python 3.12.1", "3.12.1"),
        ("ruby 3.3.0p0 (2023-12-25 revision 5124f9ac75) [x86_64-linux]", "3.3.0"),
        ("", None),
        ("nightly", None),
    ],
)
def test_probe_normalize(raw: str, expected: str | None) -> None:
    assert VersionProbe().normalize(raw) == expected


@posix_only
def test_detect_installed_reports_path_and_version_managers(
    monkeypatch: pytest.MonkeyPatch,
    paths: Paths,
    resolver: VersionResolver,
    tmp_path: Path,
    make_executable_file,
) -> None:
    monkeypatch.setattr(NodeRuntime, "system_locations", lambda self: ())
    home = tmp_path / "home"
    system_node = make_executable_file(tmp_path / "usr" / "bin" / "node")
    nvm_node = make_executable_file(home / ".nvm" / "versions" / "node" / "v20.18.0" / "bin" / "node")
    (home / ".nvm" / "versions" / "node" / "v18.0.0").mkdir(parents=True)
    (home / ".nvm" / "versions" / "node" / "not-a-version" / "bin").mkdir(parents=True)
    probe = StubProbe("22.11.0")
    node = NodeRuntime(paths, resolver, probe=probe, environ={"PATH": str(system_node.parent)}, home=home)

    detected = node.detect_installed()

    assert [(item.version, item.path, item.source, item.validated) for item in detected] == [
        ("22.11.0", system_node, "system", True),
        ("20.18.0", nvm_node, "nvm", False),
    ]
    assert probe.commands == [[str(system_node), "--version"]]


def test_detect_installed_skips_unprobeable_executables(
    monkeypatch: pytest.MonkeyPatch,
    paths: Paths,
    resolver: VersionResolver,
    tmp_path: Path,
    make_executable_file,
) -> None:
    monkeypatch.setattr(RubyRuntime, "system_locations", lambda self: ())
    system_ruby = make_executable_file(tmp_path / "bin" / "ruby")
    ruby = RubyRuntime(
        paths,
        resolver,
        probe=StubProbe(None),
        environ={"PATH": str(system_ruby.parent)},
        home=tmp_path / "home",
    )

    assert ruby.detect_installed() == []
