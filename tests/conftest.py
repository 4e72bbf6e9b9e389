"""Shared fixtures for snyk-installer tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional

import pytest

from snyk_installer.bootstrap.platform import OsFamily, PlatformDescriptor
from snyk_installer.core.listener import CallbackTaskListener
from snyk_installer.remote.executor import LocalExecutor
from snyk_installer.remote.node import Node

LINUX_AMD64 = PlatformDescriptor.of(OsFamily.LINUX, "amd64")


class FakeNodeExecutor(LocalExecutor):
    """Runs units of work in-process and fakes npm.

    Records every unit and every launched command.
    """

    def __init__(
        self,
        npm_available: bool = False,
        npm_install_exit_code: int = 0,
        npm_install_error: Optional[Exception] = None,
    ) -> None:
        self.npm_available = npm_available
        self.npm_install_exit_code = npm_install_exit_code
        self.npm_install_error = npm_install_error
        self.units: List[object] = []
        self.launches: List[List[str]] = []

    def call(self, unit):
        self.units.append(unit)
        return unit()

    def launch(self, cmd, *, cwd=None, quiet=False, listener=None) -> int:
        self.launches.append(list(cmd))
        if cmd[:2] == ["npm", "--version"]:
            if not self.npm_available:
                raise FileNotFoundError(2, "No such file or directory", "npm")
            return 0
        if cmd[:2] == ["npm", "install"]:
            if self.npm_install_error is not None:
                raise self.npm_install_error
            if self.npm_install_exit_code == 0:
                bin_dir = Path(cmd[3]) / "node_modules" / ".bin"
                bin_dir.mkdir(parents=True, exist_ok=True)
                (bin_dir / "snyk").write_text("#!/bin/sh\n")
                (bin_dir / "snyk-to-html").write_text("#!/bin/sh\n")
            return self.npm_install_exit_code
        raise AssertionError(f"Unexpected command: {cmd}")


@pytest.fixture
def make_node(tmp_path: Path) -> Callable[..., Node]:
    """Factory for nodes rooted in a temporary directory."""

    def factory(executor: Optional[LocalExecutor] = None, name: str = "agent-1") -> Node:
        root = tmp_path / name
        root.mkdir(exist_ok=True)
        return Node(name=name, root_path=str(root), channel=executor or FakeNodeExecutor())

    return factory


@pytest.fixture
def listener() -> CallbackTaskListener:
    return CallbackTaskListener()


@pytest.fixture
def make_executor() -> Callable[..., FakeNodeExecutor]:
    """Factory for fake node executors."""
    return FakeNodeExecutor


@pytest.fixture
def linux_amd64() -> PlatformDescriptor:
    return LINUX_AMD64
