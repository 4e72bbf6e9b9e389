"""Executor capability used to run work on a node."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List, Optional, TypeVar, Union

from snyk_installer.core.listener import TaskListener
from snyk_installer.core.subprocess_runner import run_process

T = TypeVar("T")


class RemoteExecutor(ABC):
    """Runs units of work on a (possibly remote) node.

    Both methods block until the work has completed on the node. Exceptions
    raised by a unit are re-raised in the caller.
    """

    @abstractmethod
    def call(self, unit: Callable[[], T]) -> T:
        """Run a zero-argument callable on the node and return its result.

        Args:
            unit: Unit of work. Remote transports serialize it, so it should
                be a module-level function, a functools.partial of one, or an
                instance of a module-level class.
        """

    @abstractmethod
    def launch(
        self,
        cmd: List[str],
        *,
        cwd: Optional[Union[str, Path]] = None,
        quiet: bool = False,
        listener: Optional[TaskListener] = None,
    ) -> int:
        """Start a process on the node and wait for it.

        Returns:
            The process exit code.

        Raises:
            OSError: If the process cannot be started.
        """


class LocalExecutor(RemoteExecutor):
    """Executor for the node the current process runs on."""

    def call(self, unit: Callable[[], T]) -> T:
        return unit()

    def launch(
        self,
        cmd: List[str],
        *,
        cwd: Optional[Union[str, Path]] = None,
        quiet: bool = False,
        listener: Optional[TaskListener] = None,
    ) -> int:
        return run_process(cmd, cwd=cwd, listener=listener, quiet=quiet)
