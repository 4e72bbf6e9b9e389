"""Node-bound file paths.

A RemotePath names a file on a specific node. Every filesystem operation is
submitted to the node's executor, so the same code works for the local
node and for remote ones.
"""

from __future__ import annotations

import functools
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, TypeVar

from snyk_installer.remote.executor import RemoteExecutor

T = TypeVar("T")


def _exists(path: str) -> bool:
    return Path(path).exists()


def _is_file(path: str) -> bool:
    return Path(path).is_file()


def _read_text(path: str, encoding: str) -> str:
    return Path(path).read_text(encoding=encoding)


def _write_text(path: str, content: str, encoding: str) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding=encoding) as f:
            f.write(content)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _mkdirs(path: str) -> None:
    Path(path).mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class RemotePath:
    """A path on the node reachable through ``channel``.

    Attributes:
        remote: Path string as seen by the node.
        channel: Executor of the node owning the path.
    """

    remote: str
    channel: RemoteExecutor

    def _act(self, fn: Callable[..., T], *args) -> T:
        return self.channel.call(functools.partial(fn, self.remote, *args))

    @property
    def name(self) -> str:
        return Path(self.remote).name

    def child(self, name: str) -> "RemotePath":
        return RemotePath(str(Path(self.remote) / name), self.channel)

    def exists(self) -> bool:
        return self._act(_exists)

    def is_file(self) -> bool:
        return self._act(_is_file)

    def read_text(self, encoding: str = "utf-8") -> str:
        return self._act(_read_text, encoding)

    def write_text(self, content: str, encoding: str = "utf-8") -> None:
        """Write ``content``, replacing the file atomically."""
        self._act(_write_text, content, encoding)

    def mkdirs(self) -> None:
        """Create this directory and its parents; no-op if it exists."""
        self._act(_mkdirs)

    def __str__(self) -> str:
        return self.remote
