"""Nodes and the execution context bound to them."""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import PurePath
from typing import Iterator, Optional

from snyk_installer.core.errors import NodeOffline
from snyk_installer.remote.executor import LocalExecutor, RemoteExecutor
from snyk_installer.remote.filepath import RemotePath

_CURRENT_NODE: contextvars.ContextVar[Optional["Node"]] = contextvars.ContextVar(
    "snyk_installer_current_node", default=None
)


@dataclass
class Node:
    """A machine on which installation work executes.

    Attributes:
        name: Display name used in log messages.
        root_path: Root directory of the node's workspace, as seen by the node.
        channel: Executor for the node; None while the node is offline.
    """

    name: str
    root_path: str
    channel: Optional[RemoteExecutor] = None

    @classmethod
    def local(cls, root_path: str, name: str = "local") -> "Node":
        """Create the node for the current process."""
        return cls(name=name, root_path=root_path, channel=LocalExecutor())

    @property
    def display_name(self) -> str:
        return self.name

    def require_channel(self) -> RemoteExecutor:
        """Return the node's channel.

        Raises:
            NodeOffline: If the node has no channel.
        """
        if self.channel is None:
            raise NodeOffline(self.name)
        return self.channel

    @property
    def root(self) -> RemotePath:
        return RemotePath(self.root_path, self.require_channel())

    def create_path(self, path: str) -> RemotePath:
        """Return ``path`` on this node, resolved against the root if relative."""
        if PurePath(path).is_absolute():
            return RemotePath(path, self.require_channel())
        return self.root.child(path)


def current_node() -> Optional[Node]:
    """Return the node bound to the current execution context, if any."""
    return _CURRENT_NODE.get()


@contextmanager
def node_context(node: Optional[Node]) -> Iterator[None]:
    """Bind ``node`` as the current node for the duration of the block."""
    token = _CURRENT_NODE.set(node)
    try:
        yield
    finally:
        _CURRENT_NODE.reset(token)
