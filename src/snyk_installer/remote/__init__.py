"""Remote execution adapter.

Work that affects a node (process launch, file reads and writes, permission
changes) is submitted to that node's RemoteExecutor as a unit of work. The
local implementation runs units in-process; other transports implement the
same two methods.
"""

from snyk_installer.remote.executor import LocalExecutor, RemoteExecutor
from snyk_installer.remote.filepath import RemotePath
from snyk_installer.remote.node import Node, current_node, node_context

__all__ = [
    "LocalExecutor",
    "RemoteExecutor",
    "RemotePath",
    "Node",
    "current_node",
    "node_context",
]
