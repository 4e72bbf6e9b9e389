"""Exception types raised while provisioning the Snyk CLI."""

from __future__ import annotations


class SnykInstallerError(Exception):
    """Base class for snyk-installer errors."""

    pass


class ToolDetectionException(SnykInstallerError):
    """The tool could not be located or installed on a node.

    This is the single failure type surfaced to callers of the installer;
    the underlying cause is kept in ``__cause__``.
    """

    pass


class PlatformUndetectable(ToolDetectionException):
    """The OS/architecture of a node does not map to a Snyk distribution."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"Unsupported platform: {identifier}")
        self.identifier = identifier


class NodeOffline(ToolDetectionException):
    """A node has no channel, so no work can be submitted to it."""

    def __init__(self, node_name: str) -> None:
        super().__init__(f"Node '{node_name}' is offline")
        self.node_name = node_name
