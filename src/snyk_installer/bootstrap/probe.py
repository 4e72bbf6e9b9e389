"""Capability probes run on a node before choosing an install strategy."""

from __future__ import annotations

from typing import List

from snyk_installer.core.logging import get_logger
from snyk_installer.remote.node import Node

LOGGER = get_logger(__name__)

NPM_VERSION_COMMAND = ["npm", "--version"]


def is_command_available(node: Node, command: List[str]) -> bool:
    """Try to run ``command`` on ``node``.

    Never raises: a command that cannot be started or exits non-zero means
    the capability is absent.
    """
    try:
        exit_code = node.require_channel().launch(command, quiet=True)
    except Exception as ex:
        LOGGER.info(f"'{command[0]}' is not available on the node: '{node.display_name}'")
        LOGGER.debug(f"'{' '.join(command)}' command failed: {ex!r}")
        return False

    if exit_code != 0:
        LOGGER.info(
            f"'{' '.join(command)}' exited with code {exit_code} on node '{node.display_name}'"
        )
        return False
    return True


def is_npm_available(node: Node) -> bool:
    return is_command_available(node, NPM_VERSION_COMMAND)
