"""Install command implementation."""

from __future__ import annotations

import sys
from argparse import Namespace
from typing import TYPE_CHECKING, Optional

from snyk_installer.bootstrap.paths import InstallerPaths
from snyk_installer.cli.commands import Command
from snyk_installer.cli.exit_codes import (
    EXIT_INSTALL_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SUCCESS,
)
from snyk_installer.core.errors import ToolDetectionException
from snyk_installer.core.listener import ConsoleTaskListener, TaskListener
from snyk_installer.core.logging import get_logger
from snyk_installer.remote.node import Node

if TYPE_CHECKING:
    from snyk_installer.config.models import InstallerConfig

LOGGER = get_logger(__name__)


class InstallCommand(Command):
    """Installs or refreshes a configured Snyk installation on the local node."""

    def __init__(
        self,
        paths: Optional[InstallerPaths] = None,
        listener: Optional[TaskListener] = None,
    ) -> None:
        self._paths = paths
        self._listener = listener

    @property
    def name(self) -> str:
        return "install"

    def execute(self, args: Namespace, config: "InstallerConfig") -> int:
        installation_config = config.get_installation(getattr(args, "name", None))
        if installation_config is None:
            print(f"Error: no installation named '{args.name}' is configured", file=sys.stderr)
            return EXIT_INVALID_USAGE

        paths = self._paths or InstallerPaths.default()
        node = Node.local(str(paths.home))
        listener = self._listener or ConsoleTaskListener()
        installation = installation_config.build(config.download_service)

        try:
            installed = installation.translate_for(node, listener)
        except ToolDetectionException as e:
            LOGGER.debug("Installation failed", exc_info=True)
            cause = f" ({e.__cause__})" if e.__cause__ else ""
            print(f"Error: {e}{cause}", file=sys.stderr)
            return EXIT_INSTALL_FAILURE

        print(installed.home)
        return EXIT_SUCCESS
