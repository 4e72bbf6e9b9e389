"""CLI runner orchestration.

This module handles command dispatch and execution for the snyk-installer CLI.
"""

from __future__ import annotations

import sys
from argparse import Namespace
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from snyk_installer.bootstrap.paths import InstallerPaths
from snyk_installer.cli.arguments import build_parser
from snyk_installer.cli.commands.install import InstallCommand
from snyk_installer.cli.commands.status import StatusCommand
from snyk_installer.cli.commands.validate import ValidateCommand
from snyk_installer.cli.exit_codes import EXIT_INVALID_USAGE, EXIT_SUCCESS
from snyk_installer.config.loader import ConfigError, load_config
from snyk_installer.core.listener import TaskListener
from snyk_installer.core.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)


def get_version() -> str:
    """Get snyk-installer version from package metadata or fallback."""
    try:
        return version("snyk-installer")
    except PackageNotFoundError:
        # Fallback for editable installs that have not yet built metadata.
        from snyk_installer import __version__
        return __version__


class CLIRunner:
    """Orchestrates CLI execution with subcommand dispatch."""

    def __init__(
        self,
        paths: Optional[InstallerPaths] = None,
        listener: Optional[TaskListener] = None,
    ) -> None:
        self.parser = build_parser()
        self._version = get_version()
        self._paths = paths
        self.install_cmd = InstallCommand(paths=paths, listener=listener)
        self.status_cmd = StatusCommand(version=self._version, paths=paths)
        self.validate_cmd = ValidateCommand()

    def run(self, argv: Optional[Iterable[str]] = None) -> int:
        """Run the CLI.

        Args:
            argv: Command-line arguments (defaults to sys.argv).

        Returns:
            Exit code.
        """
        args = self.parser.parse_args(list(argv) if argv is not None else None)

        configure_logging(
            debug=args.debug,
            verbose=args.verbose,
            quiet=args.quiet,
            log_file=args.log_file,
        )

        if args.version:
            print(self._version)
            return EXIT_SUCCESS

        command = getattr(args, "command", None)
        if command is None:
            self.parser.print_help()
            return EXIT_SUCCESS

        # validate reports config problems itself
        if command == "validate":
            return self.validate_cmd.execute(args)

        try:
            config = load_config(
                Path.cwd(),
                cli_config_path=args.config,
                cli_overrides=self._overrides(args),
                paths=self._paths,
            )
        except ConfigError as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_INVALID_USAGE

        if command == "install":
            return self.install_cmd.execute(args, config)
        elif command == "status":
            return self.status_cmd.execute(args, config)

        self.parser.print_help()
        return EXIT_INVALID_USAGE

    @staticmethod
    def _overrides(args: Namespace) -> Optional[Dict[str, Any]]:
        overrides = {
            "name": getattr(args, "name", None),
            "home": getattr(args, "home", None),
            "version": getattr(args, "snyk_version", None),
            "update_policy_interval_hours": getattr(args, "update_policy", None),
        }
        if all(value is None for key, value in overrides.items() if key != "name"):
            return None
        return overrides
