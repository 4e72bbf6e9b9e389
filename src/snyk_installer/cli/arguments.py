"""Argument parser construction for the snyk-installer CLI.

Subcommands:
- snyk-installer install  - Install or refresh the Snyk CLI
- snyk-installer status   - Show platform and installation status
- snyk-installer validate - Check a configuration file
"""

from __future__ import annotations

import argparse
from pathlib import Path


def _add_global_options(parser: argparse.ArgumentParser) -> None:
    """Add global options available to all commands."""
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show snyk-installer version and exit.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (info-level) logging.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Reduce logging output to errors only.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write a debug log to this file.",
    )


def _add_config_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a config file (default: .snyk-installer.yml in the current directory).",
    )
    parser.add_argument(
        "--name",
        help="Installation to use (default: the first configured one).",
    )


def _build_install_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'install' subcommand parser."""
    install_parser = subparsers.add_parser(
        "install",
        help="Install or refresh the Snyk CLI.",
        description=(
            "Install the Snyk CLI unless the existing installation is still "
            "within its update policy. Uses npm when available, otherwise "
            "downloads the platform binaries. Prints the installation directory."
        ),
    )
    _add_config_options(install_parser)
    install_parser.add_argument(
        "--snyk-version",
        dest="snyk_version",
        help="Snyk CLI version to install (default: latest).",
    )
    install_parser.add_argument(
        "--update-policy",
        dest="update_policy",
        type=int,
        metavar="HOURS",
        help="Hours before an installation is refreshed (default: 24).",
    )
    install_parser.add_argument(
        "--home",
        help="Installation directory (default: <installer home>/tools/snyk/<name>).",
    )


def _build_validate_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'validate' subcommand parser."""
    validate_parser = subparsers.add_parser(
        "validate",
        help="Check a configuration file for errors.",
    )
    validate_parser.add_argument(
        "--config",
        type=Path,
        help="Config file to check (default: .snyk-installer.yml in the current directory).",
    )


def _build_status_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'status' subcommand parser."""
    status_parser = subparsers.add_parser(
        "status",
        help="Show platform and installation status.",
    )
    _add_config_options(status_parser)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="snyk-installer",
        description="snyk-installer: keep the Snyk CLI installed and up to date.",
    )
    _add_global_options(parser)

    subparsers = parser.add_subparsers(dest="command")
    _build_install_parser(subparsers)
    _build_status_parser(subparsers)
    _build_validate_parser(subparsers)

    return parser
