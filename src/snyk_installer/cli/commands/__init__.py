"""CLI commands package.

This module provides the base Command class and exports all command implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from argparse import Namespace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from snyk_installer.config.models import InstallerConfig


class Command(ABC):
    """Base class for CLI commands."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Command identifier."""

    @abstractmethod
    def execute(self, args: Namespace, config: "InstallerConfig") -> int:
        """Execute the command.

        Args:
            args: Parsed command-line arguments.
            config: Loaded snyk-installer configuration.

        Returns:
            Exit code (0 for success, non-zero for error).
        """


# ruff: noqa: E402
from snyk_installer.cli.commands.install import InstallCommand
from snyk_installer.cli.commands.status import StatusCommand
from snyk_installer.cli.commands.validate import ValidateCommand

__all__ = ["Command", "InstallCommand", "StatusCommand", "ValidateCommand"]
