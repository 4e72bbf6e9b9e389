"""Validate command implementation.

Checks a snyk-installer configuration file and reports issues without
installing anything.
"""

from __future__ import annotations

from argparse import Namespace
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from snyk_installer.cli.commands import Command
from snyk_installer.cli.exit_codes import EXIT_INVALID_USAGE, EXIT_ISSUES_FOUND, EXIT_SUCCESS
from snyk_installer.config.loader import PROJECT_CONFIG_NAMES, find_project_config
from snyk_installer.config.validation import (
    ConfigValidationIssue,
    ValidationSeverity,
    validate_config_file,
)

if TYPE_CHECKING:
    from snyk_installer.config.models import InstallerConfig


class ValidateCommand(Command):
    """Validates a snyk-installer configuration file."""

    @property
    def name(self) -> str:
        return "validate"

    def execute(self, args: Namespace, config: Optional["InstallerConfig"] = None) -> int:
        """Validate the file given with --config, or the project config.

        Returns:
            Exit code: 0 = valid, 1 = has errors, 3 = no file to validate.
        """
        config_path: Optional[Path] = getattr(args, "config", None)
        if config_path is None:
            config_path = find_project_config(Path.cwd())

        if config_path is None:
            print("No configuration file found.")
            print(f"Looked for: {', '.join(PROJECT_CONFIG_NAMES)}")
            return EXIT_INVALID_USAGE

        if not config_path.exists():
            print(f"Configuration file not found: {config_path}")
            return EXIT_INVALID_USAGE

        print(f"Validating {config_path}...")
        is_valid, issues = validate_config_file(config_path)

        if not issues:
            print("Configuration is valid.")
            return EXIT_SUCCESS

        errors = [i for i in issues if i.severity == ValidationSeverity.ERROR]
        warnings = [i for i in issues if i.severity == ValidationSeverity.WARNING]

        if errors:
            print(f"\nErrors ({len(errors)}):")
            for issue in errors:
                self._print_issue(issue)

        if warnings:
            print(f"\nWarnings ({len(warnings)}):")
            for issue in warnings:
                self._print_issue(issue)

        if not is_valid:
            print(f"\nConfiguration is invalid ({len(errors)} error(s)).")
            return EXIT_ISSUES_FOUND

        print(f"\nConfiguration is valid with {len(warnings)} warning(s).")
        return EXIT_SUCCESS

    def _print_issue(self, issue: ConfigValidationIssue) -> None:
        location = f" [{issue.key}]" if issue.key else ""
        print(f"  - {issue.message}{location}")
        if issue.suggestion:
            print(f"    Did you mean '{issue.suggestion}'?")
