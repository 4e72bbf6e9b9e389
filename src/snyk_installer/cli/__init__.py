"""Command-line interface for snyk-installer."""

from __future__ import annotations

from typing import Iterable, Optional

from snyk_installer.cli.runner import CLIRunner


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Entry point of the ``snyk-installer`` console script."""
    return CLIRunner().run(argv)


__all__ = ["main", "CLIRunner"]
