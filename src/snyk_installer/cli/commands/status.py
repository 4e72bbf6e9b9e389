"""Status command implementation."""

from __future__ import annotations

from argparse import Namespace
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from snyk_installer.bootstrap.freshness import is_up_to_date, read_timestamp
from snyk_installer.bootstrap.paths import InstallerPaths
from snyk_installer.bootstrap.platform import detect_platform
from snyk_installer.cli.commands import Command
from snyk_installer.cli.exit_codes import EXIT_SUCCESS
from snyk_installer.core.errors import PlatformUndetectable, ToolDetectionException
from snyk_installer.remote.node import Node

if TYPE_CHECKING:
    from snyk_installer.config.models import InstallerConfig


def _format_timestamp(timestamp: Optional[int]) -> str:
    if timestamp is None:
        return "never"
    if timestamp == 0:
        return "unknown (corrupt marker)"
    moment = datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)
    return moment.strftime("%Y-%m-%d %H:%M:%S UTC")


class StatusCommand(Command):
    """Shows platform information and the state of each installation."""

    def __init__(self, version: str, paths: Optional[InstallerPaths] = None):
        """Initialize StatusCommand.

        Args:
            version: Current snyk-installer version string.
            paths: Installer paths (default: from the installer home).
        """
        self._version = version
        self._paths = paths

    @property
    def name(self) -> str:
        return "status"

    def execute(self, args: Namespace, config: "InstallerConfig") -> int:
        """Execute the status command.

        Returns:
            Exit code (always 0 for status).
        """
        paths = self._paths or InstallerPaths.default()
        node = Node.local(str(paths.home))

        print(f"snyk-installer version: {self._version}")
        try:
            platform = detect_platform()
            print(f"Platform: {platform.os_family.value}-{platform.arch}")
        except PlatformUndetectable as e:
            print(f"Platform: unsupported ({e.identifier})")
        print(f"Installer home: {paths.home}")
        print(f"Download base URL: {config.download_base_url}")
        print()

        selected = getattr(args, "name", None)
        print("Installations:")
        for installation_config in config.installations:
            if selected and installation_config.name != selected:
                continue
            installation = installation_config.build(config.download_service)
            target = installation.preferred_location(node)
            hours = installation_config.update_policy_interval_hours
            fresh = is_up_to_date(target, hours)

            try:
                last_install = _format_timestamp(read_timestamp(target))
            except OSError:
                last_install = "unreadable"

            try:
                executable = installation.get_snyk_executable(node).remote
            except ToolDetectionException:
                executable = "not installed"

            version = installation_config.version or "latest"
            print(f"  {installation_config.name}: snyk {version}")
            print(f"    target: {target}")
            print(f"    last install: {last_install}")
            print(f"    update policy: every {hours}h ({'up-to-date' if fresh else 'stale'})")
            print(f"    executable: {executable}")

        return EXIT_SUCCESS
