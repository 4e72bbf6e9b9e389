"""Installer keeping the Snyk CLI on a node up to date.

Two strategies, chosen per attempt:
- npm available on the node: ``npm install --prefix <target> snyk@<v> snyk-to-html``
- otherwise: download the platform binaries of snyk and snyk-to-html

Failure handling differs between them. A failing npm install is reported
and skipped until the next run, a failing binary install raises.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from snyk_installer.bootstrap.download import Downloader, DownloadService, normalize_version
from snyk_installer.bootstrap.freshness import (
    is_up_to_date,
    write_installed_from,
    write_timestamp,
)
from snyk_installer.bootstrap.probe import is_npm_available
from snyk_installer.core.errors import ToolDetectionException
from snyk_installer.core.listener import TaskListener
from snyk_installer.core.logging import get_logger
from snyk_installer.remote.filepath import RemotePath
from snyk_installer.remote.node import Node, node_context

if TYPE_CHECKING:
    from snyk_installer.tools.installation import SnykInstallation

LOGGER = get_logger(__name__)

DEFAULT_UPDATE_POLICY_HOURS = 24

NPM_PACKAGE = "snyk"
NPM_REPORT_PACKAGE = "snyk-to-html"


class SnykInstaller:
    """Installs the Snyk CLI from snyk.io or the npm registry."""

    def __init__(
        self,
        version: Optional[str] = "",
        update_policy_interval_hours: Optional[int] = DEFAULT_UPDATE_POLICY_HOURS,
        label: Optional[str] = None,
        download_service: Optional[DownloadService] = None,
    ) -> None:
        """Initialize SnykInstaller.

        Args:
            version: Snyk CLI version; empty means latest.
            update_policy_interval_hours: Hours an installation is reused
                before it is refreshed.
            label: Optional node label this installer is restricted to.
            download_service: URL resolver for the binary strategy.
        """
        self.version = version or ""
        self.update_policy_interval_hours = (
            DEFAULT_UPDATE_POLICY_HOURS
            if update_policy_interval_hours is None
            else update_policy_interval_hours
        )
        self.label = label
        self.download_service = download_service or DownloadService()

    @property
    def display_version(self) -> str:
        return normalize_version(self.version)

    def preferred_location(self, tool: "SnykInstallation", node: Node) -> RemotePath:
        return tool.preferred_location(node)

    def perform_installation(
        self, tool: "SnykInstallation", node: Node, log: TaskListener
    ) -> RemotePath:
        """Make sure ``tool`` is installed and fresh on ``node``.

        Returns:
            The installation directory. It is also returned when an npm
            install exits non-zero; the next run retries in that case.

        Raises:
            ToolDetectionException: If the binary install fails, npm cannot be
                launched, the node is offline or its platform is unsupported.
        """
        try:
            expected = self.preferred_location(tool, node)
        except ToolDetectionException as ex:
            log.println(f"Snyk Security tool could not be installed: {ex}")
            raise

        if is_up_to_date(expected, self.update_policy_interval_hours):
            log.println("Snyk installation is UP-TO-DATE")
            return expected

        log.println(f"Installing Snyk Security tool (version '{self.display_version}')")
        if is_npm_available(node):
            return self._install_as_npm_package(expected, node, log)
        return self._install_as_single_binary(tool, expected, node, log)

    def npm_install_command(self, expected: RemotePath) -> List[str]:
        return [
            "npm",
            "install",
            "--prefix",
            expected.remote,
            f"{NPM_PACKAGE}@{self.display_version}",
            NPM_REPORT_PACKAGE,
        ]

    def _install_as_npm_package(
        self, expected: RemotePath, node: Node, log: TaskListener
    ) -> RemotePath:
        LOGGER.info(
            f"Install Snyk version '{self.display_version}' as NPM package "
            f"on node '{node.display_name}'"
        )
        log.println("Installing Snyk via npm")

        try:
            exit_code = node.require_channel().launch(
                self.npm_install_command(expected), quiet=True, listener=log
            )
            if exit_code != 0:
                log.println(f"Snyk installation was not successful. Exit code: {exit_code}")
                return expected
            write_timestamp(expected)
        except Exception as ex:
            log.println(f"Snyk Security tool could not be installed: {ex}")
            LOGGER.error(f"Could not install Snyk as NPM package: {ex}")
            raise ToolDetectionException("Could not install Snyk CLI with npm") from ex

        return expected

    def _install_as_single_binary(
        self,
        tool: "SnykInstallation",
        expected: RemotePath,
        node: Node,
        log: TaskListener,
    ) -> RemotePath:
        LOGGER.info(
            f"Install Snyk version '{self.display_version}' as single binary "
            f"on node '{node.display_name}'"
        )
        log.println("Installing Snyk as single binary")

        try:
            channel = node.require_channel()
            with node_context(node):
                platform = tool.get_platform()
        except ToolDetectionException as ex:
            log.println(f"Snyk Security tool could not be installed: {ex}")
            raise

        try:
            snyk_url = self.download_service.get_download_url_for_snyk(self.version, platform)
            snyk_to_html_url = self.download_service.get_download_url_for_snyk_to_html(platform)
            expected.mkdirs()
            channel.call(
                Downloader(snyk_url, expected.child(platform.snyk_wrapper_file_name).remote)
            )
            channel.call(
                Downloader(
                    snyk_to_html_url,
                    expected.child(platform.snyk_to_html_wrapper_file_name).remote,
                )
            )
            write_installed_from(expected, snyk_url)
            write_timestamp(expected)
        except Exception as ex:
            log.println(f"Snyk Security tool could not be installed: {ex}")
            LOGGER.error(f"Could not install Snyk as single binary: {ex}")
            raise ToolDetectionException("Could not install Snyk CLI from binary") from ex

        return expected
