"""Tests for SnykInstaller."""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Callable, List
from unittest.mock import patch

import pytest

from snyk_installer.bootstrap.download import DownloadService
from snyk_installer.bootstrap.freshness import (
    INSTALLED_FROM,
    TIMESTAMP_FILE,
    now_millis,
)
from snyk_installer.bootstrap.platform import PlatformDescriptor
from snyk_installer.core.errors import (
    NodeOffline,
    PlatformUndetectable,
    ToolDetectionException,
)
from snyk_installer.core.listener import CallbackTaskListener
from snyk_installer.remote.node import Node
from snyk_installer.tools.installation import PlatformCache, SnykInstallation
from snyk_installer.tools.installer import DEFAULT_UPDATE_POLICY_HOURS, SnykInstaller


@pytest.fixture
def downloads():
    """Patch network downloads; records (url, dest) pairs."""
    calls: List[tuple] = []

    def fake_download(url: str, dest_path: Path, timeout=None) -> None:
        calls.append((url, dest_path))
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        dest_path.write_bytes(b"binary:" + url.encode())

    with patch("snyk_installer.bootstrap.download.download_file", side_effect=fake_download):
        yield calls


def _installation(
    installer: SnykInstaller, platform: PlatformDescriptor, name: str = "snyk"
) -> SnykInstallation:
    return SnykInstallation(
        name=name, installer=installer, platform_cache=PlatformCache(platform)
    )


def _target(node: Node, name: str = "snyk") -> Path:
    return Path(node.root_path) / "tools" / "snyk" / name


class TestSnykInstallerDefaults:
    def test_defaults(self) -> None:
        installer = SnykInstaller()
        assert installer.version == ""
        assert installer.display_version == "latest"
        assert installer.update_policy_interval_hours == DEFAULT_UPDATE_POLICY_HOURS
        assert isinstance(installer.download_service, DownloadService)

    def test_none_policy_uses_default(self) -> None:
        assert SnykInstaller(update_policy_interval_hours=None).update_policy_interval_hours == 24

    def test_npm_install_command(self, make_node: Callable[..., Node]) -> None:
        node = make_node()
        installer = SnykInstaller(version="1.2.3")
        target = node.create_path("tools/snyk/snyk")
        assert installer.npm_install_command(target) == [
            "npm", "install", "--prefix", target.remote, "snyk@1.2.3", "snyk-to-html",
        ]

    def test_npm_install_command_latest(self, make_node: Callable[..., Node]) -> None:
        target = make_node().create_path("t")
        assert SnykInstaller().npm_install_command(target)[4] == "snyk@latest"


class TestUpToDate:
    """Fast exit when the installation is fresh."""

    def test_recent_marker_skips_all_work(
        self, make_node, make_executor, linux_amd64, downloads, listener
    ) -> None:
        executor = make_executor(npm_available=True)
        node = make_node(executor)
        target = _target(node)
        target.mkdir(parents=True)
        (target / TIMESTAMP_FILE).write_text(str(now_millis() - 1))

        installer = SnykInstaller(version="1.2.3", update_policy_interval_hours=1)
        result = installer.perform_installation(_installation(installer, linux_amd64), node, listener)

        assert result.remote == str(target)
        assert executor.launches == []
        assert downloads == []
        assert listener.lines == ["Snyk installation is UP-TO-DATE"]

    def test_second_call_is_idempotent(
        self, make_node, make_executor, linux_amd64, downloads
    ) -> None:
        executor = make_executor(npm_available=False)
        node = make_node(executor)
        installer = SnykInstaller(version="1.2.3", update_policy_interval_hours=24)
        tool = _installation(installer, linux_amd64)

        first = installer.perform_installation(tool, node, CallbackTaskListener())
        launches_after_first = list(executor.launches)
        downloads_after_first = list(downloads)

        log = CallbackTaskListener()
        second = installer.perform_installation(tool, node, log)

        assert first == second
        assert executor.launches == launches_after_first
        assert downloads == downloads_after_first
        assert log.lines == ["Snyk installation is UP-TO-DATE"]

    def test_stale_marker_reinstalls(
        self, make_node, make_executor, linux_amd64, downloads, listener
    ) -> None:
        node = make_node(make_executor(npm_available=False))
        target = _target(node)
        target.mkdir(parents=True)
        (target / TIMESTAMP_FILE).write_text(str(now_millis() - 2 * 3_600_000))

        installer = SnykInstaller(update_policy_interval_hours=1)
        installer.perform_installation(_installation(installer, linux_amd64), node, listener)

        assert len(downloads) == 2

    def test_corrupt_marker_reinstalls(
        self, make_node, make_executor, linux_amd64, downloads, listener
    ) -> None:
        node = make_node(make_executor(npm_available=False))
        target = _target(node)
        target.mkdir(parents=True)
        (target / TIMESTAMP_FILE).write_text("garbage")

        installer = SnykInstaller()
        installer.perform_installation(_installation(installer, linux_amd64), node, listener)

        assert len(downloads) == 2
        assert int((target / TIMESTAMP_FILE).read_text()) > 0

    def test_undecodable_marker_reinstalls(
        self, make_node, make_executor, linux_amd64, downloads, listener
    ) -> None:
        node = make_node(make_executor(npm_available=False))
        target = _target(node)
        target.mkdir(parents=True)
        (target / TIMESTAMP_FILE).write_bytes(b"\xff\xfe\x00garbage")

        installer = SnykInstaller()
        installer.perform_installation(_installation(installer, linux_amd64), node, listener)

        assert len(downloads) == 2
        assert int((target / TIMESTAMP_FILE).read_text()) > 0


class TestStrategySelection:
    """npm and binary installs are mutually exclusive."""

    def test_npm_available_uses_npm_only(
        self, make_node, make_executor, linux_amd64, downloads, listener
    ) -> None:
        executor = make_executor(npm_available=True)
        node = make_node(executor)
        installer = SnykInstaller(version="1.2.3")

        installer.perform_installation(_installation(installer, linux_amd64), node, listener)

        assert executor.launches == [
            ["npm", "--version"],
            ["npm", "install", "--prefix", str(_target(node)), "snyk@1.2.3", "snyk-to-html"],
        ]
        assert downloads == []

    def test_npm_missing_uses_binary_only(
        self, make_node, make_executor, linux_amd64, downloads, listener
    ) -> None:
        executor = make_executor(npm_available=False)
        node = make_node(executor)
        installer = SnykInstaller(version="1.2.3")

        installer.perform_installation(_installation(installer, linux_amd64), node, listener)

        assert executor.launches == [["npm", "--version"]]
        assert len(downloads) == 2


class TestNpmInstall:
    """npm strategy."""

    def test_success_writes_timestamp(
        self, make_node, make_executor, linux_amd64, listener
    ) -> None:
        node = make_node(make_executor(npm_available=True))
        installer = SnykInstaller()
        before = now_millis()

        result = installer.perform_installation(_installation(installer, linux_amd64), node, listener)

        target = _target(node)
        assert result.remote == str(target)
        assert before <= int((target / TIMESTAMP_FILE).read_text()) <= now_millis()
        assert not (target / INSTALLED_FROM).exists()
        assert (target / "node_modules" / ".bin" / "snyk").exists()

    def test_non_zero_exit_is_soft_failure(
        self, make_node, make_executor, linux_amd64, listener
    ) -> None:
        node = make_node(make_executor(npm_available=True, npm_install_exit_code=1))
        target = _target(node)
        target.mkdir(parents=True)
        old_marker = "1000"
        (target / TIMESTAMP_FILE).write_text(old_marker)

        installer = SnykInstaller()
        result = installer.perform_installation(_installation(installer, linux_amd64), node, listener)

        assert result.remote == str(target)
        assert (target / TIMESTAMP_FILE).read_text() == old_marker
        assert "Snyk installation was not successful. Exit code: 1" in listener.lines

    def test_non_zero_exit_without_marker_writes_none(
        self, make_node, make_executor, linux_amd64, listener
    ) -> None:
        node = make_node(make_executor(npm_available=True, npm_install_exit_code=254))
        installer = SnykInstaller()

        installer.perform_installation(_installation(installer, linux_amd64), node, listener)

        assert not (_target(node) / TIMESTAMP_FILE).exists()

    def test_launch_failure_is_hard_failure(
        self, make_node, make_executor, linux_amd64, listener
    ) -> None:
        error = OSError("fork failed")
        node = make_node(make_executor(npm_available=True, npm_install_error=error))
        installer = SnykInstaller()

        with pytest.raises(ToolDetectionException, match="with npm") as exc_info:
            installer.perform_installation(_installation(installer, linux_amd64), node, listener)

        assert exc_info.value.__cause__ is error
        assert any("could not be installed: fork failed" in line for line in listener.lines)
        assert not (_target(node) / TIMESTAMP_FILE).exists()


class TestBinaryInstall:
    """Binary download strategy."""

    def test_end_to_end_linux_amd64(
        self, make_node, make_executor, linux_amd64, downloads, listener
    ) -> None:
        node = make_node(make_executor(npm_available=False))
        installer = SnykInstaller(version="1.2.3", update_policy_interval_hours=24)
        before = now_millis()

        result = installer.perform_installation(_installation(installer, linux_amd64), node, listener)

        target = _target(node)
        assert result.remote == str(target)
        assert [(url, dest.name) for url, dest in downloads] == [
            ("https://static.snyk.io/cli/v1.2.3/snyk-linux", "snyk-linux"),
            ("https://static.snyk.io/snyk-to-html/latest/snyk-to-html-linux", "snyk-to-html-linux"),
        ]
        assert (target / INSTALLED_FROM).read_text(encoding="utf-8") == (
            "https://static.snyk.io/cli/v1.2.3/snyk-linux"
        )
        timestamp = int((target / TIMESTAMP_FILE).read_text())
        assert abs(timestamp - before) < 1000
        if os.name != "nt":
            assert (target / "snyk-linux").stat().st_mode & stat.S_IXUSR
        assert listener.lines[0] == "Installing Snyk Security tool (version '1.2.3')"

    def test_uses_configured_download_service(
        self, make_node, make_executor, linux_amd64, downloads, listener
    ) -> None:
        node = make_node(make_executor())
        installer = SnykInstaller(
            download_service=DownloadService(base_url="https://mirror.example.com")
        )

        installer.perform_installation(_installation(installer, linux_amd64), node, listener)

        assert downloads[0][0] == "https://mirror.example.com/cli/latest/snyk-linux"

    def test_download_failure_is_hard_failure(
        self, make_node, make_executor, linux_amd64, listener
    ) -> None:
        node = make_node(make_executor())
        installer = SnykInstaller()
        error = TimeoutError("read timed out")

        with patch("snyk_installer.bootstrap.download.download_file", side_effect=error):
            with pytest.raises(ToolDetectionException, match="from binary") as exc_info:
                installer.perform_installation(
                    _installation(installer, linux_amd64), node, listener
                )

        assert exc_info.value.__cause__ is error
        target = _target(node)
        assert not (target / TIMESTAMP_FILE).exists()
        assert not (target / INSTALLED_FROM).exists()

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_chmod_failure_leaves_no_timestamp(
        self, make_node, make_executor, linux_amd64, downloads, listener
    ) -> None:
        node = make_node(make_executor())
        installer = SnykInstaller()

        with patch.object(Path, "chmod", side_effect=PermissionError("read-only fs")):
            with pytest.raises(ToolDetectionException):
                installer.perform_installation(
                    _installation(installer, linux_amd64), node, listener
                )

        target = _target(node)
        assert (target / "snyk-linux").exists()
        assert not (target / TIMESTAMP_FILE).exists()

    def test_offline_node(self, tmp_path: Path, linux_amd64, listener) -> None:
        node = Node(name="agent-9", root_path=str(tmp_path))
        installer = SnykInstaller()

        with pytest.raises(NodeOffline):
            installer.perform_installation(_installation(installer, linux_amd64), node, listener)

        assert listener.lines == [
            "Snyk Security tool could not be installed: Node 'agent-9' is offline"
        ]

    def test_unsupported_platform_is_logged(
        self, make_node, make_executor, downloads, listener
    ) -> None:
        node = make_node(make_executor())
        installer = SnykInstaller()
        tool = SnykInstallation(name="snyk", installer=installer)

        with patch("platform.system", return_value="SunOS"):
            with patch("platform.machine", return_value="sparc"):
                with pytest.raises(PlatformUndetectable):
                    installer.perform_installation(tool, node, listener)

        assert downloads == []
        assert listener.lines[-1] == (
            "Snyk Security tool could not be installed: "
            "Unsupported platform: SunOS/sparc (on node agent-1)"
        )

    def test_platform_detected_on_node_once(
        self, make_node, make_executor, downloads, listener
    ) -> None:
        executor = make_executor()
        node = make_node(executor)
        installer = SnykInstaller()
        tool = SnykInstallation(name="snyk", installer=installer)

        with patch("platform.system", return_value="Darwin"):
            with patch("platform.machine", return_value="arm64"):
                installer.perform_installation(tool, node, listener)
                (_target(node) / TIMESTAMP_FILE).unlink()
                installer.perform_installation(tool, node, listener)

        platform_units = [u for u in executor.units if type(u).__name__ == "GetPlatform"]
        assert len(platform_units) == 1
        assert downloads[0][1].name == "snyk-macos-arm64"
