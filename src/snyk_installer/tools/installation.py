"""The Snyk tool installation configuration entity."""

from __future__ import annotations

import dataclasses
import re
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Mapping, Optional

from snyk_installer.bootstrap.platform import GetPlatform, PlatformDescriptor, detect_platform
from snyk_installer.core.env import expand_env_vars
from snyk_installer.core.errors import ToolDetectionException
from snyk_installer.core.listener import TaskListener
from snyk_installer.core.logging import get_logger
from snyk_installer.remote.filepath import RemotePath
from snyk_installer.remote.node import Node, current_node, node_context

if TYPE_CHECKING:
    from snyk_installer.tools.installer import SnykInstaller

LOGGER = get_logger(__name__)

# Default targets live under <node root>/tools/snyk/<name>
TOOLS_DIR = "tools"
TOOL_DIR = "snyk"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


def sanitize_name(name: str) -> str:
    """Make an installation name safe to use as a directory name."""
    return _UNSAFE_CHARS.sub("_", name)


class PlatformCache:
    """Holds the platform of an installation once it has been detected.

    The platform is resolved at most once; ``reset`` is the only way to
    force a new detection.
    """

    def __init__(self, platform: Optional[PlatformDescriptor] = None) -> None:
        self._platform = platform
        self._lock = threading.Lock()

    @property
    def resolved(self) -> bool:
        return self._platform is not None

    def get(self, resolver: Callable[[], PlatformDescriptor]) -> PlatformDescriptor:
        with self._lock:
            if self._platform is None:
                self._platform = resolver()
            return self._platform

    def reset(self) -> None:
        with self._lock:
            self._platform = None


@dataclass
class SnykInstallation:
    """A named Snyk installation.

    Attributes:
        name: Installation name, also used for the default target directory.
        home: Installation directory; empty selects the default location.
        installer: Installer run by ``translate_for``, if any.
        platform_cache: Platform of the installation, shared by the copies
            returned from ``for_node``/``for_environment``.
    """

    name: str
    home: str = ""
    installer: Optional["SnykInstaller"] = None
    platform_cache: PlatformCache = field(
        default_factory=PlatformCache, compare=False, repr=False
    )

    def get_platform(self) -> PlatformDescriptor:
        """Return the platform of this installation, detecting it once.

        Detection runs on the node bound to the current execution context.
        Without one, the platform of the local process is used.

        Raises:
            NodeOffline: If the context node has no channel.
            PlatformUndetectable: If the platform is not supported.
        """
        node = current_node()
        if node is None:
            # pipeline or controller invocation: local platform only
            return self.platform_cache.get(detect_platform)

        channel = node.require_channel()
        return self.platform_cache.get(lambda: channel.call(GetPlatform(node.display_name)))

    def preferred_location(self, node: Node) -> RemotePath:
        """Directory on ``node`` where this installation lives."""
        if self.home.strip():
            return node.create_path(self.home.strip())
        return node.root.child(TOOLS_DIR).child(TOOL_DIR).child(sanitize_name(self.name))

    def for_environment(self, env: Mapping[str, str]) -> "SnykInstallation":
        """Copy with ``${VAR}`` references in ``home`` expanded from ``env``."""
        return dataclasses.replace(self, home=expand_env_vars(self.home, env))

    def for_node(self, node: Node) -> "SnykInstallation":
        """Copy whose ``home`` is the installation directory on ``node``."""
        return dataclasses.replace(self, home=self.preferred_location(node).remote)

    def translate_for(self, node: Node, log: TaskListener) -> "SnykInstallation":
        """Run the installer on ``node`` and return the installed copy.

        Raises:
            ToolDetectionException: If the installation fails.
        """
        if self.installer is None:
            return self.for_node(node)
        installed = self.installer.perform_installation(self, node, log)
        return dataclasses.replace(self, home=installed.remote)

    def get_snyk_executable(self, node: Node) -> RemotePath:
        """Locate the snyk executable of this installation on ``node``."""
        return self._find_executable(node, "snyk", "snyk_wrapper_file_name")

    def get_report_executable(self, node: Node) -> RemotePath:
        """Locate the snyk-to-html executable of this installation on ``node``."""
        return self._find_executable(node, "snyk-to-html", "snyk_to_html_wrapper_file_name")

    def _find_executable(self, node: Node, tool: str, file_name_attr: str) -> RemotePath:
        target = self.preferred_location(node)
        with node_context(node):
            platform = self.get_platform()

        npm_name = f"{tool}.cmd" if platform.is_windows else tool
        npm_bin = target.child("node_modules").child(".bin").child(npm_name)
        if npm_bin.is_file():
            return npm_bin

        binary = target.child(getattr(platform, file_name_attr))
        if binary.is_file():
            return binary

        raise ToolDetectionException(f"Could not find {tool} executable in {target}")
