"""Platform detection for Snyk CLI downloads.

Detects OS and architecture of the running process and maps them to the
file names Snyk publishes its binaries under.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from snyk_installer.core.errors import PlatformUndetectable


class OsFamily(str, Enum):
    """Operating systems Snyk ships binaries for."""

    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"


# platform.system() values (lowercase)
_OS_MAP: Dict[str, OsFamily] = {
    "linux": OsFamily.LINUX,
    "darwin": OsFamily.MACOS,
    "windows": OsFamily.WINDOWS,
}

# Architecture normalization map
_ARCH_MAP: Dict[str, str] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "arm64": "arm64",
    "aarch64": "arm64",
}

# (os, arch) -> (snyk, snyk-to-html)
_FILE_NAMES: Dict[Tuple[OsFamily, str], Tuple[str, str]] = {
    (OsFamily.LINUX, "amd64"): ("snyk-linux", "snyk-to-html-linux"),
    (OsFamily.LINUX, "arm64"): ("snyk-linux-arm64", "snyk-to-html-linux"),
    (OsFamily.MACOS, "amd64"): ("snyk-macos", "snyk-to-html-macos"),
    (OsFamily.MACOS, "arm64"): ("snyk-macos-arm64", "snyk-to-html-macos"),
    (OsFamily.WINDOWS, "amd64"): ("snyk-win.exe", "snyk-to-html-win.exe"),
}


def normalize_arch(machine: str) -> Optional[str]:
    """Normalize architecture string to standard form.

    Args:
        machine: Raw architecture string from platform.machine()

    Returns:
        Normalized architecture string or None if unknown.
    """
    return _ARCH_MAP.get(machine.lower())


def normalize_os(system: str) -> Optional[OsFamily]:
    """Map a platform.system() value to an OsFamily, or None if unknown."""
    system = system.lower()
    if system.startswith(("cygwin", "msys", "mingw")):
        return OsFamily.WINDOWS
    return _OS_MAP.get(system)


@dataclass(frozen=True)
class PlatformDescriptor:
    """A supported platform and the Snyk file names built for it.

    Attributes:
        os_family: Operating system family.
        arch: CPU architecture (amd64, arm64).
        snyk_wrapper_file_name: File name of the snyk binary.
        snyk_to_html_wrapper_file_name: File name of the snyk-to-html binary.
    """

    os_family: OsFamily
    arch: str
    snyk_wrapper_file_name: str
    snyk_to_html_wrapper_file_name: str

    @property
    def arch_suffix(self) -> str:
        """File name suffix for the architecture ("" for amd64)."""
        return "" if self.arch == "amd64" else f"-{self.arch}"

    @property
    def is_windows(self) -> bool:
        return self.os_family is OsFamily.WINDOWS

    @classmethod
    def of(cls, os_family: OsFamily, arch: str) -> "PlatformDescriptor":
        """Build the descriptor for a supported (os, arch) pair.

        Raises:
            PlatformUndetectable: If Snyk has no binary for the pair.
        """
        names = _FILE_NAMES.get((os_family, arch))
        if names is None:
            raise PlatformUndetectable(f"{os_family.value}/{arch}")
        return cls(os_family, arch, names[0], names[1])


def detect_platform() -> PlatformDescriptor:
    """Detect the platform of the running process.

    Only describes the process it runs in; to describe a remote node it must
    be submitted to that node's executor (see GetPlatform).

    Raises:
        PlatformUndetectable: If the OS or architecture is not supported.
    """
    system = platform.system()
    machine = platform.machine()
    os_family = normalize_os(system)
    arch = normalize_arch(machine)
    if os_family is None or arch is None:
        raise PlatformUndetectable(f"{system}/{machine}")
    return PlatformDescriptor.of(os_family, arch)


class GetPlatform:
    """Unit of work detecting the platform of the node it runs on."""

    def __init__(self, node_name: str) -> None:
        self.node_name = node_name

    def __call__(self) -> PlatformDescriptor:
        try:
            return detect_platform()
        except PlatformUndetectable as ex:
            raise PlatformUndetectable(
                f"{ex.identifier} (on node {self.node_name})"
            ) from ex
