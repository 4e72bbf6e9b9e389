"""Bootstrap building blocks for provisioning the Snyk CLI.

This package handles:
- Platform detection (OS + architecture → Snyk file names)
- Freshness and provenance markers of an installation directory
- Capability probing (is npm usable on the node?)
- Download URL resolution and secure downloads
"""

from snyk_installer.bootstrap.download import DownloadService, Downloader
from snyk_installer.bootstrap.freshness import is_up_to_date, write_timestamp
from snyk_installer.bootstrap.paths import InstallerPaths, get_installer_home
from snyk_installer.bootstrap.platform import (
    OsFamily,
    PlatformDescriptor,
    detect_platform,
)
from snyk_installer.bootstrap.probe import is_npm_available

__all__ = [
    "DownloadService",
    "Downloader",
    "is_up_to_date",
    "write_timestamp",
    "InstallerPaths",
    "get_installer_home",
    "OsFamily",
    "PlatformDescriptor",
    "detect_platform",
    "is_npm_available",
]
