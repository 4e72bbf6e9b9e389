"""Snyk tool installation and its installer."""

from snyk_installer.tools.installation import PlatformCache, SnykInstallation
from snyk_installer.tools.installer import SnykInstaller

__all__ = ["PlatformCache", "SnykInstallation", "SnykInstaller"]
