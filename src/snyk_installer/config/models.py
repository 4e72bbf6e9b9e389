"""Typed configuration objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from snyk_installer.bootstrap.download import DEFAULT_DOWNLOAD_BASE_URL, DownloadService
from snyk_installer.tools.installation import SnykInstallation
from snyk_installer.tools.installer import DEFAULT_UPDATE_POLICY_HOURS, SnykInstaller

DEFAULT_INSTALLATION_NAME = "snyk"


@dataclass
class InstallationConfig:
    """One configured Snyk installation."""

    name: str = DEFAULT_INSTALLATION_NAME
    home: str = ""
    version: str = ""
    update_policy_interval_hours: int = DEFAULT_UPDATE_POLICY_HOURS
    label: Optional[str] = None

    def build(self, download_service: Optional[DownloadService] = None) -> SnykInstallation:
        """Create the installation entity with its installer."""
        installer = SnykInstaller(
            version=self.version,
            update_policy_interval_hours=self.update_policy_interval_hours,
            label=self.label,
            download_service=download_service,
        )
        return SnykInstallation(name=self.name, home=self.home, installer=installer)


@dataclass
class InstallerConfig:
    """Complete snyk-installer configuration."""

    download_base_url: str = DEFAULT_DOWNLOAD_BASE_URL
    installations: List[InstallationConfig] = field(
        default_factory=lambda: [InstallationConfig()]
    )

    # Where the config was loaded from (for debugging)
    _config_sources: List[str] = field(default_factory=list, repr=False)

    @property
    def download_service(self) -> DownloadService:
        return DownloadService(base_url=self.download_base_url)

    def get_installation(self, name: Optional[str] = None) -> Optional[InstallationConfig]:
        """Return the installation called ``name``, or the first one if None."""
        if name is None:
            return self.installations[0] if self.installations else None
        for installation in self.installations:
            if installation.name == name:
                return installation
        return None

    def build_installations(self) -> List[SnykInstallation]:
        service = self.download_service
        return [installation.build(service) for installation in self.installations]
