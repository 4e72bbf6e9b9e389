"""Configuration loading for snyk-installer."""

from snyk_installer.config.loader import ConfigError, load_config
from snyk_installer.config.models import InstallationConfig, InstallerConfig

__all__ = ["ConfigError", "load_config", "InstallationConfig", "InstallerConfig"]
