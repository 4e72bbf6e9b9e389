"""Path management for the snyk-installer home directory.

The home directory is the root of the local node: tool installations land
under ``tools/``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

# Default directory name under user home
DEFAULT_HOME_DIR_NAME = ".snyk-installer"

# Environment variable to override home directory
SNYK_INSTALLER_HOME_ENV = "SNYK_INSTALLER_HOME"


def get_installer_home() -> Path:
    """Get the snyk-installer home directory path.

    Resolution order:
    1. SNYK_INSTALLER_HOME environment variable (if set)
    2. ~/.snyk-installer (default)
    """
    env_home = os.environ.get(SNYK_INSTALLER_HOME_ENV)
    if env_home:
        return Path(env_home)
    return Path.home() / DEFAULT_HOME_DIR_NAME


@dataclass
class InstallerPaths:
    """Paths within the snyk-installer home directory.

    Directory structure:
        ~/.snyk-installer/
            config/config.yml   - Global configuration
            tools/snyk/{name}/  - Default installation targets
    """

    home: Path

    _CONFIG_DIR: ClassVar[str] = "config"
    _TOOLS_DIR: ClassVar[str] = "tools"

    @classmethod
    def default(cls) -> "InstallerPaths":
        """Create paths from the default snyk-installer home."""
        return cls(get_installer_home())

    @property
    def config_dir(self) -> Path:
        return self.home / self._CONFIG_DIR

    @property
    def global_config(self) -> Path:
        return self.config_dir / "config.yml"

    @property
    def tools_dir(self) -> Path:
        return self.home / self._TOOLS_DIR
