"""Configuration file loading and merging.

Handles loading configuration from YAML files with:
- Project-level config (.snyk-installer.yml in the working directory)
- Global config (~/.snyk-installer/config/config.yml)
- Environment variable expansion (${VAR})
- Config merging with proper precedence
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from snyk_installer.bootstrap.download import DEFAULT_DOWNLOAD_BASE_URL
from snyk_installer.bootstrap.paths import InstallerPaths
from snyk_installer.config.models import (
    DEFAULT_INSTALLATION_NAME,
    InstallationConfig,
    InstallerConfig,
)
from snyk_installer.config.validation import has_errors, validate_config
from snyk_installer.core.env import expand_env_vars_recursive
from snyk_installer.core.errors import SnykInstallerError
from snyk_installer.core.logging import get_logger
from snyk_installer.tools.installer import DEFAULT_UPDATE_POLICY_HOURS

LOGGER = get_logger(__name__)

PROJECT_CONFIG_NAMES = [
    ".snyk-installer.yml",
    ".snyk-installer.yaml",
    "snyk-installer.yml",
    "snyk-installer.yaml",
]


class ConfigError(SnykInstallerError):
    """Configuration loading or parsing error."""

    pass


def load_config(
    project_root: Path,
    cli_config_path: Optional[Path] = None,
    cli_overrides: Optional[Dict[str, Any]] = None,
    paths: Optional[InstallerPaths] = None,
) -> InstallerConfig:
    """Load configuration with proper precedence.

    Precedence (highest to lowest):
    1. CLI flags (cli_overrides)
    2. Custom config file (cli_config_path) OR project config
    3. Global config (~/.snyk-installer/config/config.yml)
    4. Built-in defaults

    Raises:
        ConfigError: If a config file is missing, malformed or invalid.
    """
    sources: List[str] = []
    merged: Dict[str, Any] = {}
    paths = paths or InstallerPaths.default()

    global_path = paths.global_config
    if global_path.exists():
        merged = merge_configs(merged, _load_validated(global_path))
        sources.append(f"global:{global_path}")
        LOGGER.debug(f"Loaded global config from {global_path}")

    if cli_config_path:
        if not cli_config_path.exists():
            raise ConfigError(f"Config file not found: {cli_config_path}")
        merged = merge_configs(merged, _load_validated(cli_config_path))
        sources.append(f"custom:{cli_config_path}")
        LOGGER.debug(f"Loaded custom config from {cli_config_path}")
    else:
        project_path = find_project_config(project_root)
        if project_path is not None:
            merged = merge_configs(merged, _load_validated(project_path))
            sources.append(f"project:{project_path}")
            LOGGER.debug(f"Loaded project config from {project_path}")

    config = dict_to_config(merged)

    if cli_overrides:
        apply_overrides(config, cli_overrides)
        sources.append("cli")
        LOGGER.debug("Applied CLI overrides")

    config._config_sources = sources
    LOGGER.debug(f"Config loaded from sources: {sources}")
    return config


def find_project_config(project_root: Path) -> Optional[Path]:
    for name in PROJECT_CONFIG_NAMES:
        config_path = project_root / name
        if config_path.exists():
            return config_path
    return None


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML config file.

    Performs environment variable expansion on string values.

    Raises:
        ConfigError: If the YAML is invalid or not a mapping.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a YAML mapping, got {type(data).__name__}")

    return expand_env_vars_recursive(data)


def _load_validated(path: Path) -> Dict[str, Any]:
    data = load_yaml_file(path)
    issues = validate_config(data, source=str(path))
    if has_errors(issues):
        details = "; ".join(issue.message for issue in issues)
        raise ConfigError(f"Invalid configuration in {path}: {details}")
    return data


def merge_configs(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two config dicts, with overlay taking precedence.

    Rules:
    - Scalar values: overlay replaces base
    - Lists: overlay replaces base (no merging)
    - Dicts: recursive merge
    """
    result = base.copy()

    for key, overlay_value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(overlay_value, dict):
            result[key] = merge_configs(result[key], overlay_value)
        else:
            result[key] = overlay_value

    return result


def _parse_installation(data: Dict[str, Any]) -> InstallationConfig:
    hours = data.get("update_policy_interval_hours")
    return InstallationConfig(
        name=data.get("name") or DEFAULT_INSTALLATION_NAME,
        home=data.get("home") or "",
        version=data.get("version") or "",
        update_policy_interval_hours=(
            DEFAULT_UPDATE_POLICY_HOURS if hours is None else hours
        ),
        label=data.get("label"),
    )


def dict_to_config(data: Dict[str, Any]) -> InstallerConfig:
    """Convert a validated dict to a typed InstallerConfig."""
    config = InstallerConfig(
        download_base_url=data.get("download_base_url") or DEFAULT_DOWNLOAD_BASE_URL,
    )
    installations_data = data.get("installations")
    if installations_data:
        config.installations = [_parse_installation(entry) for entry in installations_data]
    return config


def apply_overrides(config: InstallerConfig, overrides: Dict[str, Any]) -> None:
    """Apply CLI overrides to the selected installation.

    ``overrides["name"]`` selects the installation; an unknown name adds a
    new installation. The remaining keys replace its attributes.
    """
    name = overrides.get("name")
    installation = config.get_installation(name)
    if installation is None:
        installation = InstallationConfig(name=name or DEFAULT_INSTALLATION_NAME)
        config.installations.append(installation)

    for key in ("home", "version", "update_policy_interval_hours"):
        value = overrides.get(key)
        if value is not None:
            setattr(installation, key, value)
