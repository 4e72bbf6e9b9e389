"""Configuration validation for snyk-installer.

Unknown keys produce warnings with "did you mean" suggestions; values of the
wrong type produce errors that stop the config from loading.
"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import yaml

from snyk_installer.core.logging import get_logger

LOGGER = get_logger(__name__)


class ValidationSeverity(Enum):
    """Severity level for validation issues."""

    ERROR = "error"  # Config cannot be used
    WARNING = "warning"  # Likely mistake but config usable


@dataclass
class ConfigValidationIssue:
    """A validation issue for configuration with severity."""

    message: str
    source: str
    severity: ValidationSeverity
    key: Optional[str] = None
    suggestion: Optional[str] = None


VALID_TOP_LEVEL_KEYS: Set[str] = {
    "download_base_url",
    "installations",
}

VALID_INSTALLATION_KEYS: Set[str] = {
    "name",
    "home",
    "version",
    "update_policy_interval_hours",
    "label",
}


def validate_config(data: Dict[str, Any], source: str) -> List[ConfigValidationIssue]:
    """Validate a configuration dictionary.

    Args:
        data: Config dictionary to validate.
        source: Source file path for messages.

    Returns:
        List of validation issues (empty if the config is clean).
    """
    issues: List[ConfigValidationIssue] = []

    if not isinstance(data, dict):  # type: ignore[unreachable]
        issues.append(_error(f"Config must be a mapping, got {type(data).__name__}", source))
        return issues  # type: ignore[unreachable]

    for key in data.keys():
        if key not in VALID_TOP_LEVEL_KEYS:
            issues.append(_unknown_key(f"Unknown top-level key '{key}'", source, key,
                                       VALID_TOP_LEVEL_KEYS))

    base_url = data.get("download_base_url")
    if base_url is not None:
        if not isinstance(base_url, str):
            issues.append(_error("'download_base_url' must be a string", source,
                                 "download_base_url"))
        elif not base_url.startswith("https://"):
            issues.append(_error(f"'download_base_url' must be an HTTPS URL, got '{base_url}'",
                                 source, "download_base_url"))

    installations = data.get("installations")
    if installations is not None:
        if not isinstance(installations, list):
            issues.append(_error(
                f"'installations' must be a list, got {type(installations).__name__}",
                source, "installations",
            ))
        else:
            seen: Set[str] = set()
            for index, entry in enumerate(installations):
                issues.extend(_validate_installation(entry, index, source, seen))

    return issues


def _validate_installation(
    entry: Any, index: int, source: str, seen: Set[str]
) -> List[ConfigValidationIssue]:
    prefix = f"installations[{index}]"
    if not isinstance(entry, dict):
        return [_error(f"'{prefix}' must be a mapping, got {type(entry).__name__}",
                       source, prefix)]

    issues: List[ConfigValidationIssue] = []
    for key in entry.keys():
        if key not in VALID_INSTALLATION_KEYS:
            issues.append(_unknown_key(f"Unknown key '{prefix}.{key}'", source,
                                       f"{prefix}.{key}", VALID_INSTALLATION_KEYS, key))

    name = entry.get("name")
    if name is not None:
        if not isinstance(name, str) or not name.strip():
            issues.append(_error(f"'{prefix}.name' must be a non-empty string", source,
                                 f"{prefix}.name"))
        elif name in seen:
            issues.append(_error(f"Duplicate installation name '{name}'", source,
                                 f"{prefix}.name"))
        else:
            seen.add(name)

    for key in ("home", "label"):
        value = entry.get(key)
        if value is not None and not isinstance(value, str):
            issues.append(_error(f"'{prefix}.{key}' must be a string", source,
                                 f"{prefix}.{key}"))

    version = entry.get("version")
    if version is not None and not isinstance(version, str):
        # version: 1.10 parses as the float 1.1
        issues.append(_error(
            f"'{prefix}.version' must be a string (quote it in YAML), "
            f"got {type(version).__name__}",
            source, f"{prefix}.version",
        ))

    hours = entry.get("update_policy_interval_hours")
    if hours is not None:
        if isinstance(hours, bool) or not isinstance(hours, int):
            issues.append(_error(f"'{prefix}.update_policy_interval_hours' must be an integer",
                                 source, f"{prefix}.update_policy_interval_hours"))
        elif hours < 0:
            issues.append(_error(f"'{prefix}.update_policy_interval_hours' must not be negative",
                                 source, f"{prefix}.update_policy_interval_hours"))

    return issues


def _error(message: str, source: str, key: Optional[str] = None) -> ConfigValidationIssue:
    return ConfigValidationIssue(message=message, source=source,
                                 severity=ValidationSeverity.ERROR, key=key)


def _unknown_key(
    message: str,
    source: str,
    key: str,
    valid_keys: Set[str],
    bare_key: Optional[str] = None,
) -> ConfigValidationIssue:
    issue = ConfigValidationIssue(
        message=message,
        source=source,
        severity=ValidationSeverity.WARNING,
        key=key,
        suggestion=_suggest_key(bare_key or key, valid_keys),
    )
    _log_warning(issue)
    return issue


def _suggest_key(invalid_key: str, valid_keys: Set[str]) -> Optional[str]:
    """Suggest a valid key for a potential typo.

    Returns:
        Closest matching valid key, or None if no good match.
    """
    matches = get_close_matches(invalid_key, list(valid_keys), n=1, cutoff=0.6)
    return matches[0] if matches else None


def _log_warning(issue: ConfigValidationIssue) -> None:
    msg = f"{issue.message} in {issue.source}"
    if issue.suggestion:
        msg += f" (did you mean '{issue.suggestion}'?)"
    LOGGER.warning(msg)


def has_errors(issues: List[ConfigValidationIssue]) -> bool:
    return any(issue.severity == ValidationSeverity.ERROR for issue in issues)


def validate_config_file(config_path: Path) -> Tuple[bool, List[ConfigValidationIssue]]:
    """Validate a configuration file from disk.

    Checks file existence, YAML syntax, and configuration semantics.

    Returns:
        Tuple of (is_valid, issues) where is_valid is False if any errors exist.
    """
    source = str(config_path)

    if not config_path.exists():
        return False, [_error(f"Configuration file not found: {config_path}", source)]

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return False, [_error(f"Invalid YAML syntax: {e}", source)]

    if data is None:
        return True, []

    issues = validate_config(data, source)
    return not has_errors(issues), issues
