"""Environment variable expansion for configuration values."""

from __future__ import annotations

import os
import re
from typing import Any, Mapping, Optional

from snyk_installer.core.logging import get_logger

LOGGER = get_logger(__name__)

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def expand_env_vars(value: str, env: Optional[Mapping[str, str]] = None) -> str:
    """Expand ${VAR} and ${VAR:-default} references in ``value``.

    Args:
        value: String possibly containing references.
        env: Variables to use (default: os.environ).

    Returns:
        The expanded string. Unset variables without a default expand to "".
    """
    variables = os.environ if env is None else env

    def replace(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default_value = match.group(2)

        resolved = variables.get(var_name)
        if resolved is not None:
            return resolved
        if default_value is not None:
            return default_value

        LOGGER.warning(f"Environment variable ${var_name} is not set and has no default")
        return ""

    return ENV_VAR_PATTERN.sub(replace, value)


def expand_env_vars_recursive(data: Any, env: Optional[Mapping[str, str]] = None) -> Any:
    """Expand environment variables in every string of a parsed config tree."""
    if isinstance(data, dict):
        return {k: expand_env_vars_recursive(v, env) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars_recursive(item, env) for item in data]
    elif isinstance(data, str):
        return expand_env_vars(data, env)
    else:
        return data
