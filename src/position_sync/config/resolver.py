"""
Configuration resolution and environment variable substitution.

Supports ``${VAR_NAME}`` and ``${VAR_NAME:-default}`` placeholders plus the
``{env}`` placeholder for the active environment name.
"""

import os
import re
from typing import Any

_PLACEHOLDER = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def resolve_config(config_data: dict[str, Any], env: str = "dev") -> dict[str, Any]:
    """
    Resolve configuration with environment variable substitution.

    An unset variable without a default resolves to an empty string, so a
    required setting sourced from a missing variable reads as absent.

    Args:
        config_data: Configuration dictionary
        env: Current environment name

    Returns:
        Resolved configuration
    """
    return _resolve_value(config_data, env)


def _resolve_value(value: Any, env: str) -> Any:
    """Recursively resolve values in configuration."""
    if isinstance(value, dict):
        return {k: _resolve_value(v, env) for k, v in value.items()}
    elif isinstance(value, list):
        return [_resolve_value(item, env) for item in value]
    elif isinstance(value, str):
        result = _PLACEHOLDER.sub(_substitute, value)
        return result.replace("{env}", env)
    else:
        return value


def _substitute(match: re.Match) -> str:
    name, default = match.group(1), match.group(2)
    found = os.getenv(name)
    if found is not None and found != "":
        return found
    return default if default is not None else ""
