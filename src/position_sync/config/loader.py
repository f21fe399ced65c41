"""
Configuration file loading.

Built-in defaults read the process environment (optionally seeded from a
``.env`` file); ``config.yaml`` and ``config.{env}.yaml`` in the project
directory override them when present.
"""

import copy
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from position_sync.config.resolver import resolve_config
from position_sync.exceptions import ConfigurationError

DEFAULT_CONFIG: dict[str, Any] = {
    "api": {
        "base_url": "${SF_BASE_URL:-https://api10.successfactors.com/odata/v2}",
        "username": "${SF_USERNAME}",
        "password": "${SF_PASSWORD}",
        "entity": "Position",
        "timeout": "${REQUEST_TIMEOUT:-60}",
    },
    "sync": {
        "page_size": "${PAGE_SIZE:-1000}",
        "output_file": "${OUTPUT_FILE:-output/positions.sql}",
        "department_filter": "${DEPARTMENT_FILTER}",
        "table": "${SYNC_TABLE:-job_sf_position}",
        "dialects": ["oracle", "postgres"],
    },
    "retry": {
        "max_attempts": "${RETRY_ATTEMPTS:-3}",
        "initial_delay": "${RETRY_DELAY:-1.0}",
    },
    "logging": {
        "level": "${LOG_LEVEL:-INFO}",
        "file": "${LOG_FILE}",
        "console_type": "rich",
    },
}


class Config:
    """Configuration container with dict-like access."""

    def __init__(self, data: dict[str, Any]):
        self.data = data

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation."""
        value: Any = self.data
        for k in key.split("."):
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default
        return value

    def __getitem__(self, key: str) -> Any:
        """Dict-like access: config['key'] or config['nested.key']."""
        if "." in key:
            return self.get(key)
        if key in self.data:
            value = self.data[key]
            if isinstance(value, dict):
                return Config(value)
            return value
        raise KeyError(f"Config key '{key}' not found")

    def __contains__(self, key: str) -> bool:
        value: Any = self.data
        for k in key.split("."):
            if not isinstance(value, dict) or k not in value:
                return False
            value = value[k]
        return True

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def keys(self):
        return self.data.keys()

    def items(self):
        return self.data.items()


def load_config(project_path: Path | None = None, env: str | None = None) -> Config:
    """
    Load position-sync configuration.

    Args:
        project_path: Directory holding ``.env`` / ``config.yaml`` (default: cwd)
        env: Environment name selecting ``config.{env}.yaml``

    Returns:
        Config instance with placeholders resolved

    Raises:
        ConfigurationError: If a config file exists but cannot be parsed
    """
    if project_path is None:
        project_path = Path.cwd()
    project_path = Path(project_path)

    # Real environment variables win over .env entries
    load_dotenv(project_path / ".env", override=False)

    config_data = copy.deepcopy(DEFAULT_CONFIG)

    base_config_path = project_path / "config.yaml"
    if base_config_path.is_file():
        _merge_dict(config_data, _read_yaml(base_config_path))

    if env:
        env_config_path = project_path / f"config.{env}.yaml"
        if env_config_path.is_file():
            _merge_dict(config_data, _read_yaml(env_config_path))

    config_data = resolve_config(config_data, env or "dev")

    if os.getenv("DEBUG", "").lower() == "true":
        config_data.setdefault("logging", {})["level"] = "DEBUG"

    return Config(config_data)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        where = f" at line {mark.line + 1}, column {mark.column + 1}" if mark else ""
        raise ConfigurationError(f"Error parsing {path.name}{where}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path.name} must contain a mapping, got {type(data).__name__}")
    return data


def _merge_dict(base: dict, override: dict) -> None:
    """Recursively merge override into base."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _merge_dict(base[key], value)
        else:
            base[key] = value
