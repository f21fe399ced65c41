"""
Configuration management: defaults, config files, environment resolution.
"""

from position_sync.config.loader import Config, load_config
from position_sync.config.resolver import resolve_config
from position_sync.config.settings import SyncSettings

__all__ = [
    "load_config",
    "Config",
    "resolve_config",
    "SyncSettings",
]
