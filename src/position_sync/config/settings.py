"""
Typed, read-only settings derived from a loaded Config.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from position_sync.config.loader import Config
from position_sync.exceptions import ConfigurationError


@dataclass(frozen=True)
class SyncSettings:
    """Everything a sync run needs; shared read-only between concurrent runs."""

    username: str
    password: str
    base_url: str = "https://api10.successfactors.com/odata/v2"
    entity: str = "Position"
    timeout: float = 60.0
    page_size: int = 1000
    output_file: str = "output/positions.sql"
    department_filter: str = ""
    table: str = "job_sf_position"
    dialects: tuple[str, ...] = ("oracle", "postgres")
    retry_attempts: int = 3
    retry_delay: float = 1.0

    @classmethod
    def from_config(cls, config: Config) -> SyncSettings:
        """
        Build settings from a resolved Config.

        Raises:
            ConfigurationError: If a numeric setting cannot be parsed
        """
        errors: list[str] = []

        def number(key: str, cast: type, default: Any) -> Any:
            raw = config.get(key)
            if raw is None or raw == "":
                return default
            try:
                return cast(raw)
            except (TypeError, ValueError):
                errors.append(f"{key} must be a number, got {raw!r}")
                return default

        dialects = config.get("sync.dialects") or ["oracle", "postgres"]
        if isinstance(dialects, str):
            dialects = [d.strip() for d in dialects.split(",") if d.strip()]

        settings = cls(
            username=str(config.get("api.username") or ""),
            password=str(config.get("api.password") or ""),
            base_url=str(config.get("api.base_url") or cls.base_url).rstrip("/"),
            entity=str(config.get("api.entity") or cls.entity),
            timeout=number("api.timeout", float, cls.timeout),
            page_size=number("sync.page_size", int, cls.page_size),
            output_file=str(config.get("sync.output_file") or cls.output_file),
            department_filter=str(config.get("sync.department_filter") or ""),
            table=str(config.get("sync.table") or cls.table),
            dialects=tuple(str(d).lower() for d in dialects),
            retry_attempts=number("retry.max_attempts", int, cls.retry_attempts),
            retry_delay=number("retry.initial_delay", float, cls.retry_delay),
        )
        if errors:
            raise ConfigurationError("Configuration errors:\n" + "\n".join(errors), errors=errors)
        return settings

    def validate(self) -> None:
        """
        Check required values and ranges.

        Raises:
            ConfigurationError: Listing every problem found
        """
        errors = []
        if not self.username:
            errors.append("SF_USERNAME is required")
        if not self.password:
            errors.append("SF_PASSWORD is required")
        if self.page_size < 1:
            errors.append("sync.page_size must be >= 1")
        if self.timeout <= 0:
            errors.append("api.timeout must be > 0")
        if self.retry_attempts < 1:
            errors.append("retry.max_attempts must be >= 1")
        if self.retry_delay <= 0:
            errors.append("retry.initial_delay must be > 0")
        if not self.dialects:
            errors.append("sync.dialects must name at least one dialect")

        if errors:
            raise ConfigurationError("Configuration errors:\n" + "\n".join(errors), errors=errors)

    def masked(self) -> dict[str, Any]:
        """Settings as a dict with the password hidden, for display."""
        return {
            "base_url": self.base_url,
            "entity": self.entity,
            "username": self.username,
            "password": "********" if self.password else "",
            "timeout": self.timeout,
            "page_size": self.page_size,
            "output_file": self.output_file,
            "department_filter": self.department_filter,
            "table": self.table,
            "dialects": list(self.dialects),
            "retry_attempts": self.retry_attempts,
            "retry_delay": self.retry_delay,
        }
