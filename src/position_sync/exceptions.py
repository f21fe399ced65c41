"""
position-sync exception hierarchy.

All domain-specific exceptions inherit from PositionSyncError, so callers can
catch any pipeline failure with a single base class while still handling
individual failure kinds where it matters.

Hierarchy::

    PositionSyncError
    ├── ConfigurationError    - missing credentials, invalid settings
    ├── ValidationError       - malformed trigger input (date filters)
    ├── ApiResponseError      - a single request returned a non-2xx status
    ├── RetryError            - retry exhaustion
    │   └── FetchError        - fatal fetch, aborts the whole sync
    └── OutputError           - writing a generated SQL file failed
"""

from __future__ import annotations

from typing import Any


class PositionSyncError(Exception):
    """Base exception for all position-sync errors."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- Configuration -----------------------------------------------------------


class ConfigurationError(PositionSyncError):
    """Raised when configuration loading, parsing, or validation fails."""

    def __init__(self, message: str, *, errors: list[str] | None = None) -> None:
        super().__init__(message, details={"errors": list(errors or [])})
        self.errors = list(errors or [])


# --- Input validation --------------------------------------------------------


class ValidationError(PositionSyncError):
    """Raised when a sync is triggered with malformed input."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message, details={"field": field} if field else None)
        self.field = field


# --- Fetching ----------------------------------------------------------------


class ApiResponseError(PositionSyncError):
    """Raised when the upstream API answers with a non-2xx status."""

    def __init__(self, status: int, body: Any) -> None:
        super().__init__(f"HTTP {status}", details={"status": status})
        self.status = status
        self.body = body


class RetryError(PositionSyncError):
    """Raised when all retry attempts are exhausted."""


class FetchError(RetryError):
    """Raised when a page cannot be fetched; aborts the in-flight sync.

    ``status`` and ``body`` are set when the final failure was an HTTP
    response, ``None`` when it was a transport error.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        body: Any = None,
        attempts: int = 0,
    ) -> None:
        super().__init__(message, details={"status": status, "attempts": attempts})
        self.status = status
        self.body = body
        self.attempts = attempts


# --- Output ------------------------------------------------------------------


class OutputError(PositionSyncError):
    """Raised when a generated SQL document cannot be written."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"Failed to write {path}: {message}", details={"path": path})
        self.path = path
