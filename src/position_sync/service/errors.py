"""
API error definitions for the trigger service.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Standard API error codes."""

    # Client errors (4xx)
    INVALID_REQUEST = "INVALID_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Server errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SYNC_FAILED = "SYNC_FAILED"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class APIError(Exception):
    """
    API exception rendered as a structured JSON failure.

    Usage:
        raise APIError(
            code=ErrorCode.VALIDATION_ERROR,
            message="Invalid startDate format",
            status=400,
        )
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status: int = 400,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status
        self.details = details or {}

    def to_dict(self, request_id: Optional[str] = None) -> Dict[str, Any]:
        """Convert to the response body."""
        body: Dict[str, Any] = {
            "success": False,
            "error": self.message,
            "code": self.code.value,
        }
        if self.details:
            body["details"] = self.details
        if request_id:
            body["request_id"] = request_id
        return body


class ValidationError(APIError):
    """Request validation error."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            status=400,
            details=details,
        )


class SyncFailedError(APIError):
    """A sync started but could not complete."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.SYNC_FAILED, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=code,
            message=message,
            status=500,
            details=details,
        )
