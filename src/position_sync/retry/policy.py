"""
Retry policy configuration for upstream requests.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RetryPolicy:
    """
    Configuration for retrying a failed request with exponential backoff.

    ``max_attempts`` counts every execution, the first one included, so the
    default policy makes at most 3 requests and waits at most twice.

    Examples:
        >>> policy = RetryPolicy(max_attempts=3, initial_delay=1.0)
        >>> [policy.get_delay(n) for n in (1, 2)]
        [1.0, 2.0]
    """

    # Total executions allowed, first attempt included
    max_attempts: int = 3

    # Delay before the first retry (seconds)
    initial_delay: float = 1.0

    # delay = initial_delay * base^(retry_number - 1)
    exponential_base: float = 2.0

    # Classifier: (exception) -> bool; None retries every exception
    retry_condition: Callable[[BaseException], bool] | None = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.initial_delay <= 0:
            raise ValueError("initial_delay must be > 0")
        if self.exponential_base < 1.0:
            raise ValueError("exponential_base must be >= 1.0")

    def is_retryable(self, exception: BaseException) -> bool:
        """Classify an exception as transient (retry) or fatal (give up)."""
        if self.retry_condition is not None:
            return self.retry_condition(exception)
        return True

    def should_retry(self, exception: BaseException, attempt: int) -> bool:
        """
        Decide whether to retry after ``attempt`` (1-indexed) failed.

        Args:
            exception: The exception raised by the attempt
            attempt: Number of the attempt that just failed
        """
        if attempt >= self.max_attempts:
            return False
        return self.is_retryable(exception)

    def get_delay(self, retry_number: int) -> float:
        """
        Delay before retry ``retry_number`` (1-indexed).

        Implements ``initial_delay * base^(retry_number - 1)``.
        """
        return self.initial_delay * (self.exponential_base ** (retry_number - 1))


@dataclass
class RetryState:
    """Retry history for one logical operation, for logging and tests."""

    operation: str
    attempts: int = 0
    delays: list[float] = field(default_factory=list)
    errors: list[dict[str, Any]] = field(default_factory=list)
    succeeded: bool = False
    final_exception: BaseException | None = None

    def record_attempt(self, exception: BaseException | None = None) -> None:
        self.attempts += 1
        if exception is not None:
            self.errors.append(
                {
                    "attempt": self.attempts,
                    "exception_type": type(exception).__name__,
                    "exception_message": str(exception),
                    "timestamp": time.time(),
                }
            )

    def record_delay(self, delay: float) -> None:
        self.delays.append(delay)

    def mark_success(self) -> None:
        self.succeeded = True

    def mark_failure(self, exception: BaseException) -> None:
        self.succeeded = False
        self.final_exception = exception


DEFAULT_RETRY_POLICY = RetryPolicy(max_attempts=3, initial_delay=1.0, exponential_base=2.0)
