"""
Retry with exponential backoff for transient upstream failures.
"""

from position_sync.retry.manager import RetryManager
from position_sync.retry.policy import DEFAULT_RETRY_POLICY, RetryPolicy, RetryState

__all__ = [
    "RetryPolicy",
    "RetryState",
    "DEFAULT_RETRY_POLICY",
    "RetryManager",
]
