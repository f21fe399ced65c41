"""
Retry manager: runs an async callable under a RetryPolicy.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from position_sync.retry.policy import DEFAULT_RETRY_POLICY, RetryPolicy, RetryState
from position_sync.utils.logging import get_logger

logger = get_logger("position_sync.retry")

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[Any]]


class RetryManager:
    """
    Executes async callables with attempt / backoff / give-up semantics.

    The sleep function is injectable so backoff timing can be tested without
    real waits.

    Examples:
        >>> manager = RetryManager(policy=RetryPolicy(max_attempts=3))
        >>> result = await manager.execute(client.fetch_page, 1000, 0, flt)
    """

    def __init__(self, policy: RetryPolicy | None = None, sleep: SleepFunc = asyncio.sleep):
        self.policy = policy or DEFAULT_RETRY_POLICY
        self.sleep = sleep
        self.last_state: RetryState | None = None

    async def execute(
        self,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        operation: str | None = None,
        **kwargs: Any,
    ) -> T:
        """
        Call ``func`` until it succeeds, fails fatally, or attempts run out.

        Each retry re-invokes ``func`` with the same arguments.

        Raises:
            BaseException: The last exception raised by ``func``
        """
        policy = self.policy
        state = RetryState(operation=operation or getattr(func, "__name__", "operation"))
        self.last_state = state

        attempt = 0
        while True:
            attempt += 1
            try:
                logger.debug(f"Executing {state.operation} (attempt {attempt}/{policy.max_attempts})")
                result = await func(*args, **kwargs)
            except Exception as e:
                state.record_attempt(exception=e)

                if not policy.should_retry(e, attempt):
                    state.mark_failure(e)
                    if policy.is_retryable(e):
                        logger.error(f"{state.operation} failed after {attempt} attempts: {e}")
                    else:
                        logger.error(f"{state.operation} failed with non-retryable error: {e}")
                    raise

                delay = policy.get_delay(attempt)
                state.record_delay(delay)
                logger.warning(
                    f"Request failed (attempt {attempt}/{policy.max_attempts}), "
                    f"retrying in {delay:.2f}s: {e}"
                )
                await self.sleep(delay)
            else:
                state.record_attempt()
                state.mark_success()
                if attempt > 1:
                    logger.info(f"{state.operation} succeeded after {attempt} attempts")
                return result
