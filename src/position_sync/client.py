"""
HTTP client for the SuccessFactors OData Position API.

One request per page, Basic authentication, retry with exponential backoff on
transient failures.
"""

from __future__ import annotations

import asyncio
import errno
import json
import time
from dataclasses import replace
from typing import Any

import aiohttp

from position_sync.config.settings import SyncSettings
from position_sync.exceptions import ApiResponseError, FetchError
from position_sync.mapping import DEFAULT_FIELD_MAPPING, FieldMapping, PositionRecord
from position_sync.retry import RetryManager, RetryPolicy
from position_sync.retry.manager import SleepFunc
from position_sync.utils.logging import get_logger

logger = get_logger("position_sync.client")

_TRANSIENT_ERRNOS = {errno.ECONNRESET, errno.ECONNABORTED, errno.ETIMEDOUT}


def is_transient(exc: BaseException) -> bool:
    """
    True for failures worth retrying: connection reset or abort, timeouts,
    and HTTP 5xx responses. Everything else (4xx, DNS, refused) is fatal.
    """
    if isinstance(exc, ApiResponseError):
        return exc.status >= 500
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return True
    if isinstance(exc, (ConnectionResetError, ConnectionAbortedError, aiohttp.ServerDisconnectedError)):
        return True
    if isinstance(exc, aiohttp.ClientOSError) and exc.errno in _TRANSIENT_ERRNOS:
        return True
    return False


def describe_failure(exc: BaseException, attempts: int = 0) -> FetchError:
    """Turn the final request failure into the FetchError surfaced to callers."""
    if isinstance(exc, ApiResponseError):
        body = json.dumps(exc.body, default=str)
        return FetchError(f"API Error {exc.status}: {body}", status=exc.status, body=exc.body, attempts=attempts)
    message = str(exc) or type(exc).__name__
    return FetchError(f"Request Error: {message}", attempts=attempts)


class PositionApiClient:
    """
    Async client fetching one page of Position records at a time.

    Credentials are encoded into the Authorization header once, at
    construction. The session is opened lazily and closed by the async
    context manager.

    Example:
        ```python
        client = PositionApiClient.from_settings(settings)
        async with client:
            records = await client.fetch_page(top=1000, skip=0, filter_expr=flt)
        ```
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        mapping: FieldMapping = DEFAULT_FIELD_MAPPING,
        entity: str = "Position",
        timeout: float = 60.0,
        retry_policy: RetryPolicy | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        """
        Initialize the client.

        Args:
            base_url: OData service root, e.g. "https://api10.successfactors.com/odata/v2"
            username: API user
            password: API password
            mapping: Field mapping; its API fields form the ``$select`` list
            entity: Entity set to query (default: "Position")
            timeout: Total per-request timeout in seconds
            retry_policy: Retry behaviour; transient errors are classified by ``is_transient``
            sleep: Awaitable sleep used between retries
        """
        self.base_url = base_url.rstrip("/")
        self.entity = entity
        self.select_fields = mapping.select_fields
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.default_headers = {
            "Authorization": aiohttp.BasicAuth(username, password).encode(),
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        policy = retry_policy or RetryPolicy(max_attempts=3, initial_delay=1.0)
        if policy.retry_condition is None:
            policy = replace(policy, retry_condition=is_transient)
        self.retry = RetryManager(policy=policy, sleep=sleep)
        self.session: aiohttp.ClientSession | None = None

    @classmethod
    def from_settings(
        cls,
        settings: SyncSettings,
        mapping: FieldMapping = DEFAULT_FIELD_MAPPING,
        sleep: SleepFunc = asyncio.sleep,
    ) -> PositionApiClient:
        return cls(
            base_url=settings.base_url,
            username=settings.username,
            password=settings.password,
            mapping=mapping,
            entity=settings.entity,
            timeout=settings.timeout,
            retry_policy=RetryPolicy(max_attempts=settings.retry_attempts, initial_delay=settings.retry_delay),
            sleep=sleep,
        )

    @property
    def url(self) -> str:
        return f"{self.base_url}/{self.entity}"

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=self.timeout, headers=self.default_headers)
        return self.session

    async def __aenter__(self) -> PositionApiClient:
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None

    def build_params(self, top: int, skip: int, filter_expr: str) -> dict[str, str | int]:
        return {
            "$format": "json",
            "$select": self.select_fields,
            "$top": top,
            "$skip": skip,
            "$filter": filter_expr,
        }

    async def _request_page(self, params: dict[str, str | int]) -> list[PositionRecord]:
        """Single GET, no retry. Raises ApiResponseError on non-2xx."""
        session = await self._ensure_session()
        start_time = time.monotonic()
        async with session.get(self.url, params=params) as response:
            duration = time.monotonic() - start_time
            log = logger.debug if response.status <= 299 else logger.warning
            log(f"GET {self.url} {response.status} {duration:.2f}s")

            if response.status > 299:
                text = await response.text()
                try:
                    body: Any = json.loads(text)
                except ValueError:
                    body = text
                raise ApiResponseError(response.status, body)

            data = await response.json(content_type=None)

        if not isinstance(data, dict):
            return []
        envelope = data.get("d")
        results = envelope.get("results") if isinstance(envelope, dict) else None
        return list(results or [])

    async def fetch_page(self, top: int, skip: int, filter_expr: str) -> list[PositionRecord]:
        """
        Fetch one page, retrying transient failures on the same offset.

        Raises:
            FetchError: On a non-retryable failure or once retries are exhausted
        """
        params = self.build_params(top, skip, filter_expr)
        logger.debug(f"Fetching positions: top={top}, skip={skip}")
        try:
            return await self.retry.execute(self._request_page, params, operation=f"fetch skip={skip}")
        except (ApiResponseError, aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as e:
            attempts = self.retry.last_state.attempts if self.retry.last_state else 0
            raise describe_failure(e, attempts) from e
