"""
Shared fixtures and fakes.
"""

from datetime import datetime, timezone

import pytest

from position_sync.config.settings import SyncSettings
from position_sync.exceptions import FetchError
from position_sync.mapping import FieldMapping

FIXED_NOW = datetime(2024, 3, 15, 10, 30, 45, 123000, tzinfo=timezone.utc)


class FakePageSource:
    """In-memory page source: serves pages in order, records every request."""

    def __init__(self, pages, error: Exception | None = None, fail_on_call: int | None = None):
        self.pages = list(pages)
        self.error = error
        self.fail_on_call = fail_on_call
        self.calls: list[tuple[int, int, str]] = []
        self.closed = False

    async def fetch_page(self, top, skip, filter_expr):
        self.calls.append((top, skip, filter_expr))
        if self.error is not None and (self.fail_on_call is None or len(self.calls) == self.fail_on_call):
            raise self.error
        index = len(self.calls) - 1
        return list(self.pages[index]) if index < len(self.pages) else []

    async def close(self):
        self.closed = True


def make_records(count: int, department: str = "ENG-Core", start: int = 0) -> list[dict]:
    return [
        {
            "code": f"P{start + i:04d}",
            "department": department,
            "jobTitle": f"Engineer {start + i}",
            "effectiveStartDate": "/Date(1700000000000)/",
        }
        for i in range(count)
    ]


@pytest.fixture
def small_mapping() -> FieldMapping:
    return FieldMapping(
        [
            ("code", "code"),
            ("jobTitle", "job_title"),
            ("effectiveStartDate", "effective_start_date"),
            ("department", "department"),
        ]
    )


@pytest.fixture
def settings(tmp_path) -> SyncSettings:
    return SyncSettings(
        username="api-user",
        password="secret",
        base_url="https://api.example.com/odata/v2",
        page_size=3,
        output_file=str(tmp_path / "output" / "positions.sql"),
        department_filter="ENG",
        retry_attempts=3,
        retry_delay=0.01,
    )


@pytest.fixture
def fetch_error() -> FetchError:
    return FetchError('API Error 401: {"error": "unauthorized"}', status=401, body={"error": "unauthorized"})
