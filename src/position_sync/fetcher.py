"""
Offset/limit pagination over the Position API.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

from position_sync.filters import build_date_filter
from position_sync.mapping import PositionRecord
from position_sync.utils.logging import get_logger

logger = get_logger("position_sync.fetcher")


class PageSource(Protocol):
    async def fetch_page(self, top: int, skip: int, filter_expr: str) -> list[PositionRecord]: ...


@dataclass(frozen=True)
class Page:
    """One fetched page. ``index`` is 1-based, ``offset`` is the ``$skip`` used."""

    index: int
    offset: int
    records: list[PositionRecord]

    @property
    def size(self) -> int:
        return len(self.records)


class PageFetcher:
    """
    Walks the result set page by page, strictly sequentially.

    Starts at offset 0 and advances by ``page_size`` after each page. The walk
    ends after the first page holding fewer than ``page_size`` records, so a
    result set whose last page is exactly full costs one extra, empty request.
    Any FetchError from the source ends the walk and propagates.
    """

    def __init__(
        self,
        source: PageSource,
        page_size: int,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self.source = source
        self.page_size = page_size
        self.clock = clock

    async def pages(self, start_date: str | None = None, end_date: str | None = None) -> AsyncIterator[Page]:
        # Computed once so every page of a run shares the same window
        filter_expr = build_date_filter(start_date, end_date, now=self.clock())
        logger.info(f"Using filter: {filter_expr}")

        index, offset = 1, 0
        while True:
            records = await self.source.fetch_page(self.page_size, offset, filter_expr)
            yield Page(index=index, offset=offset, records=records)

            if len(records) < self.page_size:
                logger.info("Reached end of data")
                return
            index += 1
            offset += self.page_size

    async def fetch_all(self, start_date: str | None = None, end_date: str | None = None) -> list[PositionRecord]:
        """Collect every record of the walk into one list."""
        collected: list[PositionRecord] = []
        async for page in self.pages(start_date, end_date):
            collected.extend(page.records)
        return collected
