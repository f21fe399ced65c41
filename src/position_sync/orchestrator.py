"""
Sync orchestration: fetch every page, keep matching records, render one SQL
document per dialect and write them out.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from position_sync.client import PositionApiClient
from position_sync.config.settings import SyncSettings
from position_sync.exceptions import OutputError
from position_sync.fetcher import PageFetcher, PageSource
from position_sync.filters import filter_by_prefix, validate_date_param
from position_sync.mapping import DEFAULT_FIELD_MAPPING, FieldMapping, PositionRecord
from position_sync.output import file_timestamp, output_path, write_document
from position_sync.retry.manager import SleepFunc
from position_sync.sql.dialects import get_dialect
from position_sync.sql.generator import SqlGenerator
from position_sync.utils.logging import get_logger

logger = get_logger("position_sync.orchestrator")

BANNER = "=" * 40


@dataclass(frozen=True)
class PageProgress:
    """Progress observation emitted after each page."""

    page: int
    fetched: int
    matched: int
    total_matched: int


@dataclass
class SyncResult:
    """Summary of one sync run."""

    total_fetched: int
    total_filtered: int
    statements_generated: int
    output_files: dict[str, str] = field(default_factory=dict)
    duration: float = 0.0
    success: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Response shape returned by the trigger surface."""
        data: dict[str, Any] = {
            "success": self.success,
            "totalFetched": self.total_fetched,
            "totalFiltered": self.total_filtered,
            "sqlStatementsGenerated": self.statements_generated,
        }
        for dialect, path in self.output_files.items():
            data[f"{dialect}File"] = path
        data["duration"] = f"{self.duration:.2f}s"
        return data


class SyncOrchestrator:
    """
    Runs one sync per call to ``run``.

    Every run owns its accumulator and output files, so overlapping runs do not
    interfere; only ``settings`` and ``mapping`` are shared, read-only.

    Args:
        settings: Validated sync settings
        mapping: Field mapping used for ``$select`` and the INSERT columns
        source_factory: Builds the page source for a run (default: PositionApiClient)
        clock: Current time, used for the default date window and file names
        sleep: Awaitable sleep for retry backoff
        on_progress: Called with a PageProgress after each page
    """

    def __init__(
        self,
        settings: SyncSettings,
        mapping: FieldMapping = DEFAULT_FIELD_MAPPING,
        source_factory: Callable[[], PageSource] | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        sleep: SleepFunc = asyncio.sleep,
        on_progress: Callable[[PageProgress], None] | None = None,
    ):
        self.settings = settings
        self.mapping = mapping
        self.source_factory = source_factory
        self.clock = clock
        self.sleep = sleep
        self.on_progress = on_progress
        # Fail on unknown dialects before any request is made
        self.dialects = [get_dialect(name) for name in settings.dialects]

    def _make_source(self) -> PageSource:
        if self.source_factory is not None:
            return self.source_factory()
        return PositionApiClient.from_settings(self.settings, self.mapping, sleep=self.sleep)

    async def run(self, start_date: str | None = None, end_date: str | None = None) -> SyncResult:
        """
        Execute a full sync.

        Raises:
            ValidationError: If a date parameter is malformed
            ConfigurationError: If settings are incomplete
            FetchError: If any page cannot be fetched; no files are written
            OutputError: If a document cannot be written
        """
        start_date = validate_date_param(start_date, "startDate")
        end_date = validate_date_param(end_date, "endDate")
        self.settings.validate()

        started = time.monotonic()
        prefix = self.settings.department_filter
        logger.info("Starting SF Position sync...")
        logger.info(f"Date range: {start_date or 'N/A'} to {end_date or 'N/A'}")
        logger.info(f"Department filter: {prefix}*")
        logger.info(f"Page size: {self.settings.page_size}")

        matched: list[PositionRecord] = []
        total_fetched = 0

        source = self._make_source()
        try:
            fetcher = PageFetcher(source, self.settings.page_size, clock=self.clock)
            async for page in fetcher.pages(start_date, end_date):
                total_fetched += page.size
                kept = filter_by_prefix(page.records, prefix)
                matched.extend(kept)
                self._report(PageProgress(page.index, page.size, len(kept), len(matched)))
        finally:
            close = getattr(source, "close", None)
            if close is not None:
                await close()

        output_files = await self._write_outputs(matched, start_date, end_date)

        result = SyncResult(
            total_fetched=total_fetched,
            total_filtered=len(matched),
            statements_generated=len(matched),
            output_files=output_files,
            duration=time.monotonic() - started,
        )
        self._log_summary(result)
        return result

    async def _write_outputs(
        self,
        records: list[PositionRecord],
        start_date: str | None,
        end_date: str | None,
    ) -> dict[str, str]:
        generator = SqlGenerator(
            mapping=self.mapping,
            table=self.settings.table,
            department_filter=self.settings.department_filter,
            clock=self.clock,
        )
        timestamp = file_timestamp(self.clock())
        logger.info(
            f"Generating SQL for {len(records)} records for {', '.join(d.name for d in self.dialects)}..."
        )

        # Render everything before touching the filesystem
        documents = []
        for dialect in self.dialects:
            document, _ = generator.render_document(records, dialect, start_date, end_date)
            documents.append((dialect.name, output_path(self.settings.output_file, timestamp, dialect.name), document))

        written: dict[str, str] = {}
        try:
            for name, path, document in documents:
                await write_document(path, document)
                written[name] = str(path)
        except OutputError:
            # A run leaves either every document or none
            for done in written.values():
                Path(done).unlink(missing_ok=True)
                logger.warning(f"Removed partial output: {done}")
            raise
        return written

    def _report(self, progress: PageProgress) -> None:
        logger.info(
            f"Page {progress.page}: Fetched {progress.fetched} records, "
            f"{progress.matched} matched filter, Total synced: {progress.total_matched}"
        )
        if self.on_progress is not None:
            self.on_progress(progress)

    def _log_summary(self, result: SyncResult) -> None:
        logger.info(BANNER)
        logger.info("Sync completed successfully!")
        logger.info(f"Total records fetched from API: {result.total_fetched}")
        logger.info(f"Total records matching filter: {result.total_filtered}")
        logger.info(f"SQL statements generated: {result.statements_generated}")
        for name, path in result.output_files.items():
            logger.info(f"{name.upper()} SQL file: {path}")
        logger.info(f"Duration: {result.duration:.2f}s")
        logger.info(BANNER)


async def sync_positions(
    settings: SyncSettings,
    start_date: str | None = None,
    end_date: str | None = None,
    mapping: FieldMapping = DEFAULT_FIELD_MAPPING,
) -> SyncResult:
    """Convenience wrapper running a single sync with default collaborators."""
    return await SyncOrchestrator(settings, mapping=mapping).run(start_date, end_date)
