"""
Tests for the sync orchestrator and output file handling.
"""

import dataclasses
from pathlib import Path

import pytest

from position_sync.exceptions import ConfigurationError, FetchError, OutputError, ValidationError
from position_sync.orchestrator import PageProgress, SyncOrchestrator, SyncResult
from position_sync.output import file_timestamp, output_path, write_document
from tests.conftest import FIXED_NOW, FakePageSource, make_records

TIMESTAMP = "2024-03-15T10-30-45-123Z"


def _orchestrator(settings, source, mapping, **kwargs) -> SyncOrchestrator:
    return SyncOrchestrator(
        settings,
        mapping=mapping,
        source_factory=lambda: source,
        clock=lambda: FIXED_NOW,
        **kwargs,
    )


def _mixed_pages():
    # page size 3: 2 + 1 + 1 records match the ENG prefix
    return [
        make_records(2) + make_records(1, department="SALES", start=2),
        make_records(1, department="HR", start=3) + make_records(1, start=4) + make_records(1, department=None, start=5),
        make_records(1, start=6),
    ]


class TestSyncOrchestrator:
    """Tests for SyncOrchestrator.run."""

    @pytest.mark.asyncio
    async def test_counts_and_files(self, settings, small_mapping, tmp_path):
        source = FakePageSource(_mixed_pages())

        result = await _orchestrator(settings, source, small_mapping).run("2024-01-01", "2024-01-31")

        assert result.success is True
        assert result.total_fetched == 7
        assert result.total_filtered == 4
        assert result.statements_generated == 4
        assert result.output_files == {
            "oracle": str(tmp_path / "output" / f"positions_{TIMESTAMP}_oracle.sql"),
            "postgres": str(tmp_path / "output" / f"positions_{TIMESTAMP}_postgres.sql"),
        }
        assert source.closed is True

    @pytest.mark.asyncio
    async def test_file_contents(self, settings, small_mapping):
        source = FakePageSource(_mixed_pages())

        result = await _orchestrator(settings, source, small_mapping).run("2024-01-01")

        oracle = Path(result.output_files["oracle"]).read_text(encoding="utf-8")
        postgres = Path(result.output_files["postgres"]).read_text(encoding="utf-8")

        assert "-- SF Position Sync SQL (ORACLE)\n" in oracle
        assert "-- Date Range: 2024-01-01 to N/A\n" in oracle
        assert "-- Department Filter: ENG*\n" in oracle
        assert oracle.count("MERGE INTO job_sf_position target") == 4
        assert "-- Total Records: 4\n" in oracle

        assert postgres.count("ON CONFLICT (code) DO NOTHING;") == 4
        assert "'P0002'" not in postgres
        assert "'P0004'" in postgres
        assert postgres.endswith("-- End of SQL file\n-- ============================================\n")

    @pytest.mark.asyncio
    async def test_end_to_end_example(self, settings, small_mapping):
        record = {"code": "X1", "department": "ENG-Core", "effectiveStartDate": "/Date(1700000000000)/"}
        source = FakePageSource([[record]])

        result = await _orchestrator(settings, source, small_mapping).run()

        postgres = Path(result.output_files["postgres"]).read_text(encoding="utf-8")
        assert (
            "INSERT INTO job_sf_position (code, job_title, effective_start_date, department)\n"
            "VALUES ('X1', NULL, '2023-11-14 22:13:20.000'::timestamp, 'ENG-Core')\n"
            "ON CONFLICT (code) DO NOTHING;"
        ) in postgres
        assert "-- Date Range: Yesterday\n" in postgres
        assert source.calls[0][2] == "lastModifiedDateTime ge datetime'2024-03-14T10:30:45'"

    @pytest.mark.asyncio
    async def test_non_matching_prefix_gives_empty_documents(self, settings, small_mapping):
        record = {"code": "X1", "department": "ENG-Core", "effectiveStartDate": "/Date(1700000000000)/"}
        sales = dataclasses.replace(settings, department_filter="SALES")

        result = await _orchestrator(sales, FakePageSource([[record]]), small_mapping).run()

        assert result.total_fetched == 1
        assert result.total_filtered == 0
        oracle = Path(result.output_files["oracle"]).read_text(encoding="utf-8")
        assert "MERGE" not in oracle
        assert "-- Total Records: 0\n" in oracle

    @pytest.mark.asyncio
    async def test_progress_callback(self, settings, small_mapping):
        seen = []
        source = FakePageSource(_mixed_pages())

        await _orchestrator(settings, source, small_mapping, on_progress=seen.append).run()

        assert seen == [
            PageProgress(page=1, fetched=3, matched=2, total_matched=2),
            PageProgress(page=2, fetched=3, matched=1, total_matched=3),
            PageProgress(page=3, fetched=1, matched=1, total_matched=4),
        ]

    @pytest.mark.asyncio
    async def test_fetch_error_writes_nothing(self, settings, small_mapping, tmp_path, fetch_error):
        source = FakePageSource(_mixed_pages(), error=fetch_error, fail_on_call=2)

        with pytest.raises(FetchError, match="API Error 401"):
            await _orchestrator(settings, source, small_mapping).run()

        assert source.closed is True
        assert not (tmp_path / "output").exists()

    @pytest.mark.asyncio
    async def test_failed_write_removes_files_from_same_run(self, settings, small_mapping, tmp_path, monkeypatch):
        async def write_or_fail(path, content):
            if path.name.endswith("_postgres.sql"):
                raise OutputError(str(path), "No space left on device")
            return await write_document(path, content)

        monkeypatch.setattr("position_sync.orchestrator.write_document", write_or_fail)

        with pytest.raises(OutputError, match="No space left on device"):
            await _orchestrator(settings, FakePageSource([make_records(2)]), small_mapping).run()

        assert list((tmp_path / "output").glob("*.sql")) == []

    @pytest.mark.asyncio
    async def test_invalid_date_rejected_before_fetch(self, settings, small_mapping):
        source = FakePageSource(_mixed_pages())

        with pytest.raises(ValidationError, match="Invalid startDate format"):
            await _orchestrator(settings, source, small_mapping).run("2024/01/01")

        assert source.calls == []

    @pytest.mark.asyncio
    async def test_missing_credentials_rejected_before_fetch(self, settings, small_mapping):
        source = FakePageSource(_mixed_pages())
        anonymous = dataclasses.replace(settings, password="")

        with pytest.raises(ConfigurationError):
            await _orchestrator(anonymous, source, small_mapping).run()

        assert source.calls == []

    def test_unknown_dialect_rejected_at_construction(self, settings, small_mapping):
        with pytest.raises(ValueError, match="Unsupported SQL dialect"):
            _orchestrator(dataclasses.replace(settings, dialects=("mysql",)), FakePageSource([]), small_mapping)

    @pytest.mark.asyncio
    async def test_single_dialect(self, settings, small_mapping):
        only_postgres = dataclasses.replace(settings, dialects=("postgres",))

        result = await _orchestrator(only_postgres, FakePageSource([make_records(1)]), small_mapping).run()

        assert list(result.output_files) == ["postgres"]

    @pytest.mark.asyncio
    async def test_runs_are_independent(self, settings, small_mapping):
        first = await _orchestrator(settings, FakePageSource([make_records(2)]), small_mapping).run()
        second = await _orchestrator(settings, FakePageSource([make_records(1)]), small_mapping).run()

        assert first.total_filtered == 2
        assert second.total_filtered == 1


class TestSyncResult:
    """Tests for SyncResult.to_dict."""

    def test_to_dict(self):
        result = SyncResult(
            total_fetched=10,
            total_filtered=4,
            statements_generated=4,
            output_files={"oracle": "out/a_oracle.sql", "postgres": "out/a_postgres.sql"},
            duration=1.2345,
        )
        assert result.to_dict() == {
            "success": True,
            "totalFetched": 10,
            "totalFiltered": 4,
            "sqlStatementsGenerated": 4,
            "oracleFile": "out/a_oracle.sql",
            "postgresFile": "out/a_postgres.sql",
            "duration": "1.23s",
        }


class TestOutput:
    """Tests for output file naming and writing."""

    def test_file_timestamp(self):
        assert file_timestamp(FIXED_NOW) == TIMESTAMP

    def test_output_path(self):
        assert output_path("output/positions.sql", TIMESTAMP, "oracle") == Path(
            f"output/positions_{TIMESTAMP}_oracle.sql"
        )

    def test_output_path_without_extension(self):
        assert output_path("exports/positions", TIMESTAMP, "postgres") == Path(
            f"exports/positions_{TIMESTAMP}_postgres.sql"
        )

    @pytest.mark.asyncio
    async def test_write_document_creates_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "out.sql"

        await write_document(path, "SELECT 1;\n")

        assert path.read_text(encoding="utf-8") == "SELECT 1;\n"

    @pytest.mark.asyncio
    async def test_write_document_failure(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(OutputError, match="Failed to write"):
            await write_document(blocker / "out.sql", "SELECT 1;\n")
