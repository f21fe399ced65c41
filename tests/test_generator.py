"""
Tests for SQL dialects and script generation.
"""

from datetime import datetime, timedelta, timezone

import pytest

from position_sync.mapping import DEFAULT_FIELD_MAPPING
from position_sync.sql import dialects
from position_sync.sql.dialects import Dialect, OracleDialect, PostgresDialect, get_dialect, register_dialect
from position_sync.sql.generator import SqlGenerator, isoformat_z

NOW = datetime(2024, 3, 15, 10, 30, 45, 123000, tzinfo=timezone.utc)

RECORD = {
    "code": "X1",
    "jobTitle": "Dev's Lead",
    "effectiveStartDate": "/Date(1700000000000)/",
    "department": "ENG-Core",
}


def _generator(mapping, **kwargs) -> SqlGenerator:
    kwargs.setdefault("clock", lambda: NOW)
    return SqlGenerator(mapping=mapping, **kwargs)


class TestDialects:
    """Tests for dialect lookup."""

    def test_get_dialect(self):
        assert isinstance(get_dialect("oracle"), OracleDialect)
        assert isinstance(get_dialect("postgres"), PostgresDialect)
        assert isinstance(get_dialect("PostgreSQL"), PostgresDialect)

    def test_unknown_dialect(self):
        with pytest.raises(ValueError, match="Supported dialects"):
            get_dialect("db2")

    def test_register_dialect(self, monkeypatch):
        monkeypatch.setattr(dialects, "_DIALECTS", dict(dialects._DIALECTS))

        class SqliteDialect(Dialect):
            @property
            def name(self) -> str:
                return "sqlite"

            def timestamp_literal(self, timestamp: str) -> str:
                return f"'{timestamp}'"

            def insert_if_absent(self, table, columns, values, key_column, key_literal):
                return f"INSERT OR IGNORE INTO {table} ({', '.join(columns)}) VALUES ({', '.join(values)});"

        register_dialect("sqlite", SqliteDialect)
        assert get_dialect("sqlite").name == "sqlite"

    def test_registry_untouched_by_other_tests(self):
        with pytest.raises(ValueError) as exc_info:
            get_dialect("sqlite")
        assert str(exc_info.value).endswith("Supported dialects: oracle, postgres, postgresql")


class TestGenerateUpsert:
    """Tests for SqlGenerator.generate_upsert."""

    def test_postgres_statement(self, small_mapping):
        sql = _generator(small_mapping).generate_upsert(RECORD, "postgres")
        assert sql == (
            "INSERT INTO job_sf_position (code, job_title, effective_start_date, department)\n"
            "VALUES ('X1', 'Dev''s Lead', '2023-11-14 22:13:20.000'::timestamp, 'ENG-Core')\n"
            "ON CONFLICT (code) DO NOTHING;"
        )

    def test_oracle_statement(self, small_mapping):
        sql = _generator(small_mapping).generate_upsert(RECORD, "oracle")
        assert sql == (
            "MERGE INTO job_sf_position target\n"
            "USING (SELECT 'X1' AS code FROM dual) source\n"
            "ON (target.code = source.code)\n"
            "WHEN NOT MATCHED THEN\n"
            "    INSERT (code, job_title, effective_start_date, department)\n"
            "    VALUES ('X1', 'Dev''s Lead', "
            "TO_TIMESTAMP('2023-11-14 22:13:20.000', 'YYYY-MM-DD HH24:MI:SS.FF3'), 'ENG-Core');"
        )

    def test_code_with_quote_is_escaped_in_merge_source(self, small_mapping):
        sql = _generator(small_mapping).generate_upsert({"code": "O'1"}, "oracle")
        assert "SELECT 'O''1' AS code FROM dual" in sql

    def test_missing_values_are_null(self, small_mapping):
        sql = _generator(small_mapping).generate_upsert({"code": "X2"}, "postgres")
        assert "VALUES ('X2', NULL, NULL, NULL)" in sql

    def test_custom_table(self, small_mapping):
        sql = _generator(small_mapping, table="positions_stage").generate_upsert(RECORD, "postgres")
        assert sql.startswith("INSERT INTO positions_stage (")

    @pytest.mark.parametrize("dialect", ["oracle", "postgres"])
    def test_default_mapping_columns_in_order(self, dialect):
        sql = SqlGenerator(clock=lambda: NOW).generate_upsert({"code": "X1"}, dialect)
        assert f"({', '.join(DEFAULT_FIELD_MAPPING.columns)})" in sql

    @pytest.mark.parametrize("dialect", ["oracle", "postgres"])
    def test_column_set_identical_across_records(self, small_mapping, dialect):
        generator = _generator(small_mapping)
        first = generator.generate_upsert({"code": "A"}, dialect)
        second = generator.generate_upsert({"code": "B", "jobTitle": "x", "bogus": 1}, dialect)
        columns = "(code, job_title, effective_start_date, department)"
        assert columns in first
        assert columns in second

    def test_key_column_must_be_mapped(self, small_mapping):
        with pytest.raises(ValueError, match="Key column"):
            SqlGenerator(mapping=small_mapping, key_column="position_id")


class TestHeaderFooter:
    """Tests for header and footer blocks."""

    def test_header_with_both_dates(self, small_mapping):
        header = _generator(small_mapping, department_filter="ENG").generate_header("2024-01-01", "2024-01-31", "oracle")
        assert header == (
            "-- ============================================\n"
            "-- SF Position Sync SQL (ORACLE)\n"
            "-- Generated: 2024-03-15T10:30:45.123Z\n"
            "-- Date Range: 2024-01-01 to 2024-01-31\n"
            "-- Department Filter: ENG*\n"
            "-- Database: ORACLE\n"
            "-- ============================================\n"
            "\n"
        )

    def test_header_with_start_only(self, small_mapping):
        header = _generator(small_mapping).generate_header("2024-01-01", None, "postgres")
        assert "-- Date Range: 2024-01-01 to N/A\n" in header
        assert "-- Database: POSTGRES\n" in header

    def test_header_with_end_only(self, small_mapping):
        header = _generator(small_mapping).generate_header(None, "2024-01-31", "postgres")
        assert "-- Date Range: N/A to 2024-01-31\n" in header

    def test_header_without_dates_says_yesterday(self, small_mapping):
        header = _generator(small_mapping).generate_header(None, None, "postgres")
        assert "-- Date Range: Yesterday\n" in header

    def test_header_differs_only_in_timestamp(self, small_mapping):
        first = _generator(small_mapping, clock=lambda: NOW).generate_header("2024-01-01", None, "oracle")
        later = NOW + timedelta(hours=5, milliseconds=7)
        second = _generator(small_mapping, clock=lambda: later).generate_header("2024-01-01", None, "oracle")

        diff = [(a, b) for a, b in zip(first.splitlines(), second.splitlines()) if a != b]
        assert len(first.splitlines()) == len(second.splitlines())
        assert len(diff) == 1
        assert diff[0][0].startswith("-- Generated: ")
        assert diff[0][1].startswith("-- Generated: ")

    def test_footer(self, small_mapping):
        footer = _generator(small_mapping).generate_footer(42)
        assert footer == (
            "\n"
            "-- ============================================\n"
            "-- Total Records: 42\n"
            "-- End of SQL file\n"
            "-- ============================================\n"
        )


class TestRenderDocument:
    """Tests for full document rendering."""

    def test_statements_separated_by_blank_line(self, small_mapping):
        generator = _generator(small_mapping)
        document, count = generator.render_document([{"code": "A"}, {"code": "B"}], "postgres")

        assert count == 2
        first = generator.generate_upsert({"code": "A"}, "postgres")
        second = generator.generate_upsert({"code": "B"}, "postgres")
        assert f"{first}\n\n{second}" in document
        assert document.startswith(generator.generate_header(None, None, "postgres"))
        assert document.endswith(generator.generate_footer(2))

    def test_empty_batch(self, small_mapping):
        generator = _generator(small_mapping)
        document, count = generator.render_document([], "oracle", "2024-01-01", None)
        assert count == 0
        assert document == generator.generate_header("2024-01-01", None, "oracle") + generator.generate_footer(0)


def test_isoformat_z():
    assert isoformat_z(NOW) == "2024-03-15T10:30:45.123Z"
    assert isoformat_z(datetime(2024, 1, 1, 5, 0, tzinfo=timezone(timedelta(hours=2)))) == "2024-01-01T03:00:00.000Z"
