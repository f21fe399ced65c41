"""
SQL script generation for synced positions.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from position_sync.mapping import DEFAULT_FIELD_MAPPING, FieldMapping, PositionRecord, transform
from position_sync.sql.dialects import Dialect, get_dialect
from position_sync.sql.formatter import DATE_COLUMNS, format_column_value

RULE = "-- ============================================"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_z(moment: datetime) -> str:
    """UTC instant as ``YYYY-MM-DDTHH:MM:SS.sssZ``."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


class SqlGenerator:
    """
    Builds insert-if-not-exists statements and complete SQL documents.

    Args:
        mapping: API field -> column mapping; fixes column set and order
        table: Target table name
        department_filter: Prefix in effect, reported in the header
        key_column: Unique business key column
        clock: Returns the current time; the header's "Generated" line uses it
    """

    def __init__(
        self,
        mapping: FieldMapping = DEFAULT_FIELD_MAPPING,
        table: str = "job_sf_position",
        department_filter: str = "",
        key_column: str = "code",
        clock: Callable[[], datetime] = utc_now,
        date_columns: Iterable[str] = DATE_COLUMNS,
    ):
        if key_column not in mapping.columns:
            raise ValueError(f"Key column '{key_column}' is not a mapped column")
        self.mapping = mapping
        self.table = table
        self.department_filter = department_filter
        self.key_column = key_column
        self.clock = clock
        self.date_columns = frozenset(date_columns)

    def generate_upsert(self, record: PositionRecord, dialect: str | Dialect) -> str:
        """Render one statement inserting ``record`` unless its key already exists."""
        if isinstance(dialect, str):
            dialect = get_dialect(dialect)

        row = transform(record, self.mapping)
        columns = self.mapping.columns
        values = [format_column_value(row[col], col, dialect, self.date_columns) for col in columns]
        key_literal = values[columns.index(self.key_column)]
        return dialect.insert_if_absent(self.table, columns, values, self.key_column, key_literal)

    def generate_header(self, start_date: str | None, end_date: str | None, dialect: str | Dialect) -> str:
        name = (dialect if isinstance(dialect, str) else dialect.name).upper()
        if start_date or end_date:
            date_range = f"{start_date or 'N/A'} to {end_date or 'N/A'}"
        else:
            date_range = "Yesterday"
        return (
            f"{RULE}\n"
            f"-- SF Position Sync SQL ({name})\n"
            f"-- Generated: {isoformat_z(self.clock())}\n"
            f"-- Date Range: {date_range}\n"
            f"-- Department Filter: {self.department_filter}*\n"
            f"-- Database: {name}\n"
            f"{RULE}\n"
            f"\n"
        )

    def generate_footer(self, total_records: int) -> str:
        return f"\n{RULE}\n-- Total Records: {total_records}\n-- End of SQL file\n{RULE}\n"

    def render_document(
        self,
        records: Iterable[PositionRecord],
        dialect: str | Dialect,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> tuple[str, int]:
        """
        Render a full script: header, statements separated by a blank line, footer.

        Returns:
            (document text, number of statements)
        """
        if isinstance(dialect, str):
            dialect = get_dialect(dialect)
        statements = [self.generate_upsert(record, dialect) for record in records]
        document = (
            self.generate_header(start_date, end_date, dialect)
            + "\n\n".join(statements)
            + self.generate_footer(len(statements))
        )
        return document, len(statements)
