"""
SQL generation: value formatting, dialects and script rendering.
"""

from position_sync.sql.dialects import Dialect, OracleDialect, PostgresDialect, get_dialect, register_dialect
from position_sync.sql.formatter import DATE_COLUMNS, escape_text, format_column_value, parse_proprietary_date
from position_sync.sql.generator import SqlGenerator

__all__ = [
    "Dialect",
    "OracleDialect",
    "PostgresDialect",
    "get_dialect",
    "register_dialect",
    "DATE_COLUMNS",
    "escape_text",
    "format_column_value",
    "parse_proprietary_date",
    "SqlGenerator",
]
