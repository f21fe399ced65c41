"""
SQL value formatting.

Parses SuccessFactors date encodings and turns raw record values into SQL
literals that are safe to embed in a generated script.
"""

from __future__ import annotations

import re
from collections.abc import Collection
from datetime import datetime, timedelta, timezone
from typing import Any

import dateutil.parser

from position_sync.sql.dialects import Dialect, get_dialect

DATE_COLUMNS = frozenset({"effective_start_date", "last_modified_date_time", "effective_end_date"})

# /Date(1700000000000)/ or /Date(1700000000000+0000)/; the offset is ignored
_WRAPPED_EPOCH = re.compile(r"/Date\((-?\d+)([+-]\d+)?\)/")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _parse_calendar_text(text: str) -> datetime:
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return dateutil.parser.parse(text)


def parse_proprietary_date(raw: Any) -> str | None:
    """
    Parse a SuccessFactors date into ``YYYY-MM-DD HH:MM:SS.sss`` (UTC).

    Accepts the wrapped epoch form ``/Date(N)/`` (N in milliseconds, possibly
    negative) or any string parseable as a calendar date/time: ISO-8601 first,
    then the looser forms dateutil understands. Naive date-times are read as
    UTC.

    Returns:
        The canonical timestamp string, or None for empty/unparseable input

    Example:
        >>> parse_proprietary_date("/Date(1700000000000)/")
        '2023-11-14 22:13:20.000'
        >>> parse_proprietary_date("not a date") is None
        True
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        parsed = raw
    else:
        text = str(raw).strip()
        if not text:
            return None
        match = _WRAPPED_EPOCH.search(text)
        try:
            if match:
                parsed = _EPOCH + timedelta(milliseconds=int(match.group(1)))
            else:
                parsed = _parse_calendar_text(text)
        except (ValueError, OverflowError):
            return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return (
        f"{parsed.year:04d}-{parsed.month:02d}-{parsed.day:02d} "
        f"{parsed.hour:02d}:{parsed.minute:02d}:{parsed.second:02d}.{parsed.microsecond // 1000:03d}"
    )


def escape_text(value: Any) -> str | None:
    """
    Escape a value for use inside a single-quoted SQL literal.

    Example:
        >>> escape_text("O'Brien")
        "O''Brien"
    """
    if value is None:
        return None
    return _as_text(value).replace("'", "''")


def _as_text(value: Any) -> str:
    # JSON spelling for booleans and whole numbers
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_column_value(
    value: Any,
    column_name: str,
    dialect: str | Dialect,
    date_columns: Collection[str] = DATE_COLUMNS,
) -> str:
    """
    Format a value as a SQL literal for the given column and dialect.

    - ``None`` -> ``NULL``
    - date columns -> the dialect's timestamp literal, or ``NULL`` when the
      value cannot be parsed
    - anything else -> quoted, escaped string
    """
    if value is None:
        return "NULL"

    if column_name in date_columns:
        parsed = parse_proprietary_date(value)
        if parsed is None:
            return "NULL"
        if isinstance(dialect, str):
            dialect = get_dialect(dialect)
        return dialect.timestamp_literal(parsed)

    return f"'{escape_text(value)}'"
