"""
Record selection: the server-side date filter sent with every page request
and the client-side department prefix filter applied to each page.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from position_sync.exceptions import ValidationError
from position_sync.mapping import PositionRecord

MODIFIED_FIELD = "lastModifiedDateTime"

_DATE_PARAM = re.compile(r"^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}:\d{2})?$")


def validate_date_param(value: str | None, field: str) -> str | None:
    """
    Check a trigger date (``YYYY-MM-DD`` or ``YYYY-MM-DDTHH:MM:SS``).

    Empty values mean "not given" and pass through as None.

    Raises:
        ValidationError: If the format is wrong or the date does not exist
    """
    if value is None or value == "":
        return None
    message = f"Invalid {field} format. Use yyyy-MM-dd or yyyy-MM-ddTHH:mm:ss"
    if not isinstance(value, str) or not _DATE_PARAM.match(value):
        raise ValidationError(message, field=field)
    try:
        datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(message, field=field) from None
    return value


def _odata_datetime(value: str) -> str:
    # Date-only bounds start at midnight
    if len(value) == 10:
        return f"{value}T00:00:00"
    return value


def yesterday(now: datetime | None = None) -> str:
    """``now - 1 day`` in UTC, truncated to seconds, as ``YYYY-MM-DDTHH:MM:SS``."""
    now = now or datetime.now(timezone.utc)
    moment = now.astimezone(timezone.utc) - timedelta(days=1)
    return moment.strftime("%Y-%m-%dT%H:%M:%S")


def build_date_filter(
    start_date: str | None = None,
    end_date: str | None = None,
    now: datetime | None = None,
) -> str:
    """
    Build the OData ``$filter`` expression on the last-modified timestamp.

    Both bounds -> inclusive range; one bound -> that bound alone; neither ->
    modified since yesterday.

    Example:
        >>> build_date_filter("2024-01-01", "2024-01-31T12:00:00")
        "lastModifiedDateTime ge datetime'2024-01-01T00:00:00' and lastModifiedDateTime le datetime'2024-01-31T12:00:00'"
    """
    start = _odata_datetime(start_date) if start_date else None
    end = _odata_datetime(end_date) if end_date else None

    if start and end:
        return f"{MODIFIED_FIELD} ge datetime'{start}' and {MODIFIED_FIELD} le datetime'{end}'"
    if start:
        return f"{MODIFIED_FIELD} ge datetime'{start}'"
    if end:
        return f"{MODIFIED_FIELD} le datetime'{end}'"
    return f"{MODIFIED_FIELD} ge datetime'{yesterday(now)}'"


def filter_by_prefix(records: Iterable[PositionRecord], prefix: str) -> list[PositionRecord]:
    """Keep records whose ``department`` starts with ``prefix`` (case-sensitive)."""
    return [record for record in records if str(record.get("department") or "").startswith(prefix)]
