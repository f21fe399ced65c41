"""
Field mapping between SuccessFactors Position fields and database columns.

The mapping is an explicit, immutable value handed to the transformer and
the SQL generator; tests can substitute a smaller one.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

PositionRecord = dict[str, Any]
TransformedRecord = dict[str, Any]


class FieldMapping(Mapping[str, str]):
    """
    Ordered, read-only mapping from API field name to destination column.

    Iteration order defines both the ``$select`` projection requested from the
    API and the column order of every generated INSERT.

    Example:
        >>> mapping = FieldMapping([("code", "code"), ("jobTitle", "job_title")])
        >>> mapping.select_fields
        'code,jobTitle'
        >>> mapping.columns
        ('code', 'job_title')
    """

    def __init__(self, pairs: Iterable[tuple[str, str]] | Mapping[str, str]):
        items = list(pairs.items()) if isinstance(pairs, Mapping) else list(pairs)
        data: dict[str, str] = {}
        for api_field, column in items:
            if api_field in data:
                raise ValueError(f"Duplicate API field in mapping: {api_field}")
            data[api_field] = column
        if len(set(data.values())) != len(data):
            raise ValueError("Destination columns must be unique")
        self._data = MappingProxyType(data)

    def __getitem__(self, api_field: str) -> str:
        return self._data[api_field]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"FieldMapping({list(self._data.items())!r})"

    @property
    def columns(self) -> tuple[str, ...]:
        """Destination columns in mapping order."""
        return tuple(self._data.values())

    @property
    def select_fields(self) -> str:
        """Comma-separated API fields for the OData ``$select`` parameter."""
        return ",".join(self._data)


DEFAULT_FIELD_MAPPING = FieldMapping(
    [
        ("code", "code"),
        ("effectiveStartDate", "effective_start_date"),
        ("cust_subCode", "cust_sub_code"),
        ("cust_subDepartment", "cust_sub_department"),
        ("lastModifiedDateTime", "last_modified_date_time"),
        ("jobCode", "job_code"),
        ("jobTitle", "job_title"),
        ("payRange", "pay_range"),
        ("cust_subDepartment2", "cust_sub_department2"),
        ("costCenter", "cost_center"),
        ("externalName_localized", "external_name_localized"),
        ("effectiveStatus", "effective_status"),
        ("externalName_vi_VN", "external_name_vi"),
        ("effectiveEndDate", "effective_end_date"),
        ("payGrade", "pay_grade"),
        ("cust_compensationpackage", "Compensation_Package"),
        ("department", "department"),
        ("cust_max", "cust_max"),
        ("jobLevel", "job_level"),
        ("cust_min", "cust_min"),
        ("externalName_en_US", "externalName_en"),
    ]
)


def transform(api_record: PositionRecord, mapping: FieldMapping = DEFAULT_FIELD_MAPPING) -> TransformedRecord:
    """
    Rename API fields to database columns.

    Keys present in the record (explicit ``None`` included) are copied, absent
    keys become ``None``; keys not in the mapping are dropped.
    """
    return {column: api_record.get(api_field) for api_field, column in mapping.items()}
