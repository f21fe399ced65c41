"""
Target SQL dialects.

Each dialect renders the same "insert if the business key is absent"
statement in its own syntax. Statements from different dialects produce the
same rows and never update an existing row.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence


class Dialect(ABC):
    """Base class for insert-if-not-exists statement builders."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Dialect tag, e.g. 'oracle'."""
        ...

    @abstractmethod
    def timestamp_literal(self, timestamp: str) -> str:
        """Wrap a canonical ``YYYY-MM-DD HH:MM:SS.sss`` string as a timestamp literal."""
        ...

    @abstractmethod
    def insert_if_absent(
        self,
        table: str,
        columns: Sequence[str],
        values: Sequence[str],
        key_column: str,
        key_literal: str,
    ) -> str:
        """
        Render one complete statement.

        Args:
            table: Target table name
            columns: Column names, in output order
            values: Already-formatted SQL literals, aligned with ``columns``
            key_column: Unique business key column
            key_literal: Formatted literal of the key value

        Returns:
            SQL statement terminated by ``;``
        """
        ...


class OracleDialect(Dialect):
    """MERGE against a single-row ``dual`` source, inserting when unmatched."""

    @property
    def name(self) -> str:
        return "oracle"

    def timestamp_literal(self, timestamp: str) -> str:
        return f"TO_TIMESTAMP('{timestamp}', 'YYYY-MM-DD HH24:MI:SS.FF3')"

    def insert_if_absent(
        self,
        table: str,
        columns: Sequence[str],
        values: Sequence[str],
        key_column: str,
        key_literal: str,
    ) -> str:
        return (
            f"MERGE INTO {table} target\n"
            f"USING (SELECT {key_literal} AS {key_column} FROM dual) source\n"
            f"ON (target.{key_column} = source.{key_column})\n"
            f"WHEN NOT MATCHED THEN\n"
            f"    INSERT ({', '.join(columns)})\n"
            f"    VALUES ({', '.join(values)});"
        )


class PostgresDialect(Dialect):
    """Plain INSERT that skips rows whose key already exists."""

    @property
    def name(self) -> str:
        return "postgres"

    def timestamp_literal(self, timestamp: str) -> str:
        return f"'{timestamp}'::timestamp"

    def insert_if_absent(
        self,
        table: str,
        columns: Sequence[str],
        values: Sequence[str],
        key_column: str,
        key_literal: str,
    ) -> str:
        return (
            f"INSERT INTO {table} ({', '.join(columns)})\n"
            f"VALUES ({', '.join(values)})\n"
            f"ON CONFLICT ({key_column}) DO NOTHING;"
        )


_DIALECTS: dict[str, type[Dialect]] = {
    "oracle": OracleDialect,
    "postgres": PostgresDialect,
    "postgresql": PostgresDialect,
}


def get_dialect(name: str) -> Dialect:
    """
    Get a dialect instance by tag.

    Raises:
        ValueError: If the dialect is not supported
    """
    cls = _DIALECTS.get(name.lower())
    if cls is None:
        supported = ", ".join(sorted(_DIALECTS))
        raise ValueError(f"Unsupported SQL dialect: '{name}'. Supported dialects: {supported}")
    return cls()


def register_dialect(name: str, dialect_cls: type[Dialect]) -> None:
    """Make an additional dialect available to ``get_dialect``."""
    _DIALECTS[name.lower()] = dialect_cls
