"""Abstract DatabaseService interface."""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, ClassVar, Iterator

from tosql.types import Params, ParamsList

COLUMN_TYPES = {
    "integer": "INTEGER",
    "real": "REAL",
    "boolean": "BOOLEAN",
    "text": "TEXT",
}


def quote_identifier(name: str) -> str:
    """Double-quote an identifier, escaping embedded quotes."""
    return '"' + name.replace('"', '""') + '"'


class DatabaseService(ABC):
    """Database-agnostic sink for materialized tables.

    Design principles:
    - Stateless: no mutable state beyond the connection pool and provisioned databases
    - Thread-safe: each transaction() acquires its own connection
    - DB-agnostic: callers program against this ABC, never a concrete backend
    """

    # Driver exception types; callers translate these into to-sql errors.
    driver_errors: ClassVar[tuple[type[Exception], ...]] = ()

    column_types: ClassVar[dict[str, str]] = COLUMN_TYPES

    @abstractmethod
    def connect(self) -> None:
        """Initialize the connection pool."""

    @abstractmethod
    def close(self) -> None:
        """Close all connections and release resources."""

    @abstractmethod
    def execute(self, sql: str, params: Params | None = None) -> list[dict[str, Any]]:
        """Execute a single SQL statement and return rows as dicts."""

    @abstractmethod
    def execute_many(self, sql: str, params_list: ParamsList) -> None:
        """Execute a SQL statement for each parameter set."""

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Context manager: acquires a connection, commits on success, rolls back on error."""

    @abstractmethod
    def execute_ddl(self, sql: str) -> None:
        """Execute DDL statements (CREATE TABLE, DROP TABLE, etc.)."""

    @abstractmethod
    def ensure_database(self, name: str) -> None:
        """Create the named database if absent. Idempotent."""

    @abstractmethod
    def placeholder(self) -> str:
        """Parameter placeholder of the driver's paramstyle."""

    def qualify(self, database: str, table: str) -> str:
        """Fully qualified, quoted table reference."""
        return f"{quote_identifier(database)}.{quote_identifier(table)}"

    def quote_for_params(self, name: str) -> str:
        """Quote an identifier for use in a parameterized statement."""
        return quote_identifier(name)

    def column_type(self, kind: str) -> str:
        """SQL column type for an inferred kind (integer, real, boolean, text)."""
        return self.column_types[kind]

    def batch_insert(self, table: str, columns: list[str], rows: list[tuple]) -> None:
        """Insert multiple rows into a (qualified) table inside the current transaction."""
        if not rows:
            return
        cols = ", ".join(self.quote_for_params(c) for c in columns)
        placeholders = ", ".join(self.placeholder() for _ in columns)
        sql = f"INSERT INTO {table} ({cols}) VALUES ({placeholders})"
        self.execute_many(sql, rows)
