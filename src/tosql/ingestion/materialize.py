"""Database provisioning and table materialization."""

import logging

from tosql.errors import ProvisionError, SchemaError, WriteError
from tosql.ingestion.schema import convert, infer_schema
from tosql.ingestion.tables import NamedTable
from tosql.service import DatabaseService, quote_identifier

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 5000


def ensure_database(service: DatabaseService, name: str) -> None:
    """Create the target database if absent. Must run before any create_table."""
    try:
        service.ensure_database(name)
    except service.driver_errors as e:
        raise ProvisionError(f"Cannot provision database {name!r}: {e}") from e
    logger.info("Database %s ready", name)


def check_labels(table: NamedTable, labels: list[str]) -> None:
    """Reject labels the sink would treat as the same column."""
    seen: dict[str, str] = {}
    for label in labels:
        folded = label.casefold()
        if folded in seen:
            raise SchemaError(
                f"Table {table.name}: columns {seen[folded]!r} and {label!r} collide"
            )
        seen[folded] = label


def table_ddl(service: DatabaseService, qualified: str, schema: dict[str, str]) -> str:
    columns = ",\n    ".join(
        f"{quote_identifier(label)} {service.column_type(kind)}" for label, kind in schema.items()
    )
    return f"DROP TABLE IF EXISTS {qualified};\nCREATE TABLE {qualified} (\n    {columns}\n);"


def create_table(
    service: DatabaseService,
    database: str,
    table: NamedTable,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int | None:
    """Materialize a NamedTable: infer its schema, recreate it, insert every row.

    An existing table of the same name is dropped first. Rows go in chunks of
    chunk_size, one transaction per chunk. Returns the number of rows inserted,
    or None when the table has no columns and nothing was created.
    """
    schema = infer_schema(table.columns, table.rows)
    if not schema:
        logger.warning("Table %s has no columns, skipping", table.name)
        return None
    labels = list(schema)
    check_labels(table, labels)

    qualified = service.qualify(database, table.name)
    logger.debug("Schema for %s: %s", qualified, schema)

    try:
        service.execute_ddl(table_ddl(service, qualified, schema))
        total = 0
        for start in range(0, len(table.rows), chunk_size):
            chunk = [
                tuple(convert(row.get(label), schema[label]) for label in labels)
                for row in table.rows[start : start + chunk_size]
            ]
            with service.transaction():
                service.batch_insert(qualified, labels, chunk)
            total += len(chunk)
    except service.driver_errors as e:
        raise WriteError(f"Cannot write table {qualified}: {e}") from e

    logger.info("Created table %s: %d rows", qualified, total)
    return total
