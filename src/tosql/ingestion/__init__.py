"""Source readers and table materialization."""

from tosql.ingestion.delimited import read_delimited
from tosql.ingestion.materialize import create_table, ensure_database
from tosql.ingestion.schema import infer_schema
from tosql.ingestion.tables import NamedTable
from tosql.ingestion.workbook import read_workbook

__all__ = [
    "NamedTable",
    "create_table",
    "ensure_database",
    "infer_schema",
    "read_delimited",
    "read_workbook",
]
