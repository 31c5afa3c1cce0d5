"""Spreadsheet workbook to one NamedTable per worksheet."""

import logging
import zipfile
from pathlib import Path

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from tosql.errors import InvalidPathError, ReadError
from tosql.identifiers import normalize_name
from tosql.ingestion.tables import NamedTable, build_table

logger = logging.getLogger(__name__)


def sheet_table_names(titles: list[str]) -> list[str]:
    """Normalize sheet titles into unique identifiers, in sheet order.

    A title that normalizes to nothing becomes ``sheet_<position>``; a name
    already taken by an earlier sheet gets ``_2``, ``_3``... appended.
    """
    names: list[str] = []
    taken: set[str] = set()
    for position, title in enumerate(titles, start=1):
        try:
            base = normalize_name(title)
        except InvalidPathError:
            base = f"sheet_{position}"
        name = base
        suffix = 2
        while name in taken:
            name = f"{base}_{suffix}"
            suffix += 1
        taken.add(name)
        names.append(name)
    return names


def read_workbook(path: str | Path) -> list[NamedTable]:
    """Read every worksheet of a workbook, in the workbook's sheet order."""
    try:
        wb = openpyxl.load_workbook(str(path), read_only=True, data_only=True)
    except (OSError, InvalidFileException, zipfile.BadZipFile, KeyError, ValueError) as e:
        raise ReadError(f"Cannot open workbook {path}: {e}") from e

    try:
        sheets = wb.worksheets
        names = sheet_table_names([ws.title for ws in sheets])
        tables = []
        for name, ws in zip(names, sheets):
            table = build_table(name, ws.iter_rows(values_only=True))
            logger.debug(
                "Sheet %r -> %s: %d columns, %d rows",
                ws.title,
                name,
                len(table.columns),
                len(table.rows),
            )
            tables.append(table)
    finally:
        wb.close()
    return tables
