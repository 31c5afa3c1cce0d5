"""Shared test fixtures."""

import openpyxl
import pytest

from tosql import create_service


@pytest.fixture
def db_service(tmp_path):
    """Provide a fresh SQLite DatabaseService for each test."""
    db_path = tmp_path / "test.db"
    service = create_service(f"sqlite:///{db_path}")
    service.connect()
    yield service
    service.close()


@pytest.fixture
def make_workbook(tmp_path):
    """Write an .xlsx from {sheet title: [rows]} (insertion order = sheet order)."""

    def _make(sheets: dict[str, list[list]], name: str = "book.xlsx"):
        wb = openpyxl.Workbook()
        wb.remove(wb.active)
        for title, rows in sheets.items():
            ws = wb.create_sheet(title)
            for row in rows:
                ws.append(row)
        path = tmp_path / name
        wb.save(path)
        return path

    return _make


def table_names(service, database: str) -> set[str]:
    with service.transaction():
        rows = service.execute(
            f'SELECT name FROM "{database}".sqlite_master WHERE type = ?', ("table",)
        )
    return {r["name"] for r in rows}


def column_types(service, database: str, table: str) -> dict[str, str]:
    with service.transaction():
        rows = service.execute(f'PRAGMA "{database}".table_info("{table}")')
    return {r["name"]: r["type"] for r in rows}
