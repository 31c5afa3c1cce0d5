"""NamedTable and the header/row shaping shared by both readers."""

from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from tosql.types import Record


@dataclass
class NamedTable:
    """One logical table produced by a reader: identifier, header, records."""

    name: str
    columns: list[str] = field(default_factory=list)
    rows: list[Record] = field(default_factory=list)


def header_labels(cells: Sequence[Any]) -> list[str]:
    """Build column labels from a header row.

    Blank cells become ``column_<n>`` (1-based position); repeated labels get
    ``_2``, ``_3``... appended in order of appearance. Labels differing only in
    case count as repeats, since sinks fold column names.
    """
    labels: list[str] = []
    seen: set[str] = set()
    for position, cell in enumerate(cells, start=1):
        label = "" if cell is None else str(cell).strip()
        if not label:
            label = f"column_{position}"
        candidate = label
        suffix = 2
        while candidate.casefold() in seen:
            candidate = f"{label}_{suffix}"
            suffix += 1
        seen.add(candidate.casefold())
        labels.append(candidate)
    return labels


def is_blank(cells: Sequence[Any]) -> bool:
    return all(cell is None or (isinstance(cell, str) and not cell.strip()) for cell in cells)


def to_record(labels: list[str], cells: Sequence[Any]) -> Record:
    """Map cells onto labels, padding short rows with None and dropping extras."""
    padded = list(cells[: len(labels)])
    padded.extend([None] * (len(labels) - len(padded)))
    return dict(zip(labels, padded))


def build_table(name: str, rows: Iterable[Sequence[Any]]) -> NamedTable:
    """Consume raw rows: the first non-blank one is the header, the rest are records."""
    table = NamedTable(name=name)
    for cells in rows:
        if is_blank(cells):
            continue
        if not table.columns:
            table.columns = header_labels(cells)
            continue
        table.rows.append(to_record(table.columns, cells))
    return table
