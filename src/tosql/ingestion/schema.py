"""Column schema inference and value conversion for materialized tables."""

import re
from datetime import date, datetime, time
from typing import Any, Iterable

from tosql.types import Record

INTEGER = "integer"
REAL = "real"
BOOLEAN = "boolean"
TEXT = "text"

# Narrowest first; a column takes the widest kind any of its values needs.
KIND_ORDER = {INTEGER: 0, REAL: 1, BOOLEAN: 2, TEXT: 3}

_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_REAL_RE = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")
_BOOLEANS = {"true": True, "false": False}

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def value_kind(value: Any) -> str:
    """Classify one raw value. None and anything non-numeric, non-boolean is text."""
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, int):
        return INTEGER if INT64_MIN <= value <= INT64_MAX else TEXT
    if isinstance(value, float):
        return REAL
    if isinstance(value, str):
        text = value.strip()
        if _INTEGER_RE.match(text):
            # Wider than a 64-bit column; keep the digits verbatim.
            return INTEGER if INT64_MIN <= int(text) <= INT64_MAX else TEXT
        if _REAL_RE.match(text):
            return REAL
        if text.lower() in _BOOLEANS:
            return BOOLEAN
    return TEXT


def widen(current: str | None, kind: str) -> str:
    if current is None or KIND_ORDER[kind] > KIND_ORDER[current]:
        return kind
    return current


def infer_schema(columns: Iterable[str], rows: Iterable[Record]) -> dict[str, str]:
    """Infer an ordered {label: kind} mapping.

    Labels are the header columns followed by any label first seen in a row.
    Each row is visited once. Columns never given a value are text.
    """
    kinds: dict[str, str | None] = {label: None for label in columns}
    for row in rows:
        for label, value in row.items():
            kinds[label] = widen(kinds.get(label), value_kind(value))
    return {label: kind or TEXT for label, kind in kinds.items()}


def to_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def convert(value: Any, kind: str) -> Any:
    """Convert a raw value to the column kind, falling back to its textual form."""
    if value is None:
        return None
    try:
        if kind == INTEGER:
            number = int(value.strip()) if isinstance(value, str) else int(value)
            if INT64_MIN <= number <= INT64_MAX:
                return number
        elif kind == REAL:
            return float(value)
        elif kind == BOOLEAN:
            if isinstance(value, bool):
                return value
            if isinstance(value, str):
                text = value.strip().lower()
                if text in _BOOLEANS:
                    return _BOOLEANS[text]
                return float(text) != 0
            if isinstance(value, (int, float)):
                return value != 0
    except (TypeError, ValueError):
        pass
    return to_text(value)
