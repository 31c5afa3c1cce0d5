"""Path and name to database identifier normalization."""

import re
from pathlib import PurePath

from tosql.errors import InvalidPathError

_INVALID_RUN = re.compile(r"[^a-z0-9_]+")


def normalize_name(text: str) -> str:
    """Turn arbitrary text into a valid identifier.

    Lower-cases, collapses every run of characters outside ``[a-z0-9_]`` into
    one underscore, strips outer underscores and prefixes ``_`` when the
    result would start with a digit. ``"Q1 Sales!"`` -> ``"q1_sales"``,
    ``"2021 data"`` -> ``"_2021_data"``.
    """
    name = _INVALID_RUN.sub("_", text.lower()).strip("_")
    if not name:
        raise InvalidPathError(f"Cannot derive an identifier from {text!r}")
    if name[0].isdigit():
        name = f"_{name}"
    return name


def path_to_identifier(path: str | PurePath) -> str:
    """Derive an identifier from a file path's base name, without extension."""
    if not str(path):
        raise InvalidPathError("Empty path")
    return normalize_name(PurePath(path).stem)
