"""Delimited text file (CSV, TSV, ...) to a single NamedTable."""

import asyncio
import csv
import logging
import sys
from pathlib import Path

from tosql.errors import ParseError, ReadError
from tosql.identifiers import path_to_identifier
from tosql.ingestion.tables import NamedTable, build_table

logger = logging.getLogger(__name__)

SUFFIX_DELIMITERS = {".csv": ",", ".tsv": "\t", ".tab": "\t"}
SNIFF_DELIMITERS = ",\t;|"
SNIFF_BYTES = 64 * 1024

# Fields may be arbitrarily long; the csv default caps them at 128 KiB.
csv.field_size_limit(sys.maxsize)


def detect_delimiter(path: str | Path) -> str:
    """Pick the delimiter from the suffix, or sniff it from the file head."""
    suffix = Path(path).suffix.lower()
    if suffix in SUFFIX_DELIMITERS:
        return SUFFIX_DELIMITERS[suffix]
    with open(path, newline="", encoding="utf-8-sig") as f:
        sample = f.read(SNIFF_BYTES)
    try:
        return csv.Sniffer().sniff(sample, delimiters=SNIFF_DELIMITERS).delimiter
    except csv.Error:
        logger.debug("Could not sniff delimiter of %s, using comma", path)
        return ","


def read_rows(path: str | Path, delimiter: str | None = None) -> NamedTable:
    """Parse a delimited file synchronously.

    The file is streamed through csv.reader; only the resulting records are
    held in memory.
    """
    name = path_to_identifier(path)
    try:
        delimiter = delimiter or detect_delimiter(path)
        with open(path, newline="", encoding="utf-8-sig") as f:
            reader = csv.reader(f, delimiter=delimiter, strict=True)
            try:
                table = build_table(name, reader)
            except csv.Error as e:
                raise ParseError(f"{path}: line {reader.line_num}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ReadError(f"Cannot read {path}: {e}") from e

    logger.debug(
        "Read %s: %d columns, %d rows (delimiter %r)",
        path,
        len(table.columns),
        len(table.rows),
        delimiter,
    )
    return table


async def read_delimited(path: str | Path, delimiter: str | None = None) -> NamedTable:
    """Read one delimited file into one NamedTable named after the file."""
    return await asyncio.to_thread(read_rows, path, delimiter)
