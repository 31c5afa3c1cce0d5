"""Run orchestration: classify sources, provision the database, ingest.

The workbook pipeline and the delimited pipeline run concurrently on one
event loop. Each pipeline handles its paths strictly in order, finishing a
path's materialization before reading the next. The first failure from either
pipeline is captured; the other pipeline runs to completion before the
failure is raised.
"""

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from pathlib import PurePath

from tosql.errors import InvalidPathError
from tosql.identifiers import normalize_name, path_to_identifier
from tosql.ingestion.delimited import read_delimited
from tosql.ingestion.materialize import DEFAULT_CHUNK_SIZE, create_table, ensure_database
from tosql.ingestion.tables import NamedTable
from tosql.ingestion.workbook import read_workbook
from tosql.service import DatabaseService

logger = logging.getLogger(__name__)

WORKBOOK_SUFFIXES = (".xlsx", ".xlsm")


class SourceKind(enum.Enum):
    WORKBOOK = "workbook"
    DELIMITED = "delimited"


def classify(path: str) -> SourceKind:
    """Workbook if the path has a workbook suffix, delimited otherwise."""
    if PurePath(path).suffix.lower() in WORKBOOK_SUFFIXES:
        return SourceKind.WORKBOOK
    return SourceKind.DELIMITED


@dataclass
class RunConfig:
    """Everything one run needs, as parsed from the command line."""

    database: str | None = None
    excel: str | None = None
    sv: list[str] = field(default_factory=list)
    paths: list[str] = field(default_factory=list)
    delimiter: str | None = None
    chunk_size: int = DEFAULT_CHUNK_SIZE
    verbose: bool = False

    @property
    def log_level(self) -> int:
        return logging.DEBUG if self.verbose else logging.INFO


@dataclass
class RunReport:
    database: str
    tables: list[tuple[str, int]] = field(default_factory=list)


def partition(config: RunConfig) -> tuple[list[str], list[str]]:
    """Split configured paths into (workbook paths, delimited paths), keeping order.

    Flagged paths keep their flag's kind; positional paths are classified.
    """
    workbooks = [config.excel] if config.excel else []
    delimited = list(config.sv)
    for path in config.paths:
        if classify(path) is SourceKind.WORKBOOK:
            workbooks.append(path)
        else:
            delimited.append(path)
    return workbooks, delimited


def resolve_database(config: RunConfig, workbooks: list[str]) -> str:
    """Explicit database name, else one derived from the first workbook."""
    if config.database:
        return normalize_name(config.database)
    if workbooks:
        return path_to_identifier(workbooks[0])
    raise InvalidPathError("No database name given and no workbook to derive one from")


class IngestionOrchestrator:
    """Classify -> Provision -> Ingest, for one run."""

    def __init__(self, service: DatabaseService, config: RunConfig):
        self._service = service
        self._config = config

    async def run(self) -> RunReport:
        workbooks, delimited = partition(self._config)
        database = resolve_database(self._config, workbooks)

        await asyncio.to_thread(ensure_database, self._service, database)

        report = RunReport(database=database)
        failures: list[Exception] = []

        async def capture(pipeline) -> None:
            try:
                await pipeline
            except Exception as e:
                failures.append(e)
                raise

        await asyncio.gather(
            capture(self._workbook_pipeline(database, workbooks, report)),
            capture(self._delimited_pipeline(database, delimited, report)),
            return_exceptions=True,
        )
        if failures:
            raise failures[0]
        return report

    async def _materialize(self, database: str, table: NamedTable, report: RunReport) -> None:
        rows = await asyncio.to_thread(
            create_table, self._service, database, table, self._config.chunk_size
        )
        if rows is None:
            logger.info("Skipped %s: no header and no rows", table.name)
            return
        report.tables.append((table.name, rows))

    async def _workbook_pipeline(
        self, database: str, paths: list[str], report: RunReport
    ) -> None:
        for path in paths:
            logger.debug("reading as workbook: %s", path)
            # Parsing is CPU-bound and runs on the loop without yielding.
            tables = read_workbook(path)
            for table in tables:
                await self._materialize(database, table, report)

    async def _delimited_pipeline(
        self, database: str, paths: list[str], report: RunReport
    ) -> None:
        for path in paths:
            logger.debug("reading as delimited: %s", path)
            table = await read_delimited(path, self._config.delimiter)
            await self._materialize(database, table, report)
