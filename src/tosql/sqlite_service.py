"""SQLite implementation of DatabaseService."""

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from queue import Empty, Queue
from typing import Any, Iterator

from tosql.errors import ProvisionError
from tosql.service import DatabaseService, quote_identifier
from tosql.types import Params, ParamsList

RESERVED_SCHEMAS = {"main", "temp"}


class SQLiteDatabaseService(DatabaseService):
    """SQLite backend using stdlib sqlite3.

    Thread-safe via a connection pool (Queue). Each transaction() call
    acquires a dedicated connection and returns it on exit.

    A provisioned database is a sibling file ``<name>.db`` next to the main
    database file, ATTACHed to every pooled connection as schema ``<name>``.
    An in-memory main database cannot host provisioned databases.
    """

    driver_errors = (sqlite3.Error,)

    def __init__(self, db_path: str, pool_size: int = 4):
        self._db_path = db_path
        self._pool_size = pool_size
        self._pool: Queue[sqlite3.Connection] = Queue(maxsize=pool_size)
        self._local = threading.local()
        self._lock = threading.Lock()
        self._databases: dict[str, str] = {}
        self._attached: dict[int, set[str]] = {}

    def connect(self) -> None:
        for _ in range(self._pool_size):
            conn = sqlite3.connect(self._db_path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA foreign_keys=ON")
            self._attached[id(conn)] = set()
            self._pool.put(conn)

    def close(self) -> None:
        while not self._pool.empty():
            try:
                conn = self._pool.get_nowait()
                conn.close()
            except Empty:
                break
        self._attached.clear()

    def database_path(self, name: str) -> str:
        return str(Path(self._db_path).parent / f"{name}.db")

    def _attach_pending(self, conn: sqlite3.Connection) -> None:
        attached = self._attached.setdefault(id(conn), set())
        with self._lock:
            pending = [(n, p) for n, p in self._databases.items() if n not in attached]
        for name, path in pending:
            conn.execute(f"ATTACH DATABASE ? AS {quote_identifier(name)}", (path,))
            attached.add(name)

    def _acquire(self) -> sqlite3.Connection:
        conn = self._pool.get(timeout=30)
        try:
            self._attach_pending(conn)
        except sqlite3.Error:
            self._pool.put(conn)
            raise
        return conn

    def _release(self, conn: sqlite3.Connection) -> None:
        self._pool.put(conn)

    def _get_conn(self) -> sqlite3.Connection:
        """Get the connection for the current transaction."""
        conn = getattr(self._local, "conn", None)
        if conn is not None:
            return conn
        raise RuntimeError(
            "No active transaction. Wrap calls in a `with service.transaction():` block."
        )

    def ensure_database(self, name: str) -> None:
        if name.lower() in RESERVED_SCHEMAS:
            raise ProvisionError(f"Database name {name!r} is reserved by SQLite")
        if self._db_path == ":memory:":
            # Each pooled connection would attach its own private copy.
            raise ProvisionError(
                f"Cannot provision database {name!r} next to an in-memory database; "
                "use a file path"
            )
        path = self.database_path(name)
        with self._lock:
            if self._databases.get(name) == path:
                return
            self._databases[name] = path
        try:
            conn = self._acquire()
        except sqlite3.Error as e:
            with self._lock:
                self._databases.pop(name, None)
            raise ProvisionError(f"Cannot attach database {name!r} at {path}: {e}") from e
        self._release(conn)

    def placeholder(self) -> str:
        return "?"

    @contextmanager
    def transaction(self) -> Iterator[None]:
        conn = self._acquire()
        self._local.conn = conn
        try:
            yield
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._local.conn = None
            self._release(conn)

    def execute(self, sql: str, params: Params | None = None) -> list[dict[str, Any]]:
        conn = self._get_conn()
        cursor = conn.execute(sql, params or ())
        if cursor.description is None:
            return []
        columns = [desc[0] for desc in cursor.description]
        return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def execute_many(self, sql: str, params_list: ParamsList) -> None:
        conn = self._get_conn()
        conn.executemany(sql, params_list)

    def execute_ddl(self, sql: str) -> None:
        conn = self._acquire()
        try:
            conn.executescript(sql)
            conn.commit()
        finally:
            self._release(conn)
