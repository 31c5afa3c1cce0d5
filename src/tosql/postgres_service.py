"""PostgreSQL implementation of DatabaseService."""

import threading
from contextlib import contextmanager
from queue import Empty, Queue
from typing import Any, Iterator

import psycopg2
import psycopg2.extras

from tosql.errors import ProvisionError
from tosql.service import COLUMN_TYPES, DatabaseService, quote_identifier
from tosql.types import Params, ParamsList


class PostgresDatabaseService(DatabaseService):
    """PostgreSQL backend using psycopg2.

    Thread-safe via a connection pool (Queue). Each transaction() call
    acquires a dedicated connection and returns it on exit.

    A provisioned database is a schema inside the database named by the DSN.
    """

    driver_errors = (psycopg2.Error,)

    column_types = {**COLUMN_TYPES, "integer": "BIGINT", "real": "DOUBLE PRECISION"}

    def __init__(self, dsn: str, pool_size: int = 4):
        self._dsn = dsn
        self._pool_size = pool_size
        self._pool: Queue = Queue(maxsize=pool_size)
        self._local = threading.local()

    def connect(self) -> None:
        for _ in range(self._pool_size):
            conn = psycopg2.connect(self._dsn)
            conn.autocommit = False
            self._pool.put(conn)

    def close(self) -> None:
        while not self._pool.empty():
            try:
                conn = self._pool.get_nowait()
                conn.close()
            except Empty:
                break

    def _acquire(self):
        return self._pool.get(timeout=30)

    def _release(self, conn) -> None:
        self._pool.put(conn)

    def _get_conn(self):
        conn = getattr(self._local, "conn", None)
        if conn is not None:
            return conn
        raise RuntimeError(
            "No active transaction. Wrap calls in a `with service.transaction():` block."
        )

    def ensure_database(self, name: str) -> None:
        try:
            self.execute_ddl(f"CREATE SCHEMA IF NOT EXISTS {quote_identifier(name)}")
        except psycopg2.Error as e:
            raise ProvisionError(f"Cannot create schema {name!r}: {e}") from e

    def placeholder(self) -> str:
        return "%s"

    def quote_for_params(self, name: str) -> str:
        # psycopg2 treats a bare % in a parameterized query as a placeholder.
        return quote_identifier(name).replace("%", "%%")

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
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            cur.execute(sql, params or ())
            if cur.description is None:
                return []
            return [dict(row) for row in cur.fetchall()]

    def execute_many(self, sql: str, params_list: ParamsList) -> None:
        conn = self._get_conn()
        with conn.cursor() as cur:
            psycopg2.extras.execute_batch(cur, sql, params_list)

    def execute_ddl(self, sql: str) -> None:
        # Quoted identifiers may contain ";", so the script is sent whole.
        conn = self._acquire()
        try:
            with conn.cursor() as cur:
                cur.execute(sql)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._release(conn)
