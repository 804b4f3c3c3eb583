from contextlib import contextmanager
from typing import Any, Iterator

import psycopg
from psycopg.rows import dict_row

from services.settings import get_settings


def _resolve_dsn() -> str:
    dsn = get_settings().DATABASE_URL
    if not dsn:
        raise RuntimeError("Missing IONO_DB_URL or DATABASE_URL for database access")
    return dsn


class PgClient:
    def __init__(self, dsn: str | None = None) -> None:
        self._dsn = dsn

    @property
    def dsn(self) -> str:
        if not self._dsn:
            self._dsn = _resolve_dsn()
        return self._dsn

    def _connect(self) -> psycopg.Connection:
        return psycopg.connect(self.dsn, row_factory=dict_row)

    def fetchrow(self, query: str, *params: Any) -> dict | None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                row = cur.fetchone()
                return dict(row) if row else None

    def fetch(self, query: str, *params: Any) -> list[dict]:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                rows = cur.fetchall()
                return [dict(r) for r in rows]

    def execute(self, query: str, *params: Any) -> None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                conn.commit()

    @contextmanager
    def advisory_lock(self, key: int) -> Iterator[None]:
        """
        Hold a session-level advisory lock for the duration of the block.
        The lock lives on its own connection so it is released even if the
        body fails, and other processes using the same key block until then.
        """
        with psycopg.connect(self.dsn, autocommit=True) as conn:
            conn.execute("select pg_advisory_lock(%s)", (key,))
            try:
                yield
            finally:
                conn.execute("select pg_advisory_unlock(%s)", (key,))


pg = PgClient()
