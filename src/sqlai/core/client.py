"""PostgreSQL client for SQL AI Tool.

Wraps a psycopg v3 synchronous connection and hands out scoped cursors
bound by a statement timeout and read-only transactions.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import psycopg
import psycopg.errors
import structlog

from sqlai.core.exceptions import NetworkError, QueryExecutionError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlai.core.config import ResolvedConfig


SERVER_CURSOR_NAME = "sqlai_result"

_CONNECT_FIELDS = {
    "host",
    "port",
    "dbname",
    "user",
    "password",
    "sslmode",
    "connect_timeout",
    "application_name",
}


class PgClient:
    """One lazily opened psycopg connection, reused until close()."""

    def __init__(self, config: ResolvedConfig) -> None:
        self.config = config
        self._connection: psycopg.Connection[Any] | None = None

    def __enter__(self) -> PgClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _connect(self) -> psycopg.Connection[Any]:
        if self._connection is not None and not self._connection.closed:
            return self._connection

        settings = self.config
        try:
            self._connection = psycopg.connect(
                autocommit=True,
                **settings.model_dump(include=_CONNECT_FIELDS),
            )
        except psycopg.OperationalError as e:
            # Driver text may echo connection parameters; keep it out.
            msg = (
                f"Connection failed to {settings.host}:{settings.port} "
                f"database '{settings.dbname}'"
            )
            raise NetworkError(msg) from e

        return self._connection

    @contextmanager
    def cursor(
        self, timeout_seconds: int, *, server_side: bool = False
    ) -> Iterator[psycopg.Cursor[Any] | psycopg.ServerCursor[Any]]:
        """Yield a cursor limited to ``timeout_seconds`` per statement.

        Every statement runs in a read-only session. With ``server_side``
        the cursor is a named portal inside its own transaction, so rows
        stay on the server until fetched. The cursor is closed on every
        exit path.
        """
        conn = self._connect()
        timeout_ms = int(timeout_seconds * 1000)
        with conn.cursor() as setup:
            setup.execute(f"SET statement_timeout = {timeout_ms}")
            setup.execute("SET default_transaction_read_only = on")

        if not server_side:
            with conn.cursor() as cur:
                yield cur
            return

        with conn.transaction(), conn.cursor(name=SERVER_CURSOR_NAME) as cur:
            yield cur

    def fetch_rows(
        self,
        sql: str,
        params: dict[str, Any] | None = None,
        timeout_seconds: int = 30,
    ) -> list[tuple[Any, ...]]:
        """Run a trusted catalog query and return all rows."""
        log = structlog.get_logger()
        log.debug("catalog query", sql=" ".join(sql.split()))
        try:
            with self.cursor(timeout_seconds) as cur:
                cur.execute(sql, params)
                return cur.fetchall() if cur.description else []
        except psycopg.errors.QueryCanceled as e:
            msg = f"Catalog query exceeded {timeout_seconds}s timeout"
            raise QueryExecutionError(msg) from e
        except psycopg.OperationalError as e:
            raise NetworkError(f"Database error: {e}") from e
        except psycopg.Error as e:
            raise QueryExecutionError(f"Catalog query failed: {e}") from e

    def close(self) -> None:
        conn, self._connection = self._connection, None
        if conn is not None:
            conn.close()
