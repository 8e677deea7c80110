"""Bounded execution of validated SELECT statements.

QueryExecutor.execute() is the single entry point for running untrusted
SQL. Each call ends in exactly one of:

- InputError raised for blank SQL,
- UnsafeSqlError raised by the validator, before any connection is used,
- an ExecutionResult returned with status SUCCESS or TIMEOUT,
- QueryExecutionError (or its NetworkError subclass) raised.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Protocol

import psycopg
import psycopg.errors
import sentry_sdk
import structlog

from sqlai.core.exceptions import NetworkError, QueryExecutionError
from sqlai.core.models import ColumnInfo, ExecutionResult
from sqlai.core.sql_safety import SqlValidator, normalize_sql

if TYPE_CHECKING:
    from collections.abc import Sequence
    from contextlib import AbstractContextManager

    from sqlai.core.config import ExecutionPolicy

# Mapping from PostgreSQL type OIDs to SQL type names.
# Unknown OIDs fall back to "UNKNOWN".
_TYPE_NAMES: dict[int, str] = {
    16: "BOOLEAN",
    17: "BYTEA",
    18: "CHAR",
    19: "NAME",
    20: "BIGINT",
    21: "SMALLINT",
    23: "INTEGER",
    25: "TEXT",
    26: "OID",
    114: "JSON",
    142: "XML",
    700: "REAL",
    701: "DOUBLE PRECISION",
    790: "MONEY",
    1042: "CHAR",
    1043: "VARCHAR",
    1082: "DATE",
    1083: "TIME",
    1114: "TIMESTAMP",
    1184: "TIMESTAMPTZ",
    1186: "INTERVAL",
    1266: "TIMETZ",
    1700: "NUMERIC",
    2950: "UUID",
    3802: "JSONB",
}


class CursorSource(Protocol):
    """Anything that hands out scoped, timeout-bound cursors (PgClient)."""

    def cursor(
        self, timeout_seconds: int, *, server_side: bool = False
    ) -> AbstractContextManager[Any]: ...


def type_name(type_code: int) -> str:
    return _TYPE_NAMES.get(type_code, "UNKNOWN")


def describe_columns(description: Sequence[Any] | None) -> list[ColumnInfo]:
    if not description:
        return []
    return [ColumnInfo(name=col.name, type=type_name(col.type_code)) for col in description]


def _elapsed_ms(start_time: float) -> int:
    return max(0, int((time.monotonic() - start_time) * 1000))


class QueryExecutor:
    """Validates, runs and materializes one statement per call."""

    def __init__(
        self,
        client: CursorSource,
        policy: ExecutionPolicy,
        validator: SqlValidator | None = None,
    ) -> None:
        self.client = client
        self.policy = policy
        self.validator = validator or SqlValidator(policy)

    def execute(self, sql: str) -> ExecutionResult:
        log = structlog.get_logger()
        self.validator.validate(sql)

        cleaned_sql = normalize_sql(sql)
        sql_oneline = " ".join(cleaned_sql.split())
        log.debug("executing query", sql=sql_oneline)

        with sentry_sdk.start_span(op="db.query", description=sql_oneline[:100]) as span:
            start_time = time.monotonic()
            try:
                with self.client.cursor(
                    self.policy.query_timeout_seconds, server_side=True
                ) as cur:
                    cur.execute(cleaned_sql)
                    columns = describe_columns(cur.description)
                    rows = self._materialize(cur, columns)
            except psycopg.errors.QueryCanceled:
                duration_ms = _elapsed_ms(start_time)
                span.set_data("duration_ms", duration_ms)
                span.set_status("deadline_exceeded")
                log.warning("query timeout", sql=sql_oneline, duration_ms=duration_ms)
                return ExecutionResult.timeout(
                    duration_ms,
                    f"Query execution exceeded {self.policy.max_execution_time_ms}ms timeout",
                )
            except psycopg.OperationalError as e:
                span.set_status("unavailable")
                log.error("database error", sql=sql_oneline, error=str(e))
                raise NetworkError(f"Database error: {e}") from e
            except psycopg.Error as e:
                span.set_status("internal_error")
                log.error("query failed", sql=sql_oneline, error=str(e))
                raise QueryExecutionError(f"Failed to execute query: {e}") from e

            duration_ms = _elapsed_ms(start_time)
            span.set_data("row_count", len(rows))
            span.set_data("duration_ms", duration_ms)
            log.debug(
                "query complete",
                duration_ms=duration_ms,
                row_count=len(rows),
                max_rows=self.policy.max_row_limit,
            )
            return ExecutionResult.success(rows, columns, duration_ms)

    def _materialize(self, cur: Any, columns: list[ColumnInfo]) -> list[dict[str, Any]]:
        """Fetch at most max_row_limit rows from the server-side cursor.

        Rows past the limit are never transferred; closing the cursor
        discards them on the server.
        """
        if not columns:
            return []
        names = [col.name for col in columns]
        return [
            dict(zip(names, row, strict=True))
            for row in cur.fetchmany(self.policy.max_row_limit)
        ]
