"""Exception hierarchy for SQL AI Tool.

All exceptions carry an exit_code for CLI return value mapping.
A query timeout is not an exception: it is reported as a TIMEOUT
ExecutionResult by the executor.
"""

from __future__ import annotations

from sqlai.core.exit_codes import ExitCode


class SqlAiError(Exception):
    """Base exception for all SQL AI Tool errors."""

    exit_code: int = ExitCode.GENERAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InputError(SqlAiError):
    """Blank SQL, file not found, invalid parameters."""

    exit_code: int = ExitCode.INPUT_ERROR


class ConfigError(SqlAiError):
    """Malformed config, missing profile, invalid execution policy."""

    exit_code: int = ExitCode.CONFIG_ERROR


class UnsafeSqlError(SqlAiError):
    """Statement rejected by the SQL safety validator."""

    exit_code: int = ExitCode.UNSAFE_SQL

    def __init__(self, message: str, keyword: str | None = None) -> None:
        self.keyword = keyword
        super().__init__(message)


class QueryExecutionError(SqlAiError):
    """Statement failed at the database (syntax, missing table, permissions)."""

    exit_code: int = ExitCode.EXECUTION_ERROR


class NetworkError(QueryExecutionError):
    """Connection failures, unreachable host."""

    exit_code: int = ExitCode.NETWORK_ERROR


class HistoryError(SqlAiError):
    """Query history file cannot be read or written."""

    exit_code: int = ExitCode.OUTPUT_ERROR
