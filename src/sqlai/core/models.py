"""Execution result models for SQL AI Tool.

Pydantic models for the outcome of a bounded query execution and the
column metadata returned with it by QueryExecutor.execute().
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ExecutionStatus(StrEnum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    TIMEOUT = "TIMEOUT"


class ColumnInfo(BaseModel):
    """Metadata for a single result column."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str


class ExecutionResult(BaseModel):
    """Outcome of one statement execution.

    Built exactly once per execution and never mutated afterwards.
    ``error_message`` is set exactly when the status is not SUCCESS.
    """

    model_config = ConfigDict(frozen=True)

    status: ExecutionStatus
    rows: list[dict[str, Any]] = Field(default_factory=list)
    columns: list[ColumnInfo] = Field(default_factory=list)
    row_count: int = 0
    execution_time_ms: int = Field(default=0, ge=0)
    error_message: str | None = None

    @model_validator(mode="after")
    def check_consistency(self) -> ExecutionResult:
        if self.row_count != len(self.rows):
            msg = f"row_count {self.row_count} does not match {len(self.rows)} rows"
            raise ValueError(msg)
        if self.status is ExecutionStatus.SUCCESS and self.error_message is not None:
            raise ValueError("error_message must be empty for a SUCCESS result")
        if self.status is not ExecutionStatus.SUCCESS:
            if not self.error_message:
                msg = f"error_message is required for a {self.status} result"
                raise ValueError(msg)
            if self.rows:
                msg = f"a {self.status} result cannot carry rows"
                raise ValueError(msg)
        return self

    @classmethod
    def success(
        cls,
        rows: list[dict[str, Any]],
        columns: list[ColumnInfo],
        execution_time_ms: int,
    ) -> ExecutionResult:
        return cls(
            status=ExecutionStatus.SUCCESS,
            rows=rows,
            columns=columns,
            row_count=len(rows),
            execution_time_ms=execution_time_ms,
        )

    @classmethod
    def timeout(cls, execution_time_ms: int, message: str) -> ExecutionResult:
        return cls(
            status=ExecutionStatus.TIMEOUT,
            execution_time_ms=execution_time_ms,
            error_message=message,
        )
