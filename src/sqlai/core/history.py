"""Query history persisted as a JSON-lines file.

One line per executed statement. Only statements that produced an
ExecutionResult (SUCCESS or TIMEOUT) are recorded; rejected statements
and hard execution failures never reach the store.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, ValidationError

from sqlai.core.exceptions import HistoryError, InputError
from sqlai.core.logging import get_logger
from sqlai.core.models import ExecutionStatus

if TYPE_CHECKING:
    from pathlib import Path

    from sqlai.core.models import ExecutionResult


class HistoryEntry(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    question: str | None = None
    sql: str
    status: ExecutionStatus
    row_count: int = 0
    execution_time_ms: int = 0
    error_message: str | None = None
    executed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class QueryHistoryStore:
    def __init__(self, path: Path) -> None:
        self.path = path

    def record(
        self, sql: str, result: ExecutionResult, question: str | None = None
    ) -> HistoryEntry:
        """Append one entry for an executed statement."""
        entry = HistoryEntry(
            question=question,
            sql=sql,
            status=result.status,
            row_count=result.row_count,
            execution_time_ms=result.execution_time_ms,
            error_message=result.error_message,
        )
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(entry.model_dump_json() + "\n")
        except OSError as e:
            msg = f"Cannot write query history to {self.path}: {e.strerror}"
            raise HistoryError(msg) from e

        get_logger("history").debug(
            "history recorded", entry_id=entry.id, status=str(entry.status)
        )
        return entry

    def recent(self, limit: int = 20) -> list[HistoryEntry]:
        """Return up to ``limit`` entries, newest first."""
        if limit <= 0:
            msg = f"Invalid history limit: {limit}. Must be positive"
            raise InputError(msg)
        if not self.path.exists():
            return []

        entries: list[HistoryEntry] = []
        try:
            with open(self.path, encoding="utf-8") as f:
                for lineno, line in enumerate(f, start=1):
                    if not line.strip():
                        continue
                    try:
                        entries.append(HistoryEntry.model_validate_json(line))
                    except ValidationError as e:
                        msg = f"Corrupt history entry at {self.path}:{lineno}"
                        raise HistoryError(msg) from e
        except OSError as e:
            msg = f"Cannot read query history from {self.path}: {e.strerror}"
            raise HistoryError(msg) from e

        entries.sort(key=lambda entry: entry.executed_at, reverse=True)
        return entries[:limit]
