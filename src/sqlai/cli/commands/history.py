from __future__ import annotations

from typing import Annotated

import typer

from sqlai.cli.commands._shared import get_resolved_config, output_result
from sqlai.core.history import QueryHistoryStore
from sqlai.core.models import ColumnInfo, ExecutionResult

_HISTORY_COLUMNS = [
    ColumnInfo(name="executed_at", type="TIMESTAMPTZ"),
    ColumnInfo(name="status", type="TEXT"),
    ColumnInfo(name="row_count", type="INTEGER"),
    ColumnInfo(name="execution_time_ms", type="BIGINT"),
    ColumnInfo(name="question", type="TEXT"),
    ColumnInfo(name="sql", type="TEXT"),
]


def history_command(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", help="Number of entries to show"),
    ] = 20,
) -> None:
    """Show recently executed queries, newest first."""
    resolved = get_resolved_config(ctx)
    entries = QueryHistoryStore(resolved.history_file).recent(limit)

    rows = [
        {
            "executed_at": entry.executed_at.isoformat(timespec="seconds"),
            "status": str(entry.status),
            "row_count": entry.row_count,
            "execution_time_ms": entry.execution_time_ms,
            "question": entry.question,
            "sql": entry.sql,
        }
        for entry in entries
    ]
    output_result(ctx, ExecutionResult.success(rows, _HISTORY_COLUMNS, 0))
