from __future__ import annotations

from typing import Annotated

import typer

from sqlai.cli.commands._shared import (
    get_client,
    get_resolved_config,
    output_result,
    read_sql,
    stdin_is_tty,
)
from sqlai.core.executor import QueryExecutor
from sqlai.core.exit_codes import ExitCode
from sqlai.core.history import QueryHistoryStore
from sqlai.core.models import ExecutionStatus


def query_command(
    ctx: typer.Context,
    file: Annotated[
        str | None,
        typer.Argument(help="SQL file to execute"),
    ] = None,
    execute: Annotated[
        str | None,
        typer.Option("--execute", "-e", help="Execute inline SQL query"),
    ] = None,
    question: Annotated[
        str | None,
        typer.Option(
            "--question", "-q", help="Natural-language question the SQL answers"
        ),
    ] = None,
    timeout: Annotated[
        int | None,
        typer.Option("--timeout", "-t", help="Statement timeout in seconds"),
    ] = None,
    no_history: Annotated[
        bool,
        typer.Option("--no-history", help="Do not record this query in history"),
    ] = False,
) -> None:
    """Execute a read-only SQL query from file, inline (-e), or stdin."""
    if execute is None and file is None and stdin_is_tty():
        typer.echo(ctx.get_help())
        raise typer.Exit()

    sql = read_sql(inline=execute, file_path=file)
    resolved = get_resolved_config(ctx, timeout=timeout)

    with get_client(resolved) as client:
        result = QueryExecutor(client, resolved.policy).execute(sql)

    if not no_history:
        QueryHistoryStore(resolved.history_file).record(
            sql.strip(), result, question=question
        )

    if result.status is ExecutionStatus.TIMEOUT:
        if ctx.obj.get("envelope"):
            output_result(ctx, result)
        typer.echo(f"Error: {result.error_message}", err=True)
        raise typer.Exit(ExitCode.TIMEOUT)

    output_result(ctx, result)
