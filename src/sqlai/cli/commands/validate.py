from __future__ import annotations

from typing import Annotated

import typer

from sqlai.cli.commands._shared import get_resolved_config, read_sql, stdin_is_tty
from sqlai.core.sql_safety import SqlValidator, normalize_sql


def validate_command(
    ctx: typer.Context,
    file: Annotated[
        str | None,
        typer.Argument(help="SQL file to validate"),
    ] = None,
    execute: Annotated[
        str | None,
        typer.Option("--execute", "-e", help="Validate inline SQL"),
    ] = None,
) -> None:
    """Check SQL against the SELECT-only policy without running it.

    Prints the comment-stripped statement that would be executed.
    """
    if execute is None and file is None and stdin_is_tty():
        typer.echo(ctx.get_help())
        raise typer.Exit()

    sql = read_sql(inline=execute, file_path=file)
    resolved = get_resolved_config(ctx)
    SqlValidator(resolved.policy).validate(sql)
    typer.echo(normalize_sql(sql))
