"""Schema introspection and prompt assembly commands."""

from __future__ import annotations

from typing import Annotated

import typer

from sqlai.cli.commands._shared import get_client, get_resolved_config
from sqlai.cli.output import resolve_format
from sqlai.core.prompt import PromptBuilder
from sqlai.core.schema import format_schema, introspect_schema


def schema_command(
    ctx: typer.Context,
    schema: Annotated[
        str | None,
        typer.Option("--schema", "-s", help="Schema to describe"),
    ] = None,
) -> None:
    """Describe tables, columns and keys as they appear in prompts."""
    resolved = get_resolved_config(ctx)
    schema_name = schema or resolved.default_schema

    with get_client(resolved) as client:
        metadata = introspect_schema(client, schema_name)

    if not metadata.tables:
        typer.echo(f"No tables found in schema '{schema_name}'", err=True)
        return

    if resolve_format(ctx.obj.get("format"), resolved.default_format) == "json":
        indent = None if ctx.obj.get("compact") else 2
        typer.echo(metadata.model_dump_json(indent=indent))
        return
    typer.echo(format_schema(metadata).rstrip("\n"))


def prompt_command(
    ctx: typer.Context,
    question: Annotated[
        str,
        typer.Argument(help="Natural-language question"),
    ],
    schema: Annotated[
        str | None,
        typer.Option("--schema", "-s", help="Schema to include in the prompt"),
    ] = None,
    database_type: Annotated[
        str,
        typer.Option("--database-type", help="SQL dialect named in the prompt"),
    ] = "PostgreSQL",
) -> None:
    """Print the SQL generation prompt for a question."""
    resolved = get_resolved_config(ctx)
    schema_name = schema or resolved.default_schema

    with get_client(resolved) as client:
        metadata = introspect_schema(client, schema_name)

    builder = PromptBuilder(resolved.policy, database_type=database_type)
    typer.echo(builder.build(question, metadata))
