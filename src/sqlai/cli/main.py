"""SQL AI Tool main entry point and command registration."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003
from typing import Annotated, NoReturn

import sentry_sdk
import typer

from sqlai.__about__ import __version__
from sqlai.cli.commands.config import config_app
from sqlai.cli.commands.history import history_command
from sqlai.cli.commands.query import query_command
from sqlai.cli.commands.schema import prompt_command, schema_command
from sqlai.cli.commands.validate import validate_command
from sqlai.cli.output import OutputFormat  # noqa: TC001
from sqlai.core.exceptions import SqlAiError
from sqlai.core.exit_codes import ExitCode
from sqlai.core.logging import bind_command_context, setup_logging
from sqlai.core.monitoring import (
    send_test_events,
    setup_sentry,
    start_command_transaction,
)
from sqlai.core.sanitize import sanitize_error_message

app = typer.Typer(
    help="SQL AI Tool - safe execution of AI-generated SQL against PostgreSQL",
    no_args_is_help=True,
)

app.add_typer(config_app, name="config")
app.command("query")(query_command)
app.command("validate")(validate_command)
app.command("schema")(schema_command)
app.command("prompt")(prompt_command)
app.command("history")(history_command)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"sqlai {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable verbose logging"),
    ] = False,
    json_logs: Annotated[
        bool,
        typer.Option("--json-logs", help="Write logs to stderr as JSON lines"),
    ] = False,
    profile: Annotated[
        str | None,
        typer.Option("--profile", "-P", help="Named connection profile"),
    ] = None,
    host: Annotated[
        str | None,
        typer.Option("--host", "-H", help="PostgreSQL host"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="PostgreSQL port"),
    ] = None,
    database: Annotated[
        str | None,
        typer.Option("--database", "-d", help="Database name"),
    ] = None,
    user: Annotated[
        str | None,
        typer.Option("--user", "-U", help="User name"),
    ] = None,
    password: Annotated[
        str | None,
        typer.Option("--password", "-W", help="Password"),
    ] = None,
    dsn: Annotated[
        str | None,
        typer.Option("--dsn", help="Connection DSN"),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config file"),
    ] = None,
    schema: Annotated[
        str | None,
        typer.Option("--schema", "-s", help="Default schema for introspection"),
    ] = None,
    max_rows: Annotated[
        int | None,
        typer.Option("--max-rows", help="Maximum rows returned per query"),
    ] = None,
    history_file: Annotated[
        Path | None,
        typer.Option("--history-file", help="Path to the query history file"),
    ] = None,
    format: Annotated[
        OutputFormat | None,
        typer.Option("--format", "-f", help="Output format: table|json|csv"),
    ] = None,
    table: Annotated[
        bool,
        typer.Option("--table", help="Shorthand for --format table"),
    ] = False,
    compact: Annotated[
        bool,
        typer.Option("--compact", help="Compact JSON output (no indentation)"),
    ] = False,
    envelope: Annotated[
        bool,
        typer.Option(
            "--envelope", help="JSON output includes status, columns and timing"
        ),
    ] = False,
    width: Annotated[
        int,
        typer.Option("--width", help="Column width for table format"),
    ] = 40,
    no_header: Annotated[
        bool,
        typer.Option("--no-header", help="Suppress header row in CSV output"),
    ] = False,
) -> None:
    """SQL AI Tool - safe execution of AI-generated SQL against PostgreSQL."""
    setup_logging(verbose, json_logs=json_logs)
    setup_sentry()
    bind_command_context(command=ctx.invoked_subcommand, profile=profile)
    start_command_transaction(ctx.invoked_subcommand)

    ctx.ensure_object(dict).update(
        verbose=verbose,
        profile=profile,
        host=host,
        port=port,
        database=database,
        user=user,
        password=password,
        dsn=dsn,
        config_file=config_file,
        schema=schema,
        max_rows=max_rows,
        history_file=history_file.expanduser() if history_file else None,
        format="table" if table else (format.value if format else None),
        compact=compact,
        envelope=envelope,
        width=width,
        no_header=no_header,
    )


def _fail(message: str, code: int) -> NoReturn:
    typer.echo(f"Error: {sanitize_error_message(message)}", err=True)
    raise SystemExit(code)


def run() -> None:
    """Console entry point; maps errors to messages and exit codes."""
    try:
        app()
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except SqlAiError as e:
        sentry_sdk.capture_exception(e)
        _fail(e.message, e.exit_code)
    except Exception as e:
        sentry_sdk.capture_exception(e)
        _fail(str(e), ExitCode.GENERAL_ERROR)


@app.command("test-sentry")
def test_sentry() -> None:
    """Send a test error and a test transaction to Sentry."""
    typer.echo("Sending test events to Sentry...")
    send_test_events()
    typer.echo("Test events sent. Look for 'sqlai Sentry test error' under Issues")
    typer.echo("and the 'test_sentry' transaction under Performance.")
