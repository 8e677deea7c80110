"""Shared CLI plumbing for command modules.

Config resolution, SQL text input, and output helpers.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlai.cli.output import get_formatter, write_output
from sqlai.core.client import PgClient
from sqlai.core.config import load_config, resolve_config
from sqlai.core.exceptions import InputError

if TYPE_CHECKING:
    import typer

    from sqlai.core.config import ResolvedConfig
    from sqlai.core.models import ExecutionResult

_CLI_OVERRIDE_KEYS = (
    "host",
    "port",
    "database",
    "user",
    "password",
    "schema",
    "max_rows",
    "history_file",
)


def get_resolved_config(
    ctx: typer.Context, timeout: int | None = None
) -> ResolvedConfig:
    obj = ctx.ensure_object(dict)
    config = load_config(obj.get("config_file"))

    cli_overrides: dict[str, Any] = {
        key: obj[key] for key in _CLI_OVERRIDE_KEYS if obj.get(key) is not None
    }
    if timeout is not None:
        cli_overrides["timeout"] = timeout

    resolved = resolve_config(
        config,
        profile_name=obj.get("profile"),
        dsn=obj.get("dsn"),
        **cli_overrides,
    )
    obj["default_format"] = resolved.default_format
    return resolved


def get_client(resolved: ResolvedConfig) -> PgClient:
    return PgClient(resolved)


def read_sql(inline: str | None, file_path: str | None) -> str:
    """Read SQL text from -e, a file, or piped stdin, in that order.

    Blank text is returned unchanged; the validator rejects it.
    """
    if inline is not None:
        return inline

    if file_path is not None:
        path = Path(file_path)
        if not path.is_file():
            msg = (
                f"Query file not found: {file_path}\n"
                "Use -e for inline queries or pipe query via stdin."
            )
            raise InputError(msg)
        return path.read_text(encoding="utf-8")

    if not stdin_is_tty():
        return sys.stdin.read()

    raise InputError("No query provided. Use -e, file path, or pipe to stdin.")


def stdin_is_tty() -> bool:
    try:
        return sys.stdin.isatty()
    except (ValueError, AttributeError):
        return False


def format_options(ctx: typer.Context) -> dict[str, Any]:
    obj = ctx.ensure_object(dict)
    return {
        "format_flag": obj.get("format"),
        "default_format": obj.get("default_format"),
        "compact": obj.get("compact", False),
        "envelope": obj.get("envelope", False),
        "width": obj.get("width", 40),
        "no_header": obj.get("no_header", False),
    }


def output_result(ctx: typer.Context, result: ExecutionResult) -> None:
    write_output(get_formatter(**format_options(ctx)), result)
