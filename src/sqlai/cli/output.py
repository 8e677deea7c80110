"""Output format selection and TTY auto-detection."""

from __future__ import annotations

import sys
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sqlai.core.models import ExecutionResult
    from sqlai.formatters.base import Formatter


class OutputFormat(StrEnum):
    TABLE = "table"
    JSON = "json"
    CSV = "csv"


def detect_tty() -> bool:
    return sys.stdout.isatty()


def resolve_format(format_flag: str | None, default: str | None = None) -> str:
    """Determine the output format.

    Explicit --format wins, then a non-table config default; otherwise
    table for a TTY and csv for pipes.
    """
    if format_flag is not None:
        return format_flag
    if default is not None and default != "table":
        return default
    return "table" if detect_tty() else "csv"


def get_formatter(
    format_flag: str | None = None,
    *,
    default_format: str | None = None,
    compact: bool = False,
    envelope: bool = False,
    width: int = 40,
    no_header: bool = False,
) -> Formatter:
    """Pick the output format and hand each formatter only its own options."""
    from sqlai.formatters import registry

    options: dict[str, dict[str, object]] = {
        "table": {"width": width},
        "json": {"compact": compact, "envelope": envelope},
        "csv": {"no_header": no_header},
    }
    name = resolve_format(format_flag, default_format)
    return registry.get(name, **options.get(name, {}))


def write_output(formatter: Formatter, result: ExecutionResult) -> None:
    sys.stdout.writelines(f"{line}\n" for line in formatter.format(result))
