"""Rich table formatter for ExecutionResult output."""

from __future__ import annotations

import shutil
from io import StringIO
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from sqlai.formatters.base import registry, row_values

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlai.core.models import ExecutionResult

_NO_RESULTS = "No results"


def _truncate(value: str, width: int) -> str:
    if len(value) <= width:
        return value
    return value[: width - 1] + "…"


class TableFormatter:
    """Boxed table with column types in the header and a row-count caption."""

    def __init__(self, width: int = 40, show_types: bool = True) -> None:
        self.width = width
        self.show_types = show_types

    def format(self, result: ExecutionResult) -> Iterator[str]:
        if not result.rows:
            yield _NO_RESULTS
            return

        caption = f"{result.row_count} row(s) in {result.execution_time_ms} ms"
        table = Table(show_edge=True, pad_edge=True, caption=caption)
        for col in result.columns:
            header = f"{col.name}\n{col.type.lower()}" if self.show_types else col.name
            table.add_column(header, no_wrap=True)

        for row in result.rows:
            table.add_row(
                *(
                    _truncate("" if v is None else str(v), self.width)
                    for v in row_values(result, row)
                )
            )

        buf = StringIO()
        term_width = shutil.get_terminal_size((120, 24)).columns
        Console(file=buf, force_terminal=True, width=term_width).print(table)
        yield buf.getvalue().rstrip("\n")


registry.register("table", TableFormatter)
