"""CSV formatter for ExecutionResult output (RFC 4180 compliant)."""

from __future__ import annotations

import csv
from io import StringIO
from typing import TYPE_CHECKING

from sqlai.formatters.base import registry, row_values

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlai.core.models import ExecutionResult


def _write_row(values: list[str]) -> str:
    buf = StringIO()
    csv.writer(buf).writerow(values)
    return buf.getvalue().rstrip("\r\n")


class CSVFormatter:
    def __init__(self, no_header: bool = False) -> None:
        self.no_header = no_header

    def format(self, result: ExecutionResult) -> Iterator[str]:
        if not self.no_header:
            yield _write_row([col.name for col in result.columns])

        for row in result.rows:
            yield _write_row(
                ["" if v is None else str(v) for v in row_values(result, row)]
            )


registry.register("csv", CSVFormatter)
