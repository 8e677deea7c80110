"""JSON formatter for ExecutionResult output."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from sqlai.formatters.base import registry, row_values

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlai.core.models import ExecutionResult


def _serialize_value(val: Any) -> Any:
    if isinstance(val, (int, float, str, bool, type(None))):
        return val
    return str(val)


class JSONFormatter:
    """Rows as a JSON array of objects keyed by column name.

    With ``envelope=True`` the whole result (status, columns, timing,
    error message) is emitted instead.
    """

    def __init__(self, compact: bool = False, envelope: bool = False) -> None:
        self.compact = compact
        self.envelope = envelope

    def format(self, result: ExecutionResult) -> Iterator[str]:
        rows = [
            {
                col.name: _serialize_value(val)
                for col, val in zip(result.columns, row_values(result, row), strict=True)
            }
            for row in result.rows
        ]
        payload: Any = rows
        if self.envelope:
            payload = {
                "status": str(result.status),
                "columns": [col.model_dump() for col in result.columns],
                "rows": rows,
                "row_count": result.row_count,
                "execution_time_ms": result.execution_time_ms,
                "error_message": result.error_message,
            }

        indent = None if self.compact else 2
        yield json.dumps(payload, indent=indent, default=str)


registry.register("json", JSONFormatter)
