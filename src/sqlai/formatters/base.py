"""Formatter protocol and registry for output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlai.core.models import ExecutionResult


@runtime_checkable
class Formatter(Protocol):
    """Turns an ExecutionResult into lines of text, one yield per line."""

    def format(self, result: ExecutionResult) -> Iterator[str]: ...


def row_values(result: ExecutionResult, row: dict[str, Any]) -> list[Any]:
    """Row values in projection order."""
    return [row.get(col.name) for col in result.columns]


class FormatterRegistry:
    """Formatter classes keyed by the name used with --format."""

    def __init__(self) -> None:
        self._formatters: dict[str, type[Formatter]] = {}

    def register(self, name: str, formatter_class: type[Formatter]) -> None:
        self._formatters[name] = formatter_class

    def get(self, name: str, **kwargs: object) -> Formatter:
        """Instantiate the formatter registered as ``name``; KeyError if none."""
        try:
            formatter_class = self._formatters[name]
        except KeyError:
            msg = f"Unknown format {name!r}. Available: {', '.join(self.available)}"
            raise KeyError(msg) from None
        return formatter_class(**kwargs)

    @property
    def available(self) -> list[str]:
        return sorted(self._formatters)


# Populated by the formatter modules on import.
registry = FormatterRegistry()
