"""Output formatters for SQL AI Tool."""

from sqlai.formatters.base import Formatter, FormatterRegistry, registry
from sqlai.formatters.csv import CSVFormatter
from sqlai.formatters.json import JSONFormatter
from sqlai.formatters.table import TableFormatter

__all__ = [
    "CSVFormatter",
    "Formatter",
    "FormatterRegistry",
    "JSONFormatter",
    "TableFormatter",
    "registry",
]
