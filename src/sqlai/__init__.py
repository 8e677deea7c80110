"""SQL AI Tool - safe execution of AI-generated SQL against PostgreSQL."""

from sqlai.__about__ import __version__

__all__ = ["__version__"]
