"""SQL normalization and SELECT-only safety validation.

The validator is a plain text scan: a leading-keyword check plus a
word-boundary denylist. It never touches the database, so it treats the
denylist as a floor rather than a guarantee against vendor-specific
statement forms.

Comment stripping is line/regex based. A comment marker inside a string
literal is stripped like a real comment. Because trailing ``--`` comments
are cut from every line, this includes ``--`` inside quoted text on the
same line: ``WHERE path LIKE '%--%'`` loses everything from the marker on.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import structlog

from sqlai.core.exceptions import InputError, UnsafeSqlError

if TYPE_CHECKING:
    from sqlai.core.config import ExecutionPolicy

DANGEROUS_KEYWORDS: tuple[str, ...] = (
    "INSERT",
    "UPDATE",
    "DELETE",
    "DROP",
    "CREATE",
    "ALTER",
    "TRUNCATE",
    "EXEC",
    "EXECUTE",
    "CALL",
    "GRANT",
    "REVOKE",
)

ONLY_SELECT_MESSAGE = "Only SELECT queries are allowed"

_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_KEYWORD_PATTERNS: dict[str, re.Pattern[str]] = {
    kw: re.compile(rf"\b{kw}\b") for kw in DANGEROUS_KEYWORDS
}


def _strip_comments(sql: str) -> str:
    lines = [line for line in sql.splitlines() if not line.strip().startswith("--")]
    text = _BLOCK_COMMENT.sub("", "\n".join(lines))
    return "\n".join(line.split("--", 1)[0].rstrip() for line in text.splitlines()).strip()


def normalize_sql(sql: str) -> str:
    """Strip SQL comments and surrounding whitespace.

    Lines starting with ``--`` (after leading whitespace) are dropped
    entirely, then block comments are removed (including ones spanning
    lines), then trailing ``--`` comments are cut from the remaining
    lines.

    Removing a block comment can expose a new ``--`` line
    (``/* x */ -- y``), so passes repeat until the text is stable and
    normalizing twice gives the same result as normalizing once.
    """
    previous = None
    text = sql
    while text != previous:
        previous = text
        text = _strip_comments(text)
    return text


def ensure_not_blank(sql: str | None) -> str:
    if sql is None or not sql.strip():
        raise InputError("SQL statement must not be blank")
    return sql


def _leading_prefixes(policy: ExecutionPolicy | None) -> tuple[str, ...]:
    ops = policy.allowed_operations if policy is not None else ("SELECT",)
    # WITH introduces a CTE that ends in a SELECT.
    return (*ops, "WITH") if "SELECT" in ops else ops


class SqlValidator:
    """Accepts only read-only SELECT-class statements."""

    def __init__(self, policy: ExecutionPolicy | None = None) -> None:
        self.policy = policy
        self._prefixes = _leading_prefixes(policy)

    def validate(self, sql: str) -> None:
        """Raise UnsafeSqlError unless ``sql`` is a safe SELECT statement.

        Raises InputError for blank input before any normalization.
        """
        log = structlog.get_logger()
        ensure_not_blank(sql)

        normalized = normalize_sql(sql).upper()

        if not normalized.startswith(self._prefixes):
            log.warning("unsafe sql rejected", reason="leading keyword")
            raise UnsafeSqlError(ONLY_SELECT_MESSAGE)

        for keyword, pattern in _KEYWORD_PATTERNS.items():
            if pattern.search(normalized):
                log.warning("unsafe sql rejected", keyword=keyword)
                raise UnsafeSqlError(
                    f"Query contains unsafe operation: {keyword}", keyword=keyword
                )

        log.debug("sql validation passed")


def validate_sql(sql: str, policy: ExecutionPolicy | None = None) -> None:
    """Validate with a one-off SqlValidator."""
    SqlValidator(policy).validate(sql)
