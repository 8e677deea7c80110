"""Scrub secrets and stack frames from error text before it is shown."""

from __future__ import annotations

import re

_REPLACEMENTS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(api[_-]?key[\s=:]+)[\w-]+", re.IGNORECASE), r"\1***"),
    (re.compile(r"sk-[a-zA-Z0-9-]+"), "sk-***"),
    (re.compile(r"AIza[a-zA-Z0-9-]+"), "AIza***"),
    (re.compile(r"(password\s*[=:]\s*)\S+", re.IGNORECASE), r"\1***"),
    (re.compile(r"(postgres(?:ql)?://[^:/@\s]+):[^@\s]+@"), r"\1:***@"),
]

_TRACEBACK_MARKERS = ("\nTraceback (most recent call last):", '\n  File "')


def sanitize_error_message(message: str | None) -> str:
    """Mask API keys, passwords and DSN credentials; drop stack frames."""
    if message is None:
        return "An error occurred"

    sanitized = message
    for marker in _TRACEBACK_MARKERS:
        sanitized = sanitized.split(marker, 1)[0]
    for pattern, replacement in _REPLACEMENTS:
        sanitized = pattern.sub(replacement, sanitized)

    return sanitized.strip() or "Service error occurred"
