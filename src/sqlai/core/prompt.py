"""Prompt assembly for SQL generation.

The prompt is prefix + question + infix + schema text + suffix. The
templates ship as package data in sqlai.prompts; the suffix carries
``{database_type}`` and ``{max_limit}`` placeholders.
"""

from __future__ import annotations

from functools import cache
from importlib import resources
from typing import TYPE_CHECKING

from sqlai.core.exceptions import ConfigError, InputError
from sqlai.core.schema import format_schema

if TYPE_CHECKING:
    from sqlai.core.config import ExecutionPolicy
    from sqlai.core.schema import DatabaseMetadata


@cache
def load_template(name: str) -> str:
    try:
        return resources.files("sqlai.prompts").joinpath(name).read_text(encoding="utf-8")
    except FileNotFoundError as e:
        msg = f"Failed to load prompt template: {name}"
        raise ConfigError(msg) from e


class PromptBuilder:
    def __init__(
        self, policy: ExecutionPolicy, database_type: str = "PostgreSQL"
    ) -> None:
        self.policy = policy
        self.database_type = database_type

    def build(self, question: str, metadata: DatabaseMetadata) -> str:
        if not question or not question.strip():
            raise InputError("Question must not be blank")

        suffix = (
            load_template("sql_prompt_suffix.txt")
            .replace("{database_type}", self.database_type)
            .replace("{max_limit}", str(self.policy.max_row_limit))
        )
        return "".join(
            [
                load_template("sql_prompt_prefix.txt").rstrip("\n"),
                "\n\n",
                question.strip(),
                "\n\n",
                load_template("sql_prompt_infix.txt").rstrip("\n"),
                "\n",
                format_schema(metadata),
                "\n\n",
                suffix,
            ]
        )
