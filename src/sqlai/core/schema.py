"""Schema introspection and prompt-ready schema text.

Reads table/column definitions and primary/foreign keys from
information_schema and renders them as the plain-text schema block used
in SQL generation prompts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

if TYPE_CHECKING:
    from sqlai.core.client import PgClient

_COLUMNS_SQL = """
SELECT
    table_name,
    column_name,
    data_type,
    character_maximum_length
FROM information_schema.columns
WHERE table_schema = %(schema)s
ORDER BY table_name, ordinal_position
"""

_KEYS_SQL = """
SELECT
    kcu.table_name,
    kcu.column_name,
    tc.constraint_type,
    ccu.table_name AS ref_table,
    ccu.column_name AS ref_column
FROM information_schema.table_constraints tc
JOIN information_schema.key_column_usage kcu
    ON tc.constraint_name = kcu.constraint_name
    AND tc.table_schema = kcu.table_schema
LEFT JOIN information_schema.constraint_column_usage ccu
    ON tc.constraint_type = 'FOREIGN KEY'
    AND ccu.constraint_name = tc.constraint_name
    AND ccu.constraint_schema = tc.constraint_schema
WHERE tc.table_schema = %(schema)s
    AND tc.constraint_type IN ('PRIMARY KEY', 'FOREIGN KEY')
"""


class ColumnDefinition(BaseModel):
    name: str
    data_type: str
    is_primary_key: bool = False
    foreign_key: str | None = None


class TableMetadata(BaseModel):
    name: str
    columns: list[ColumnDefinition] = []


class DatabaseMetadata(BaseModel):
    schema_name: str
    tables: list[TableMetadata] = []


def build_metadata(
    schema_name: str,
    column_rows: list[tuple[Any, ...]],
    key_rows: list[tuple[Any, ...]],
) -> DatabaseMetadata:
    """Assemble DatabaseMetadata from raw catalog rows.

    column_rows: (table, column, data_type, char_max_length), ordered.
    key_rows: (table, column, constraint_type, ref_table, ref_column).
    """
    primary_keys: set[tuple[str, str]] = set()
    foreign_keys: dict[tuple[str, str], str] = {}
    for table, column, constraint_type, ref_table, ref_column in key_rows:
        if constraint_type == "PRIMARY KEY":
            primary_keys.add((table, column))
        elif ref_table and ref_column:
            foreign_keys[(table, column)] = f"{ref_table}.{ref_column}"

    tables: dict[str, TableMetadata] = {}
    for table, column, data_type, max_length in column_rows:
        data_type_text = f"{data_type}({max_length})" if max_length else data_type
        tables.setdefault(table, TableMetadata(name=table)).columns.append(
            ColumnDefinition(
                name=column,
                data_type=data_type_text,
                is_primary_key=(table, column) in primary_keys,
                foreign_key=foreign_keys.get((table, column)),
            )
        )

    return DatabaseMetadata(schema_name=schema_name, tables=list(tables.values()))


def introspect_schema(client: PgClient, schema_name: str) -> DatabaseMetadata:
    """Read tables, columns and key relations for one schema."""
    params = {"schema": schema_name}
    column_rows = client.fetch_rows(_COLUMNS_SQL, params)
    key_rows = client.fetch_rows(_KEYS_SQL, params)
    return build_metadata(schema_name, column_rows, key_rows)


def _format_column(column: ColumnDefinition) -> str:
    text = f"{column.name}: {column.data_type}"
    if column.is_primary_key:
        return f"{text} (Primary Key)"
    if column.foreign_key:
        return f"{text} (Foreign Key -> {column.foreign_key})"
    return text


def format_schema(metadata: DatabaseMetadata) -> str:
    """Render schema metadata as structured plain text.

    Example::

        Table: orders
          Columns:
            - id: bigint (Primary Key)
            - customer_id: bigint (Foreign Key -> customers.id)
    """
    blocks = []
    for table in metadata.tables:
        lines = [f"Table: {table.name}", "  Columns:"]
        lines.extend(f"    - {_format_column(col)}" for col in table.columns)
        blocks.append("\n".join(lines) + "\n")
    return "\n".join(blocks)
