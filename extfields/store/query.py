"""
Parameterized SQL builder for extension tables.

Statement structure (table and column names) comes exclusively from
registered TableSpec/FieldSpec metadata; every value is a bound parameter.

Invariants:
    - Identifiers are validated and quoted before interpolation
    - Values never appear in statement text
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from ..errors import SchemaDefinitionError
from ..schema.types import is_identifier


@dataclass(frozen=True)
class Statement:
    """A SQL statement with its bound parameters."""

    sql: str
    params: tuple[Any, ...] = ()


def quote_identifier(name: str) -> str:
    """Quote a SQL identifier.

    Raises:
        SchemaDefinitionError: If name is not a plain identifier
    """
    if not is_identifier(name):
        raise SchemaDefinitionError(f"Refusing to use '{name}' as an SQL identifier")
    return '"' + name.replace('"', '""') + '"'


def upsert(
    table: str,
    values: dict[str, Any],
    conflict_columns: Sequence[str],
    update_columns: Sequence[str],
) -> Statement:
    """Build an INSERT ... ON CONFLICT statement.

    Args:
        table: Target table (already prefixed)
        values: Column -> value for the insert clause
        conflict_columns: Primary key columns
        update_columns: Columns overwritten when the row already exists;
            empty means an existing row is left untouched

    Example:
        >>> upsert("w_extra", {"id_w": 1, "colour": "red"}, ["id_w"], ["colour"]).sql
        'INSERT INTO "w_extra" ("id_w", "colour") VALUES (?, ?) ON CONFLICT ("id_w") DO UPDATE SET "colour" = excluded."colour"'
    """
    columns = ", ".join(quote_identifier(c) for c in values)
    placeholders = ", ".join("?" for _ in values)
    conflict = ", ".join(quote_identifier(c) for c in conflict_columns)

    sql = f"INSERT INTO {quote_identifier(table)} ({columns}) VALUES ({placeholders})"
    if update_columns:
        assignments = ", ".join(
            f"{quote_identifier(c)} = excluded.{quote_identifier(c)}" for c in update_columns
        )
        sql += f" ON CONFLICT ({conflict}) DO UPDATE SET {assignments}"
    else:
        sql += f" ON CONFLICT ({conflict}) DO NOTHING"
    return Statement(sql=sql, params=tuple(values.values()))


def select_where(
    table: str,
    column: str,
    value: Any,
    order_by: str | None = None,
) -> Statement:
    """Build SELECT * FROM table WHERE column = ?."""
    sql = f"SELECT * FROM {quote_identifier(table)} WHERE {quote_identifier(column)} = ?"
    if order_by:
        sql += f" ORDER BY {quote_identifier(order_by)}"
    return Statement(sql=sql, params=(value,))
