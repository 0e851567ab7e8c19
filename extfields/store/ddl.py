"""
DDL generation for plugin-owned extension tables.

Table naming convention: {entity_table}_extra, {entity_table}_lang_extra,
{entity_table}_shop_extra. Entity tables are keyed by the entity id
column; locale/shop tables by (entity id, junction column).

Example:
    CREATE TABLE IF NOT EXISTS "attribute_group_lang_extra" (
        "id_attribute_group" INTEGER NOT NULL,
        "id_lang" INTEGER NOT NULL,
        "string_lang_field" TEXT,
        PRIMARY KEY ("id_attribute_group", "id_lang")
    )
"""

from __future__ import annotations

from ..convert.values import default_value
from ..schema.types import EntitySchema, FieldKind, FieldSpec, TableSpec
from .query import quote_identifier

_COLUMN_TYPES = {
    FieldKind.INTEGER: "INTEGER",
    FieldKind.BOOLEAN: "INTEGER",
    FieldKind.FLOAT: "REAL",
}


def _column_definition(spec: FieldSpec) -> str:
    column_type = _COLUMN_TYPES.get(spec.kind, "TEXT")
    if spec.nullable:
        return f"{quote_identifier(spec.column)} {column_type}"
    default = default_value(spec.kind)
    if isinstance(default, str):
        literal = "''"
    else:
        literal = str(int(default) if isinstance(default, bool) else default)
    return f"{quote_identifier(spec.column)} {column_type} NOT NULL DEFAULT {literal}"


def create_table_statement(table: TableSpec, id_column: str, prefix: str = "") -> str:
    """CREATE TABLE IF NOT EXISTS statement for one extension table."""
    key_columns = [id_column]
    definitions = [f"{quote_identifier(id_column)} INTEGER NOT NULL"]
    if table.junction_field is not None:
        key_columns.append(table.junction_field.column)
        definitions.append(f"{quote_identifier(table.junction_field.column)} INTEGER NOT NULL")
    definitions.extend(_column_definition(spec) for spec in table.fields)
    primary_key = ", ".join(quote_identifier(c) for c in key_columns)
    definitions.append(f"PRIMARY KEY ({primary_key})")
    body = ",\n    ".join(definitions)
    return (
        f"CREATE TABLE IF NOT EXISTS {quote_identifier(prefix + table.storage_table)} (\n"
        f"    {body}\n)"
    )


def create_table_statements(schema: EntitySchema, prefix: str = "") -> list[str]:
    """CREATE TABLE statements for every table of schema."""
    return [create_table_statement(t, schema.id_column, prefix) for t in schema.tables()]


def drop_table_statements(schema: EntitySchema, prefix: str = "") -> list[str]:
    """DROP TABLE statements for every table of schema."""
    return [
        f"DROP TABLE IF EXISTS {quote_identifier(prefix + t.storage_table)}"
        for t in schema.tables()
    ]
