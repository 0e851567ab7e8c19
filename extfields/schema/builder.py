"""
Mutable accumulator passed through the Describe-Schema broadcast.

Each plugin receives the same SchemaBuilder for a given entity type and may
append tables, append fields to tables declared by an earlier plugin, set the
id column, or hand back a wholesale replacement (another builder or a
hook-shaped dictionary).

Hook dictionary shape (also produced by EntitySchema.to_dict()):

    {
        "entity": {"idColumn": "id_attribute_group"},
        "fields": {"attribute_group_extra": {"stringField": {"type": "string",
                                                              "column": "string_field"}}},
        "lang": {"attribute_group_lang_extra": {"_jsonKey": "attributeGroupLangExtra",
                                                "idLang": {"type": "int", "column": "id_lang"},
                                                "stringLangField": {...}}},
        "shop": {"attribute_group_shop_extra": {"_jsonKey": "attributeGroupShopExtra",
                                                "idShop": {"type": "int", "column": "id_shop"},
                                                "intShopField": {...}}},
    }
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from ..errors import SchemaDefinitionError
from .types import (
    EntitySchema,
    FieldSpec,
    Scope,
    TableSpec,
    default_id_column,
    junction,
)

logger = logging.getLogger(__name__)

# Junction entry names used by the hook dictionary shape
DEFAULT_JUNCTION_NAMES = {
    Scope.LOCALE: ("idLang", "id_lang"),
    Scope.SHOP: ("idShop", "id_shop"),
}


class SchemaBuilder:
    """Accumulates extension metadata for one entity type.

    Attributes:
        entity_type: Entity type being described
        id_column: Explicit id column, or None to derive it from entity_type
        id_accessors: Explicit id accessor names, empty to use the defaults

    Example:
        >>> builder = SchemaBuilder("Widget")
        >>> builder.add_locale_table(
        ...     "widget_lang_extra",
        ...     junction("idLang", "id_lang"),
        ...     [field("label", "string", "label")],
        ...     json_key="widgetLangExtra",
        ... )
        >>> schema = builder.build()
    """

    def __init__(self, entity_type: str) -> None:
        self.entity_type = entity_type
        self.id_column: str | None = None
        self.id_accessors: list[str] = []
        self._tables: dict[Scope, list[TableSpec]] = {scope: [] for scope in Scope}

    @property
    def entity_tables(self) -> list[TableSpec]:
        return list(self._tables[Scope.ENTITY])

    @property
    def locale_tables(self) -> list[TableSpec]:
        return list(self._tables[Scope.LOCALE])

    @property
    def scope_tables(self) -> list[TableSpec]:
        return list(self._tables[Scope.SHOP])

    def is_empty(self) -> bool:
        """Whether no table has been declared yet."""
        return not any(self._tables.values())

    def set_id_column(self, column: str) -> SchemaBuilder:
        """Declare the owning entity's id column."""
        self.id_column = column
        return self

    def add_table(self, table: TableSpec) -> TableSpec:
        """Declare a complete table.

        Raises:
            SchemaDefinitionError: If the storage table is already declared
        """
        if self.get_table(table.storage_table) is not None:
            raise SchemaDefinitionError(
                f"Table '{table.storage_table}' already declared",
                entity_type=self.entity_type,
                table=table.storage_table,
            )
        self._tables[table.scope].append(table)
        logger.debug(
            f"Declared {table.scope.name.lower()} table {table.storage_table} "
            f"for {self.entity_type}"
        )
        return table

    def add_entity_table(
        self,
        storage_table: str,
        fields: Iterable[FieldSpec],
    ) -> TableSpec:
        """Declare a flat table (one row per entity)."""
        return self.add_table(
            TableSpec(storage_table=storage_table, scope=Scope.ENTITY, fields=tuple(fields))
        )

    def add_locale_table(
        self,
        storage_table: str,
        junction_field: FieldSpec,
        fields: Iterable[FieldSpec],
        *,
        json_key: str | None = None,
    ) -> TableSpec:
        """Declare a per-locale table."""
        return self.add_table(
            TableSpec(
                storage_table=storage_table,
                scope=Scope.LOCALE,
                fields=tuple(fields),
                json_key=json_key or "",
                junction_field=junction_field,
            )
        )

    def add_shop_table(
        self,
        storage_table: str,
        junction_field: FieldSpec,
        fields: Iterable[FieldSpec],
        *,
        json_key: str | None = None,
    ) -> TableSpec:
        """Declare a per-shop table."""
        return self.add_table(
            TableSpec(
                storage_table=storage_table,
                scope=Scope.SHOP,
                fields=tuple(fields),
                json_key=json_key or "",
                junction_field=junction_field,
            )
        )

    def add_fields(self, storage_table: str, fields: Iterable[FieldSpec]) -> TableSpec:
        """Append fields to a table declared earlier (possibly by another plugin).

        Raises:
            SchemaDefinitionError: If the table is unknown
        """
        existing = self.get_table(storage_table)
        if existing is None:
            raise SchemaDefinitionError(
                f"Cannot add fields to undeclared table '{storage_table}'",
                entity_type=self.entity_type,
                table=storage_table,
            )
        updated = TableSpec(
            storage_table=existing.storage_table,
            scope=existing.scope,
            fields=existing.fields + tuple(fields),
            json_key=existing.json_key,
            junction_field=existing.junction_field,
        )
        tables = self._tables[existing.scope]
        tables[tables.index(existing)] = updated
        return updated

    def get_table(self, storage_table: str) -> TableSpec | None:
        """Get a declared table by storage name."""
        for tables in self._tables.values():
            for table in tables:
                if table.storage_table == storage_table:
                    return table
        return None

    def build(self) -> EntitySchema:
        """Freeze the accumulated metadata into an EntitySchema."""
        return EntitySchema(
            entity_type=self.entity_type,
            id_column=self.id_column or default_id_column(self.entity_type),
            entity_tables=tuple(self._tables[Scope.ENTITY]),
            locale_tables=tuple(self._tables[Scope.LOCALE]),
            scope_tables=tuple(self._tables[Scope.SHOP]),
            id_accessors=tuple(self.id_accessors),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the hook dictionary shape."""
        data = self.build().to_dict()
        if self.id_column is None:
            data["entity"].pop("idColumn")
        if not self.id_accessors:
            data["entity"].pop("idAccessors")
        return data

    @classmethod
    def from_dict(cls, entity_type: str, data: dict[str, Any]) -> SchemaBuilder:
        """Create a builder from the hook dictionary shape.

        Args:
            entity_type: Entity type being described
            data: Hook dictionary with "entity", "fields", "lang", "shop" keys

        Returns:
            New SchemaBuilder holding the declared tables

        Raises:
            SchemaDefinitionError: If a table or field definition is invalid
        """
        builder = cls(entity_type)
        entity = data.get("entity") or {}
        if entity.get("idColumn"):
            builder.set_id_column(entity["idColumn"])
        builder.id_accessors = list(entity.get("idAccessors") or [])

        for storage_table, table_data in (data.get("fields") or {}).items():
            builder.add_entity_table(
                storage_table,
                [
                    FieldSpec.from_dict(name, spec)
                    for name, spec in table_data.items()
                    if not name.startswith("_")
                ],
            )

        for scope in (Scope.LOCALE, Scope.SHOP):
            for storage_table, table_data in (data.get(scope.value) or {}).items():
                builder.add_table(_table_from_dict(entity_type, scope, storage_table, table_data))

        return builder


def _table_from_dict(
    entity_type: str,
    scope: Scope,
    storage_table: str,
    table_data: dict[str, Any],
) -> TableSpec:
    """Parse one locale/shop table of the hook dictionary shape."""
    default_name, default_column = DEFAULT_JUNCTION_NAMES[scope]
    junction_name = table_data.get("_junction", default_name)
    junction_data = table_data.get(junction_name)
    if not isinstance(junction_data, dict):
        raise SchemaDefinitionError(
            f"{scope.name.lower()} table '{storage_table}' must declare its "
            f"junction key '{junction_name}'",
            entity_type=entity_type,
            table=storage_table,
        )

    fields = [
        FieldSpec.from_dict(name, spec)
        for name, spec in table_data.items()
        if not name.startswith("_") and name != junction_name
    ]
    return TableSpec(
        storage_table=storage_table,
        scope=scope,
        fields=tuple(fields),
        json_key=table_data.get("_jsonKey") or "",
        junction_field=junction(junction_name, junction_data.get("column", default_column)),
    )
