"""
Core type definitions for extension field metadata.

This module defines the value types plugins use to describe the extra
fields they attach to a core entity:
- FieldSpec: One declared field (JSON name, kind, storage column)
- TableSpec: One plugin-owned storage table and the fields it holds
- EntitySchema: Every extension table of one entity type, grouped by scope

Invariants:
    - Table and column names are plain SQL identifiers, validated on construction
    - Field names are unique within a TableSpec (they may repeat across tables)
    - Locale and shop tables always declare a junction field; entity tables never do
    - All types are frozen; a schema is read-only once built

How to change safely:
    - Add new FieldKind members with a default in convert/values.py
    - Keep to_dict() output compatible with the plugin hook dictionary shape

Example:
    >>> from extfields.schema.types import TableSpec, Scope, field
    >>> extra = TableSpec(
    ...     storage_table="widget_extra",
    ...     scope=Scope.ENTITY,
    ...     fields=(field("colour", "string", "colour"),),
    ... )
"""

from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum
from typing import Any

from ..errors import SchemaDefinitionError

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class FieldKind(Enum):
    """Supported extension field types.

    These map to storage column types and cast rules.
    """

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    ENUM = "enum"  # String restricted to allowed_values
    DATE = "date"  # ISO date text (YYYY-MM-DD)
    DATETIME = "datetime"  # ISO datetime text (YYYY-MM-DD HH:MM:SS)

    @classmethod
    def from_str(cls, value: str) -> FieldKind:
        """Convert string representation to FieldKind.

        Accepts the short aliases plugins commonly use ("str", "int", "bool").

        Args:
            value: String name of the field kind

        Returns:
            Corresponding FieldKind enum value

        Raises:
            ValueError: If value is not a valid field kind
        """
        normalized = _KIND_ALIASES.get(value.lower(), value.lower())
        for kind in cls:
            if kind.value == normalized:
                return kind
        valid = [k.value for k in cls]
        raise ValueError(f"Invalid field kind '{value}'. Valid kinds: {valid}")


_KIND_ALIASES = {
    "str": "string",
    "int": "integer",
    "bool": "boolean",
}


class Scope(Enum):
    """Storage shape of an extension table."""

    ENTITY = "fields"  # One row per owning entity
    LOCALE = "lang"  # One row per entity + locale
    SHOP = "shop"  # One row per entity + shop-like scope id


def is_identifier(name: str) -> bool:
    """Whether name is safe to use as an unquoted SQL identifier."""
    return bool(name) and IDENTIFIER_RE.match(name) is not None


def snake_case(name: str) -> str:
    """Convert a CamelCase entity type to snake_case.

    Example:
        >>> snake_case("AttributeGroup")
        'attribute_group'
    """
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def camel_case(name: str) -> str:
    """Convert a snake_case column name to lowerCamelCase."""
    first, *rest = name.split("_")
    return first + "".join(part[:1].upper() + part[1:] for part in rest)


def default_id_column(entity_type: str) -> str:
    """Deduce the id column from the entity type name.

    Example:
        >>> default_id_column("AttributeGroup")
        'id_attribute_group'
    """
    return "id_" + snake_case(entity_type)


def default_id_accessors(entity_type: str, id_column: str) -> tuple[str, ...]:
    """Conventional attribute names under which native objects expose their id.

    For id_attribute_group this yields attributeGroupId, attributeGroup,
    idAttributeGroup, id_attribute_group and finally id.
    """
    stem = id_column[3:] if id_column.startswith("id_") else id_column
    candidates = [
        camel_case(stem) + "Id",
        entity_type[:1].lower() + entity_type[1:] + "Id",
        camel_case(stem),
        camel_case(id_column),
        id_column,
        "id",
    ]
    return tuple(dict.fromkeys(c for c in candidates if c))


@dataclass(frozen=True)
class FieldSpec:
    """Definition of a single extension field.

    Attributes:
        name: JSON property name (unique within the owning table)
        kind: The data type of the field
        column: Storage column name
        nullable: Whether NULL is stored instead of the kind default
        allowed_values: Valid values if kind is ENUM

    Example:
        >>> FieldSpec(name="enumField", kind=FieldKind.ENUM, column="enum_field",
        ...           allowed_values=("value1", "value2"))
    """

    name: str
    kind: FieldKind
    column: str
    nullable: bool = False
    allowed_values: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        """Validate field definition."""
        if not self.name:
            raise SchemaDefinitionError("Field name cannot be empty")
        if self.name.startswith("_"):
            raise SchemaDefinitionError(
                f"Field name '{self.name}' is reserved (leading underscore)"
            )
        if not is_identifier(self.column):
            raise SchemaDefinitionError(
                f"Column '{self.column}' of field '{self.name}' is not a valid identifier"
            )
        if self.allowed_values is not None and self.kind != FieldKind.ENUM:
            raise SchemaDefinitionError(
                f"allowed_values only applies to enum fields, not '{self.name}'"
            )

    def validate_value(self, value: Any) -> tuple[bool, str | None]:
        """Validate a submitted value against this field definition.

        Args:
            value: The value to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        if value is None:
            return True, None

        if self.kind == FieldKind.ENUM:
            if not isinstance(value, str):
                return False, f"Field '{self.name}' must be a string, got {type(value).__name__}"
            if self.allowed_values and value not in self.allowed_values:
                return (
                    False,
                    f"Field '{self.name}' must be one of {self.allowed_values}, got '{value}'",
                )
            return True, None

        validators = {
            FieldKind.STRING: lambda v: isinstance(v, (str, int, float)),
            FieldKind.INTEGER: lambda v: (isinstance(v, int) and not isinstance(v, bool))
            or (isinstance(v, str) and v.lstrip("-").isdigit()),
            FieldKind.FLOAT: lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
            FieldKind.BOOLEAN: lambda v: isinstance(v, bool) or v in (0, 1),
            FieldKind.DATE: lambda v: isinstance(v, (str, dt.date)),
            FieldKind.DATETIME: lambda v: isinstance(v, (str, dt.datetime)),
        }
        if not validators[self.kind](value):
            return False, f"Field '{self.name}' has invalid type for kind {self.kind.value}"
        return True, None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the plugin hook dictionary shape."""
        result: dict[str, Any] = {
            "type": self.kind.value,
            "column": self.column,
            "nullable": self.nullable,
        }
        if self.allowed_values:
            result["validation"] = list(self.allowed_values)
        return result

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> FieldSpec:
        """Create from the plugin hook dictionary shape."""
        try:
            kind = FieldKind.from_str(data["type"])
            column = data["column"]
        except (KeyError, ValueError) as e:
            raise SchemaDefinitionError(f"Invalid definition for field '{name}': {e}") from e
        validation = data.get("validation")
        return cls(
            name=name,
            kind=kind,
            column=column,
            nullable=bool(data.get("nullable", False)),
            allowed_values=tuple(validation) if validation and kind == FieldKind.ENUM else None,
        )


def field(
    name: str,
    kind: str | FieldKind,
    column: str,
    *,
    nullable: bool = False,
    allowed_values: tuple[str, ...] | None = None,
) -> FieldSpec:
    """Convenience function to create a FieldSpec.

    Example:
        >>> label = field("label", "string", "label")
        >>> status = field("status", "enum", "status", allowed_values=("on", "off"))
    """
    if isinstance(kind, str):
        kind = FieldKind.from_str(kind)
    return FieldSpec(
        name=name,
        kind=kind,
        column=column,
        nullable=nullable,
        allowed_values=allowed_values,
    )


def junction(name: str, column: str) -> FieldSpec:
    """Create the integer junction field of a locale or shop table.

    Example:
        >>> junction("idLang", "id_lang")
    """
    return FieldSpec(name=name, kind=FieldKind.INTEGER, column=column)


@dataclass(frozen=True)
class TableSpec:
    """One plugin-owned storage table.

    Attributes:
        storage_table: Table name (without the configured prefix)
        scope: Entity, locale or shop storage shape
        fields: Data fields stored in the table
        json_key: Wire key for locale/shop tables (defaults to storage_table)
        junction_field: Locale/shop id field joining a row to its locale or shop

    Invariants:
        - junction_field is set iff scope is LOCALE or SHOP
        - field names are unique and never equal the junction field name
        - field columns are unique and never equal the junction column
    """

    storage_table: str
    scope: Scope
    fields: tuple[FieldSpec, ...] = dataclass_field(default_factory=tuple)
    json_key: str = ""
    junction_field: FieldSpec | None = None

    def __post_init__(self) -> None:
        """Validate table definition."""
        if not is_identifier(self.storage_table):
            raise SchemaDefinitionError(
                f"Table name '{self.storage_table}' is not a valid identifier",
                table=self.storage_table,
            )
        if not self.json_key:
            object.__setattr__(self, "json_key", self.storage_table)

        if self.scope == Scope.ENTITY:
            if self.junction_field is not None:
                raise SchemaDefinitionError(
                    f"Entity table '{self.storage_table}' cannot declare a junction field",
                    table=self.storage_table,
                )
        elif self.junction_field is None:
            raise SchemaDefinitionError(
                f"{self.scope.name.lower()} table '{self.storage_table}' must declare "
                "its junction field",
                table=self.storage_table,
            )

        names = [f.name for f in self.fields]
        if len(names) != len(set(names)):
            raise SchemaDefinitionError(
                f"Duplicate field name in table '{self.storage_table}'",
                table=self.storage_table,
            )
        if self.junction_field is not None and self.junction_field.name in names:
            raise SchemaDefinitionError(
                f"Field '{self.junction_field.name}' clashes with the junction field "
                f"of table '{self.storage_table}'",
                table=self.storage_table,
            )

        columns = [f.column for f in self.fields]
        if len(columns) != len(set(columns)):
            raise SchemaDefinitionError(
                f"Duplicate column in table '{self.storage_table}'",
                table=self.storage_table,
            )
        if self.junction_field is not None and self.junction_field.column in columns:
            raise SchemaDefinitionError(
                f"Column '{self.junction_field.column}' clashes with the junction column "
                f"of table '{self.storage_table}'",
                table=self.storage_table,
            )

    @property
    def junction_name(self) -> str | None:
        """Row key holding the junction value, if any."""
        return self.junction_field.name if self.junction_field else None

    def get_field(self, name: str) -> FieldSpec | None:
        """Get a field by name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def get_field_names(self) -> list[str]:
        """Get list of all data field names."""
        return [f.name for f in self.fields]

    def to_dict(self) -> dict[str, Any]:
        """Convert to the plugin hook dictionary shape.

        Locale/shop tables carry their JSON key under "_jsonKey" and the
        junction field next to the data fields.
        """
        result: dict[str, Any] = {}
        if self.scope != Scope.ENTITY and self.junction_field is not None:
            result["_jsonKey"] = self.json_key
            result[self.junction_field.name] = {
                "type": "int",
                "column": self.junction_field.column,
            }
        for f in self.fields:
            result[f.name] = f.to_dict()
        return result


@dataclass(frozen=True)
class EntitySchema:
    """Every extension table declared for one entity type.

    Attributes:
        entity_type: Entity type name (e.g. "AttributeGroup")
        id_column: Column holding the owning entity id in every table
        entity_tables: Flat tables, one row per entity
        locale_tables: Per-locale tables
        scope_tables: Per-shop tables
        id_accessors: Ordered attribute/key names exposing the entity id
            on native objects and payloads

    Example:
        >>> schema = EntitySchema(entity_type="Widget", id_column="id_widget")
        >>> schema.has_extensions
        False
    """

    entity_type: str
    id_column: str
    entity_tables: tuple[TableSpec, ...] = dataclass_field(default_factory=tuple)
    locale_tables: tuple[TableSpec, ...] = dataclass_field(default_factory=tuple)
    scope_tables: tuple[TableSpec, ...] = dataclass_field(default_factory=tuple)
    id_accessors: tuple[str, ...] = dataclass_field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Validate schema and fill derived defaults."""
        if not is_identifier(self.id_column):
            raise SchemaDefinitionError(
                f"Id column '{self.id_column}' is not a valid identifier",
                entity_type=self.entity_type,
            )
        if not self.id_accessors:
            object.__setattr__(
                self,
                "id_accessors",
                default_id_accessors(self.entity_type, self.id_column),
            )
        for scope, tables in (
            (Scope.ENTITY, self.entity_tables),
            (Scope.LOCALE, self.locale_tables),
            (Scope.SHOP, self.scope_tables),
        ):
            for table in tables:
                if table.scope != scope:
                    raise SchemaDefinitionError(
                        f"Table '{table.storage_table}' declared as {table.scope.name} "
                        f"but listed under {scope.name}",
                        entity_type=self.entity_type,
                        table=table.storage_table,
                    )
                columns = [f.column for f in table.fields]
                if table.junction_field is not None:
                    columns.append(table.junction_field.column)
                if self.id_column in columns:
                    raise SchemaDefinitionError(
                        f"Column '{self.id_column}' of table '{table.storage_table}' "
                        "clashes with the entity id column",
                        entity_type=self.entity_type,
                        table=table.storage_table,
                    )

    @property
    def has_extensions(self) -> bool:
        """Whether any extension table is declared."""
        return bool(self.entity_tables or self.locale_tables or self.scope_tables)

    def tables(self) -> tuple[TableSpec, ...]:
        """All tables, entity scope first."""
        return self.entity_tables + self.locale_tables + self.scope_tables

    def get_table(self, name: str) -> TableSpec | None:
        """Get a table by storage name or JSON key."""
        for table in self.tables():
            if name in (table.storage_table, table.json_key):
                return table
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the plugin hook dictionary shape."""
        return {
            "entity": {
                "idColumn": self.id_column,
                "idAccessors": list(self.id_accessors),
            },
            "fields": {t.storage_table: t.to_dict() for t in self.entity_tables},
            "lang": {t.storage_table: t.to_dict() for t in self.locale_tables},
            "shop": {t.storage_table: t.to_dict() for t in self.scope_tables},
        }
