"""
Schema module for the extension field engine.

This module provides the metadata model for extension fields, including:
- Type definitions (FieldSpec, TableSpec, EntitySchema, FieldKind, Scope)
- The SchemaBuilder accumulator passed through the Describe-Schema broadcast
- The ExtensionRegistry caching discovered schemas per process

Invariants:
    - Identifiers (tables, columns) come from plugin metadata, never requests
    - Schemas are immutable once built
"""

from .builder import SchemaBuilder
from .registry import ExtensionRegistry, get_registry, reset_registry
from .types import (
    EntitySchema,
    FieldKind,
    FieldSpec,
    Scope,
    TableSpec,
    default_id_column,
    field,
    junction,
)

__all__ = [
    # Types
    "FieldKind",
    "FieldSpec",
    "Scope",
    "TableSpec",
    "EntitySchema",
    "field",
    "junction",
    "default_id_column",
    # Builder
    "SchemaBuilder",
    # Registry
    "ExtensionRegistry",
    "get_registry",
    "reset_registry",
]
