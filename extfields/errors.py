"""
Error types for the extension field engine.

This module defines all exception types raised by the engine:
- ExtFieldsError: Base exception
- SchemaDefinitionError: Plugin-declared metadata is invalid
- UnresolvableJunctionError: Locale/scope key cannot be resolved (strict mode)
- ExtensionValidationError: Value rejected by its field definition (strict mode)
- ExtensionStorageError: The backing store failed a read or write

Invariants:
    - All errors inherit from ExtFieldsError
    - Only ExtensionStorageError may abort a request in default (lenient) mode
    - Errors include context for debugging
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class ExtFieldsError(Exception):
    """Base exception for all extension field errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "EXTFIELDS_ERROR"
        self.details = details or {}


class SchemaDefinitionError(ExtFieldsError):
    """Extension metadata contributed by a plugin is invalid.

    Raised when:
    - A table or column name is not a plain SQL identifier
    - A locale/shop table does not declare its junction field
    - A field name or column is declared twice in the same table
    - A field column clashes with the junction or entity id column
    - A plugin returns a replacement of an unsupported type
    """

    def __init__(
        self,
        message: str,
        entity_type: Optional[str] = None,
        table: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="SCHEMA_DEFINITION_ERROR",
            details={"entity_type": entity_type, "table": table},
        )
        self.entity_type = entity_type
        self.table = table


class UnresolvableJunctionError(ExtFieldsError):
    """A junction value (locale code, shop id) could not be resolved.

    Only raised when the engine runs in strict mode; otherwise the
    offending row is dropped.
    """

    def __init__(self, message: str, table: str, value: Any) -> None:
        super().__init__(
            message,
            code="UNRESOLVABLE_JUNCTION",
            details={"table": table, "value": value},
        )
        self.table = table
        self.value = value


class ExtensionValidationError(ExtFieldsError):
    """An extension value was rejected by its field definition.

    Only raised when the engine runs in strict mode.
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        errors: Optional[List[str]] = None,
    ) -> None:
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details={"field": field_name, "errors": errors or []},
        )
        self.field_name = field_name
        self.errors = errors or []


class ExtensionStorageError(ExtFieldsError):
    """The backing store failed while reading or writing extension rows."""

    def __init__(self, message: str, table: Optional[str] = None) -> None:
        super().__init__(
            message,
            code="STORAGE_ERROR",
            details={"table": table},
        )
        self.table = table
