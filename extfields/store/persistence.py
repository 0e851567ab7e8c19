"""
Persistence service: writes and reloads extension rows.

persist() turns converted extension data into upserts:
- Entity tables: one upsert keyed by the entity id; every declared column
  is inserted and updated, omitted fields falling back to their default
- Locale/shop tables: one upsert per row keyed by (entity id, junction id);
  only fields with a non-null value in the row are updated, the insert
  still supplies NULL or the default so a new row never has undefined
  columns

load() reads the rows back and re-pivots locale/shop data to wire format.

Invariants:
    - A table with no data in the request is never written
    - Rows with an unresolvable junction id are never written or returned
    - Entity types without extensions are no-ops for both directions
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..convert.junctions import JunctionResolvers
from ..convert.rows import flatten_entity_row, junction_id_of, pivot, row_from_storage
from ..convert.values import default_value, storage_value
from ..errors import ExtensionValidationError, UnresolvableJunctionError
from ..schema.registry import ExtensionRegistry
from ..schema.types import EntitySchema, FieldSpec, TableSpec
from .query import Statement, select_where, upsert
from .sqlite import ExtensionStore

logger = logging.getLogger(__name__)


class PersistenceService:
    """Generic persistence of extension data for any registered entity type.

    Attributes:
        registry: Extension registry providing schemas
        store: SQLite store holding the extension tables
        resolvers: Locale/shop junction resolvers
        strict: Raise on unresolvable junctions and invalid values instead
            of dropping them

    Example:
        >>> service = PersistenceService(registry, store, resolvers)
        >>> service.persist("AttributeGroup", 7, {"stringField": "red"})
        >>> service.load("AttributeGroup", 7)
        {'stringField': 'red', 'intField': 0, ...}
    """

    def __init__(
        self,
        registry: ExtensionRegistry,
        store: ExtensionStore,
        resolvers: JunctionResolvers,
        strict: bool = False,
    ) -> None:
        self.registry = registry
        self.store = store
        self.resolvers = resolvers
        self.strict = strict

    def persist(
        self,
        entity_type: str,
        entity_id: int,
        extension_data: Mapping[str, Any],
        entity_data: Mapping[str, Any] | None = None,
    ) -> bool:
        """Write extension data of one entity.

        Args:
            entity_type: Entity type name
            entity_id: Positive id of the native entity
            extension_data: Output of convert.rows.extract()
            entity_data: Native entity data, forwarded to plugins

        Returns:
            True if the Persist-Extension-Data broadcast ran

        Raises:
            ExtensionStorageError: If the write fails
            UnresolvableJunctionError: In strict mode only
            ExtensionValidationError: In strict mode only
        """
        schema = self.registry.get_schema(entity_type)
        if not schema.has_extensions or not extension_data:
            return False
        if entity_id <= 0:
            logger.debug(f"Not persisting extensions of {entity_type} with id {entity_id}")
            return False

        statements: list[Statement] = []
        for table in schema.entity_tables:
            statement = self._entity_upsert(schema, table, entity_id, extension_data)
            if statement is not None:
                statements.append(statement)

        for table in schema.locale_tables + schema.scope_tables:
            rows = extension_data.get(table.json_key)
            if not rows:
                continue
            statements.extend(self._junction_upserts(schema, table, entity_id, rows))

        if statements:
            self.store.execute(statements)
            logger.debug(
                f"Persisted {len(statements)} extension rows",
                extra={"entity_type": entity_type, "entity_id": entity_id},
            )

        self.registry.plugins.persist_data(
            entity_type, entity_id, dict(extension_data), dict(entity_data or {})
        )
        return True

    def load(self, entity_type: str, entity_id: int) -> dict[str, Any]:
        """Load extension data of one entity in wire format.

        Missing rows yield absent keys, never an error.

        Raises:
            ExtensionStorageError: If the read fails
        """
        schema = self.registry.get_schema(entity_type)
        if not schema.has_extensions or entity_id <= 0:
            return {}

        result: dict[str, Any] = {}
        for table in schema.entity_tables:
            records = self.store.fetch_all(
                select_where(self.store.table_name(table), schema.id_column, entity_id)
            )
            if records:
                result.update(flatten_entity_row(records[0], table))

        for table in schema.locale_tables + schema.scope_tables:
            if table.junction_field is None:
                continue
            records = self.store.fetch_all(
                select_where(
                    self.store.table_name(table),
                    schema.id_column,
                    entity_id,
                    order_by=table.junction_field.column,
                )
            )
            rows = [row_from_storage(record, table) for record in records]
            pivoted = pivot(rows, table, self.resolvers.for_table(table))
            if pivoted:
                result[table.json_key] = pivoted

        return self.registry.plugins.load_data(entity_type, entity_id, result)

    def _entity_upsert(
        self,
        schema: EntitySchema,
        table: TableSpec,
        entity_id: int,
        extension_data: Mapping[str, Any],
    ) -> Statement | None:
        if not any(spec.name in extension_data for spec in table.fields):
            return None
        values: dict[str, Any] = {schema.id_column: entity_id}
        for spec in table.fields:
            if spec.name in extension_data:
                values[spec.column] = self._bind_value(spec, extension_data[spec.name])
            else:
                values[spec.column] = default_value(spec.kind)
        return upsert(
            self.store.table_name(table),
            values,
            conflict_columns=[schema.id_column],
            update_columns=[spec.column for spec in table.fields],
        )

    def _junction_upserts(
        self,
        schema: EntitySchema,
        table: TableSpec,
        entity_id: int,
        rows: Any,
    ) -> list[Statement]:
        if table.junction_field is None:
            return []
        resolver = self.resolvers.for_table(table)
        junction_column = table.junction_field.column
        statements = []

        for row in rows if isinstance(rows, list) else []:
            if not isinstance(row, Mapping):
                continue
            junction_id = junction_id_of(row, table)
            if junction_id is None or resolver.to_key(junction_id) is None:
                if self.strict:
                    raise UnresolvableJunctionError(
                        f"Unknown {table.junction_name} {row.get(table.junction_name)!r} "
                        f"in {table.json_key}",
                        table=table.storage_table,
                        value=row.get(table.junction_name),
                    )
                logger.debug(
                    f"Dropping {table.storage_table} row with junction "
                    f"{row.get(table.junction_name)!r}"
                )
                continue

            values: dict[str, Any] = {schema.id_column: entity_id, junction_column: junction_id}
            updates = []
            for spec in table.fields:
                # null means "not provided": the stored value is kept
                if row.get(spec.name) is not None:
                    values[spec.column] = self._bind_value(spec, row[spec.name])
                    updates.append(spec.column)
                else:
                    values[spec.column] = storage_value(None, spec)
            statements.append(
                upsert(
                    self.store.table_name(table),
                    values,
                    conflict_columns=[schema.id_column, junction_column],
                    update_columns=updates,
                )
            )
        return statements

    def _bind_value(self, spec: FieldSpec, value: Any) -> Any:
        """Cast a submitted value for binding, honouring strict mode."""
        if self.strict:
            is_valid, error = spec.validate_value(value)
            if not is_valid:
                raise ExtensionValidationError(error or "Invalid value", field_name=spec.name)
        try:
            return storage_value(value, spec)
        except (TypeError, ValueError, OverflowError) as e:
            if self.strict:
                raise ExtensionValidationError(
                    f"Field '{spec.name}' cannot store {value!r}: {e}",
                    field_name=spec.name,
                ) from e
            logger.warning(f"Storing default for {spec.name}: cannot cast {value!r} ({e})")
            return default_value(spec.kind)
