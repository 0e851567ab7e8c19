"""
Wire <-> row conversion for extension data.

Wire format (what API clients send and receive):

    {
        "stringField": "v",                                  # entity scope, flat
        "attributeGroupLangExtra": {                         # locale scope, pivoted
            "stringLangField": {"fr-FR": "a", "en-GB": "b"}
        },
        "attributeGroupShopExtra": {                         # shop scope, pivoted
            "intShopField": {"1": 100, "2": 200}
        }
    }

Row format (what the persistence service writes), one row per junction id:

    {"attributeGroupLangExtra": [
        {"idLang": 1, "stringLangField": "a"},
        {"idLang": 2, "stringLangField": "b"},
    ]}

Invariants:
    - extract() never moves a key that no FieldSpec/TableSpec declares
    - Junction values that do not resolve are dropped (raised in strict mode)
    - pivot(normalize_rows(wire)) == wire when every junction value resolves
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..errors import UnresolvableJunctionError
from ..schema.types import EntitySchema, TableSpec
from .junctions import JunctionResolver, JunctionResolvers
from .values import load_value

logger = logging.getLogger(__name__)


def extract(
    payload: Mapping[str, Any],
    schema: EntitySchema,
    resolvers: JunctionResolvers,
    *,
    strict: bool = False,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split extension fields out of an inbound payload.

    Args:
        payload: Inbound request payload
        schema: Extension schema of the addressed entity type
        resolvers: Locale/shop junction resolvers
        strict: Raise instead of dropping unresolvable junction values

    Returns:
        Tuple of (extension_data, cleaned_payload); extension data keeps flat
        fields by name and locale/shop tables in row form under their JSON key
    """
    extension_data: dict[str, Any] = {}
    cleaned = dict(payload)

    for table in schema.entity_tables:
        for spec in table.fields:
            if spec.name in payload:
                extension_data[spec.name] = payload[spec.name]
                cleaned.pop(spec.name, None)

    for table in schema.locale_tables + schema.scope_tables:
        if table.json_key not in payload:
            continue
        extension_data[table.json_key] = normalize_rows(
            payload[table.json_key],
            table,
            resolvers.for_table(table),
            strict=strict,
        )
        cleaned.pop(table.json_key, None)

    return extension_data, cleaned


def is_row_form(value: Any, table: TableSpec) -> bool:
    """Whether value is already a list of rows carrying the junction key."""
    return (
        isinstance(value, list)
        and len(value) > 0
        and isinstance(value[0], Mapping)
        and table.junction_name in value[0]
    )


def normalize_rows(
    value: Any,
    table: TableSpec,
    resolver: JunctionResolver,
    *,
    strict: bool = False,
) -> list[dict[str, Any]]:
    """Convert a locale/shop wire value to row form.

    Row-form input passes through unchanged. Pivoted input
    ({field: {junction_key: value}}) is transposed into one row per
    resolved junction id, in first-seen order.

    Raises:
        UnresolvableJunctionError: In strict mode, for an unknown junction key
    """
    if is_row_form(value, table):
        return list(value)
    if not isinstance(value, Mapping):
        logger.debug(
            f"Ignoring {type(value).__name__} value for {table.json_key}: expected an object"
        )
        return []

    junction_name = table.junction_name
    if junction_name is None:
        raise ValueError(f"Entity table '{table.storage_table}' has no junction field")
    rows: dict[int, dict[str, Any]] = {}

    for field_name, per_key in value.items():
        if table.get_field(field_name) is None:
            logger.debug(f"Ignoring undeclared field {field_name} in {table.json_key}")
            continue
        if not isinstance(per_key, Mapping):
            logger.debug(f"Ignoring non-object value for {table.json_key}.{field_name}")
            continue
        for raw_key, field_value in per_key.items():
            junction_id = resolver.to_id(raw_key)
            if junction_id is None:
                if strict:
                    raise UnresolvableJunctionError(
                        f"Unknown {junction_name} '{raw_key}' in {table.json_key}.{field_name}",
                        table=table.storage_table,
                        value=raw_key,
                    )
                logger.debug(f"Dropping unresolvable {junction_name} '{raw_key}' in {table.json_key}")
                continue
            rows.setdefault(junction_id, {junction_name: junction_id})[field_name] = field_value

    return [row for row in rows.values() if len(row) > 1]


def junction_id_of(row: Mapping[str, Any], table: TableSpec) -> int | None:
    """Positive integer junction id of a row, or None."""
    raw = row.get(table.junction_name) if table.junction_name else None
    if isinstance(raw, bool):
        return None
    if isinstance(raw, str) and raw.strip().isdigit():
        raw = int(raw)
    if isinstance(raw, int) and raw > 0:
        return raw
    return None


def pivot(
    rows: list[Mapping[str, Any]],
    table: TableSpec,
    resolver: JunctionResolver,
) -> dict[str, dict[str, Any]]:
    """Convert row-form data back to the pivoted wire format.

    Rows whose junction id is non-positive or does not resolve are skipped.

    Example:
        >>> pivot([{"idLang": 1, "label": "Rouge"}], table, LocaleResolver({"fr-FR": 1}))
        {'label': {'fr-FR': 'Rouge'}}
    """
    result: dict[str, dict[str, Any]] = {}
    for row in rows:
        junction_id = junction_id_of(row, table)
        key = resolver.to_key(junction_id) if junction_id is not None else None
        if key is None:
            logger.debug(f"Skipping row of {table.storage_table} with junction {row.get(table.junction_name)!r}")
            continue
        for spec in table.fields:
            if spec.name in row:
                result.setdefault(spec.name, {})[key] = row[spec.name]
    return result


def row_from_storage(record: Mapping[str, Any], table: TableSpec) -> dict[str, Any]:
    """Map a stored record (keyed by column) to a row keyed by field name.

    Field values are cast per kind; the junction column, if any, is
    exposed under the junction field name.
    """
    row: dict[str, Any] = {}
    if table.junction_field is not None:
        row[table.junction_field.name] = record.get(table.junction_field.column)
    for spec in table.fields:
        row[spec.name] = load_value(record.get(spec.column), spec)
    return row


def flatten_entity_row(record: Mapping[str, Any], table: TableSpec) -> dict[str, Any]:
    """Expose an entity-scope record as flat fields by FieldSpec name."""
    return row_from_storage(record, table)
