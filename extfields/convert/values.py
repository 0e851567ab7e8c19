"""
Per-kind value casting and defaults.

Pure functions, no I/O. Values leaving the engine (to storage or to the
wire) are always cast to the Python type matching the field kind.
"""

from __future__ import annotations

import datetime as dt
from typing import Any

from ..schema.types import FieldKind, FieldSpec

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}

# SQLite INTEGER is a signed 64-bit value
INTEGER_MIN = -(2**63)
INTEGER_MAX = 2**63 - 1


def default_value(kind: FieldKind) -> Any:
    """Value stored for a non-nullable field the caller did not supply."""
    if kind == FieldKind.INTEGER:
        return 0
    if kind == FieldKind.FLOAT:
        return 0.0
    if kind == FieldKind.BOOLEAN:
        return False
    return ""


def cast_value(value: Any, kind: FieldKind) -> Any:
    """Cast value to the Python type of kind.

    Args:
        value: Raw value (from the wire or from storage)
        kind: Target field kind

    Returns:
        Cast value, or None if value is None

    Raises:
        ValueError: If value cannot be represented as kind
    """
    if value is None:
        return None

    if kind == FieldKind.INTEGER:
        return _cast_integer(value)

    if kind == FieldKind.FLOAT:
        return float(value)

    if kind == FieldKind.BOOLEAN:
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
            raise ValueError(f"Cannot interpret '{value}' as a boolean")
        return bool(value)

    if kind == FieldKind.DATE:
        if isinstance(value, dt.datetime):
            return value.date().isoformat()
        if isinstance(value, dt.date):
            return value.isoformat()
        return str(value)

    if kind == FieldKind.DATETIME:
        if isinstance(value, dt.datetime):
            return value.isoformat(sep=" ", timespec="seconds")
        if isinstance(value, dt.date):
            return f"{value.isoformat()} 00:00:00"
        return str(value)

    # STRING, ENUM
    return str(value)


def storage_value(value: Any, spec: FieldSpec) -> Any:
    """Value to bind for spec when writing a row.

    None becomes NULL for nullable fields and the kind default otherwise.
    """
    if value is None:
        return None if spec.nullable else default_value(spec.kind)
    return cast_value(value, spec.kind)


def load_value(value: Any, spec: FieldSpec) -> Any:
    """Value exposed on the wire for a stored column value."""
    return cast_value(value, spec.kind)


def _cast_integer(value: Any) -> int:
    """Cast to an int that fits a SQLite INTEGER column.

    Digit strings are parsed exactly; only decimal text such as "3.0"
    goes through float.
    """
    try:
        if isinstance(value, str):
            text = value.strip()
            try:
                result = int(text)
            except ValueError:
                result = int(float(text))
        else:
            result = int(value)
    except OverflowError as e:
        raise ValueError(f"Integer value {value!r} is out of range") from e
    if not INTEGER_MIN <= result <= INTEGER_MAX:
        raise ValueError(f"Integer value {value!r} is out of range")
    return result
