"""
Conversion between the wire format and the storage row format.
"""

from .junctions import JunctionResolver, JunctionResolvers, LocaleResolver, ShopResolver
from .rows import (
    extract,
    flatten_entity_row,
    is_row_form,
    normalize_rows,
    pivot,
    row_from_storage,
)
from .values import cast_value, default_value

__all__ = [
    "JunctionResolver",
    "JunctionResolvers",
    "LocaleResolver",
    "ShopResolver",
    "extract",
    "normalize_rows",
    "is_row_form",
    "pivot",
    "row_from_storage",
    "flatten_entity_row",
    "cast_value",
    "default_value",
]
