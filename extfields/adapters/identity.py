"""
Entity id resolution and native data extraction for request results.

Ids are probed through an ordered list of accessor names (the schema's
id column first, then conventional property names, then "id"). Any
failure while introspecting an object means "not found".
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Iterable, Mapping

logger = logging.getLogger(__name__)


def _positive_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    return None


def _id_from_mapping(value: Any) -> int | None:
    if isinstance(value, str) and value.isdigit():
        value = int(value)
    return _positive_int(value)


def resolve_entity_id(source: Any, names: Iterable[str]) -> int | None:
    """Find a positive entity id on a mapping or object.

    Args:
        source: Serialized mapping or native result object
        names: Accessor names, probed in order

    Returns:
        The first positive integer found, or None
    """
    if source is None:
        return None

    if isinstance(source, Mapping):
        for name in names:
            entity_id = _id_from_mapping(source.get(name))
            if entity_id is not None:
                return entity_id
        return None

    for name in names:
        try:
            value = getattr(source, name)
            if callable(value):
                value = value()
        except Exception as e:
            logger.debug(f"Accessor {name} failed on {type(source).__name__}: {e}")
            continue
        entity_id = _positive_int(value)
        if entity_id is not None:
            return entity_id
    return None


def to_entity_data(obj: Any) -> dict[str, Any]:
    """Normalize a native result object to a plain dict.

    Returns an empty dict when the object cannot be introspected.
    """
    if obj is None:
        return {}
    if isinstance(obj, Mapping):
        return dict(obj)
    try:
        if hasattr(obj, "model_dump"):
            return dict(obj.model_dump())
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return dataclasses.asdict(obj)
        return {k: v for k, v in vars(obj).items() if not k.startswith("_")}
    except Exception as e:
        logger.debug(f"Cannot read entity data from {type(obj).__name__}: {e}")
        return {}
