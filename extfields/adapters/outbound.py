"""
Outbound adapter: merges reloaded extension data into a serialized entity.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..schema.registry import ExtensionRegistry
from ..store.persistence import PersistenceService
from .identity import resolve_entity_id


class OutboundAdapter:
    """Adds extension fields to native response data."""

    def __init__(self, registry: ExtensionRegistry, persistence: PersistenceService) -> None:
        self.registry = registry
        self.persistence = persistence

    def process(
        self,
        entity_type: str,
        obj: Any,
        serialized: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Return serialized merged with the entity's extension data.

        The id is read from obj first, then from serialized. Extension
        keys win on collision.
        """
        output = dict(serialized)
        if not self.registry.has_extensions(entity_type):
            return output

        schema = self.registry.get_schema(entity_type)
        names = (schema.id_column,) + schema.id_accessors
        entity_id = resolve_entity_id(obj, names) or resolve_entity_id(serialized, names)
        if entity_id is None:
            return output

        output.update(self.persistence.load(entity_type, entity_id))
        return output
