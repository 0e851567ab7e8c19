"""
Post-write adapter: persists stashed extension data once the native
create/update has succeeded.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..schema.registry import ExtensionRegistry
from ..store.persistence import PersistenceService
from .context import EXTENSION_DATA_ATTRIBUTE, RequestContext
from .identity import resolve_entity_id, to_entity_data

logger = logging.getLogger(__name__)


class PostWriteAdapter:
    """Hands stashed extension data and the written entity id to persistence."""

    def __init__(self, registry: ExtensionRegistry, persistence: PersistenceService) -> None:
        self.registry = registry
        self.persistence = persistence

    def process(
        self,
        entity_type: str,
        result: Any,
        context: RequestContext,
        uri_variables: Mapping[str, Any] | None = None,
        entity_data: Mapping[str, Any] | None = None,
    ) -> Any:
        """Persist extension data for the written entity.

        Args:
            entity_type: Entity type name
            result: Native result of the create/update
            context: Request context holding the stashed data
            uri_variables: Path variables of the request (update case)
            entity_data: Native entity data; derived from result when omitted

        Returns:
            result, unchanged

        Raises:
            ExtensionStorageError: If the write fails
        """
        if not self.registry.has_extensions(entity_type):
            return result
        extension_data = context.get(EXTENSION_DATA_ATTRIBUTE)
        if not extension_data:
            return result

        schema = self.registry.get_schema(entity_type)
        names = (schema.id_column,) + schema.id_accessors
        entity_id = resolve_entity_id(uri_variables or {}, names) or resolve_entity_id(
            result, names
        )
        if entity_id is None:
            logger.warning(
                f"Dropping extension data for {entity_type}: entity id not resolvable",
                extra={"keys": sorted(extension_data)},
            )
            return result

        data = dict(entity_data) if entity_data is not None else to_entity_data(result)
        self.persistence.persist(entity_type, entity_id, extension_data, data)
        return result
