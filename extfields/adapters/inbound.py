"""
Inbound adapter: strips extension fields before native deserialization.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..convert.junctions import JunctionResolvers
from ..convert.rows import extract
from ..schema.registry import ExtensionRegistry
from .context import EXTENSION_DATA_ATTRIBUTE, RequestContext

logger = logging.getLogger(__name__)


class InboundAdapter:
    """Moves extension fields out of a payload into the request context.

    The slot is set once: a later pass over the same request only stores
    its result when the slot is still empty and the new result is not,
    so a second extraction never overwrites real data with nothing.
    """

    def __init__(
        self,
        registry: ExtensionRegistry,
        resolvers: JunctionResolvers,
        strict: bool = False,
    ) -> None:
        self.registry = registry
        self.resolvers = resolvers
        self.strict = strict

    def process(
        self,
        entity_type: str,
        payload: Any,
        context: RequestContext,
    ) -> Any:
        """Return the payload without extension fields.

        Payloads that are not mappings, and entity types without
        extensions, pass through unchanged.
        """
        if not isinstance(payload, Mapping) or not self.registry.has_extensions(entity_type):
            return payload

        schema = self.registry.get_schema(entity_type)
        extension_data, cleaned = extract(payload, schema, self.resolvers, strict=self.strict)

        current = context.get(EXTENSION_DATA_ATTRIBUTE)
        if not context.has(EXTENSION_DATA_ATTRIBUTE) or (not current and extension_data):
            context.set(EXTENSION_DATA_ATTRIBUTE, extension_data)
            logger.debug(f"Stashed {len(extension_data)} extension keys for {entity_type}")
        return cleaned
