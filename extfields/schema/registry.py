"""
Extension Registry for the extension field engine.

The ExtensionRegistry is the process-wide authority for extension
metadata. It provides:
- Lazy discovery of an entity type's schema via the Describe-Schema broadcast
- Caching of discovered schemas for the lifetime of the process
- Explicit, whole-cache invalidation

Invariants:
    - A schema is discovered at most once per entity type until clear_cache()
    - Discovery is idempotent; rebuilding yields an equal schema
    - An entity type no plugin answers for has an empty schema, never an error

How to change safely:
    - Construct one registry at process start and inject it everywhere
    - Call clear_cache() after installing or removing plugins

Example:
    >>> from extfields.plugins import PluginRegistry
    >>> registry = ExtensionRegistry(PluginRegistry([WidgetPlugin()]))
    >>> registry.has_extensions("Widget")
    True
    >>> registry.has_extensions("Unregistered")
    False
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Dict, Optional

from .types import EntitySchema

if TYPE_CHECKING:
    from ..plugins.base import PluginRegistry

logger = logging.getLogger(__name__)

# Global registry instance
_global_registry: Optional[ExtensionRegistry] = None
_registry_lock = threading.Lock()


class ExtensionRegistry:
    """Cache of EntitySchema values keyed by entity type.

    Attributes:
        plugins: Ordered plugin registry answering the broadcasts
    """

    def __init__(self, plugins: PluginRegistry) -> None:
        """Initialize an empty cache over the given plugins."""
        self.plugins = plugins
        self._schemas: Dict[str, EntitySchema] = {}

    def get_schema(self, entity_type: str) -> EntitySchema:
        """Get the extension schema of an entity type.

        The first call per entity type runs the Describe-Schema broadcast;
        later calls return the cached value.

        Args:
            entity_type: Entity type name (e.g. "AttributeGroup")

        Returns:
            EntitySchema (possibly without any table)
        """
        schema = self._schemas.get(entity_type)
        if schema is not None:
            return schema

        schema = self.plugins.describe_schema(entity_type).build()
        self._schemas[entity_type] = schema
        if schema.has_extensions:
            logger.info(
                f"Discovered extension schema for {entity_type}: "
                f"{len(schema.entity_tables)} entity, {len(schema.locale_tables)} locale, "
                f"{len(schema.scope_tables)} shop tables"
            )
        else:
            logger.debug(f"No extension schema for {entity_type}")
        return schema

    def has_extensions(self, entity_type: str) -> bool:
        """Whether at least one extension table is declared for entity_type."""
        return self.get_schema(entity_type).has_extensions

    def get_id_column(self, entity_type: str) -> str:
        """Get the id column used by entity_type's extension tables."""
        return self.get_schema(entity_type).id_column

    def cached_entity_types(self) -> list[str]:
        """Entity types discovered so far."""
        return sorted(self._schemas)

    def clear_cache(self) -> None:
        """Drop every cached schema."""
        self._schemas.clear()
        logger.debug("Extension schema cache cleared")


def get_registry(plugins: PluginRegistry | None = None) -> ExtensionRegistry:
    """Get the process-wide extension registry.

    Creates it on first use, from plugins or from the installed
    "extfields.plugins" entry points.

    Returns:
        Global ExtensionRegistry instance
    """
    global _global_registry
    with _registry_lock:
        if _global_registry is None:
            if plugins is None:
                from ..plugins.base import PluginRegistry

                plugins = PluginRegistry()
                plugins.load_entrypoints()
            _global_registry = ExtensionRegistry(plugins)
        return _global_registry


def reset_registry() -> None:
    """Reset the global registry (for testing only).

    Warning: This is intended for test cleanup only.
    Never use in production code.
    """
    global _global_registry
    with _registry_lock:
        _global_registry = None
