"""
Plugin contract and ordered plugin registry.

Plugins attach extension fields to core entities by answering three
in-process broadcasts:
- on_describe_schema: declare tables/fields on the shared SchemaBuilder
- on_load_data: enrich or replace the data loaded for an entity
- on_persist_data: react after extension rows were written

Invariants:
    - Broadcasts run sequentially in registration order
    - A handler returning None leaves the accumulator as it is
    - A handler returning a value replaces the accumulator for the next handler
    - Plugin names are unique within a registry

How to change safely:
    - Add new hooks as methods with no-op defaults on ExtensionPlugin
    - Never reorder registered plugins; order is part of the contract
"""

from __future__ import annotations

import importlib
import importlib.metadata
import logging
from typing import Any, Iterator

from ..errors import ExtFieldsError, SchemaDefinitionError
from ..schema.builder import SchemaBuilder

logger = logging.getLogger(__name__)

ENTRYPOINT_GROUP = "extfields.plugins"


class DuplicateRegistrationError(ExtFieldsError):
    """Raised when attempting to register a plugin name twice."""

    def __init__(self, message: str, plugin_name: str | None = None) -> None:
        super().__init__(message, code="DUPLICATE_REGISTRATION", details={"plugin": plugin_name})
        self.plugin_name = plugin_name


class ExtensionPlugin:
    """Base class for extension plugins.

    Subclasses override only the hooks they need; the defaults do nothing.

    Attributes:
        name: Unique plugin name (defaults to the class name)

    Example:
        >>> class WidgetPlugin(ExtensionPlugin):
        ...     def on_describe_schema(self, entity_type, schema):
        ...         if entity_type == "Widget":
        ...             schema.add_entity_table("widget_extra", [field("colour", "string", "colour")])
    """

    name: str = ""

    @property
    def plugin_name(self) -> str:
        return self.name or type(self).__name__

    def on_describe_schema(
        self,
        entity_type: str,
        schema: SchemaBuilder,
    ) -> SchemaBuilder | dict[str, Any] | None:
        """Declare extension tables for entity_type.

        Mutate schema in place and return None, or return a replacement.
        """
        return None

    def on_load_data(
        self,
        entity_type: str,
        entity_id: int,
        data: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Enrich loaded extension data; return a replacement or None."""
        return None

    def on_persist_data(
        self,
        entity_type: str,
        entity_id: int,
        extension_data: dict[str, Any],
        entity_data: dict[str, Any],
    ) -> None:
        """Called after extension rows of entity_id were written."""
        return None


class PluginRegistry:
    """Ordered registry of installed extension plugins.

    Example:
        >>> plugins = PluginRegistry()
        >>> plugins.register(WidgetPlugin())
        >>> builder = plugins.describe_schema("Widget")
    """

    def __init__(self, plugins: list[ExtensionPlugin] | None = None) -> None:
        self._plugins: list[ExtensionPlugin] = []
        for plugin in plugins or []:
            self.register(plugin)

    def __len__(self) -> int:
        return len(self._plugins)

    def __iter__(self) -> Iterator[ExtensionPlugin]:
        return iter(list(self._plugins))

    def register(self, plugin: ExtensionPlugin) -> None:
        """Append a plugin to the broadcast order.

        Raises:
            DuplicateRegistrationError: If a plugin with the same name exists
            TypeError: If plugin is not an ExtensionPlugin
        """
        if not isinstance(plugin, ExtensionPlugin):
            raise TypeError(f"{plugin!r} is not an ExtensionPlugin")
        if self.get(plugin.plugin_name) is not None:
            raise DuplicateRegistrationError(
                f"Plugin '{plugin.plugin_name}' already registered",
                plugin_name=plugin.plugin_name,
            )
        self._plugins.append(plugin)
        logger.debug(f"Registered extension plugin: {plugin.plugin_name}")

    def unregister(self, name: str) -> bool:
        """Remove a plugin by name. Returns True if it was registered."""
        plugin = self.get(name)
        if plugin is None:
            return False
        self._plugins.remove(plugin)
        return True

    def get(self, name: str) -> ExtensionPlugin | None:
        """Get a plugin by name."""
        for plugin in self._plugins:
            if plugin.plugin_name == name:
                return plugin
        return None

    def plugins(self) -> list[ExtensionPlugin]:
        """Registered plugins in broadcast order."""
        return list(self._plugins)

    def describe_schema(self, entity_type: str) -> SchemaBuilder:
        """Run the Describe-Schema broadcast for entity_type.

        Returns:
            The final accumulator

        Raises:
            SchemaDefinitionError: If a plugin returns an unsupported replacement
        """
        schema = SchemaBuilder(entity_type)
        for plugin in self._plugins:
            result = plugin.on_describe_schema(entity_type, schema)
            if result is None:
                continue
            if isinstance(result, SchemaBuilder):
                schema = result
            elif isinstance(result, dict):
                schema = SchemaBuilder.from_dict(entity_type, result)
            else:
                raise SchemaDefinitionError(
                    f"Plugin '{plugin.plugin_name}' returned {type(result).__name__} "
                    "from on_describe_schema; expected SchemaBuilder, dict or None",
                    entity_type=entity_type,
                )
        return schema

    def load_data(
        self,
        entity_type: str,
        entity_id: int,
        data: dict[str, Any],
    ) -> dict[str, Any]:
        """Run the chained Load-Extension-Data broadcast.

        The last non-None return value wins.
        """
        for plugin in self._plugins:
            result = plugin.on_load_data(entity_type, entity_id, data)
            if result is not None:
                data = result
        return data

    def persist_data(
        self,
        entity_type: str,
        entity_id: int,
        extension_data: dict[str, Any],
        entity_data: dict[str, Any],
    ) -> None:
        """Run the fire-and-forget Persist-Extension-Data broadcast."""
        for plugin in self._plugins:
            plugin.on_persist_data(entity_type, entity_id, extension_data, entity_data)

    def load_path(self, path: str) -> ExtensionPlugin:
        """Import and register a plugin from a "module:attribute" path.

        The attribute may be a plugin instance or a plugin class taking
        no constructor arguments.
        """
        module_name, _, attr = path.partition(":")
        if not module_name or not attr:
            raise ValueError(f"Plugin path must look like 'module:attribute', got '{path}'")
        target = getattr(importlib.import_module(module_name), attr)
        plugin = target() if isinstance(target, type) else target
        self.register(plugin)
        return plugin

    def load_entrypoints(self, group: str = ENTRYPOINT_GROUP) -> int:
        """Register plugins advertised by installed packages.

        Returns:
            Number of plugins registered
        """
        loaded = 0
        for entry_point in importlib.metadata.entry_points(group=group):
            target = entry_point.load()
            plugin = target() if isinstance(target, type) else target
            self.register(plugin)
            loaded += 1
            logger.info(f"Loaded extension plugin {plugin.plugin_name} from {entry_point.value}")
        return loaded
