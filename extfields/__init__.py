"""
Entity field-extension engine.

Lets independently deployed plugins attach typed fields to core entities
without touching the entities' native schema:
- Plugins declare extension tables through the Describe-Schema broadcast
- Inbound payloads are stripped of extension fields before native handling
- Extension rows are upserted into plugin-owned SQLite tables
- Responses are re-enriched with the reloaded, pivoted extension data

Example:
    >>> from extfields import PluginRegistry, ExtensionRegistry
    >>> from extfields.plugins import AttributeGroupExtrasPlugin
    >>> registry = ExtensionRegistry(PluginRegistry([AttributeGroupExtrasPlugin()]))
    >>> registry.has_extensions("AttributeGroup")
    True

Invariants:
    - Entity types without extensions behave as if the engine were absent
    - Table and column names only ever come from plugin metadata

Version: 1.0.0
"""

__version__ = "1.0.0"

from .adapters import (
    EXTENSION_DATA_ATTRIBUTE,
    InboundAdapter,
    OutboundAdapter,
    PostWriteAdapter,
    RequestContext,
)
from .config import EngineConfig, ObservabilityConfig, StorageConfig, setup_logging
from .convert import JunctionResolvers, LocaleResolver, ShopResolver, extract, pivot
from .errors import (
    ExtensionStorageError,
    ExtensionValidationError,
    ExtFieldsError,
    SchemaDefinitionError,
    UnresolvableJunctionError,
)
from .plugins import ExtensionPlugin, PluginRegistry
from .schema import (
    EntitySchema,
    ExtensionRegistry,
    FieldKind,
    FieldSpec,
    SchemaBuilder,
    Scope,
    TableSpec,
    field,
    junction,
)
from .store import ExtensionStore, PersistenceService

__all__ = [
    "__version__",
    # Schema
    "FieldKind",
    "FieldSpec",
    "Scope",
    "TableSpec",
    "EntitySchema",
    "SchemaBuilder",
    "ExtensionRegistry",
    "field",
    "junction",
    # Plugins
    "ExtensionPlugin",
    "PluginRegistry",
    # Conversion
    "JunctionResolvers",
    "LocaleResolver",
    "ShopResolver",
    "extract",
    "pivot",
    # Storage
    "ExtensionStore",
    "PersistenceService",
    # Adapters
    "RequestContext",
    "EXTENSION_DATA_ATTRIBUTE",
    "InboundAdapter",
    "PostWriteAdapter",
    "OutboundAdapter",
    # Config
    "EngineConfig",
    "StorageConfig",
    "ObservabilityConfig",
    "setup_logging",
    # Errors
    "ExtFieldsError",
    "SchemaDefinitionError",
    "UnresolvableJunctionError",
    "ExtensionValidationError",
    "ExtensionStorageError",
]
