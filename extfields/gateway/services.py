"""
Wiring of the engine components used by the gateway.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..adapters import InboundAdapter, OutboundAdapter, PostWriteAdapter
from ..convert.junctions import JunctionResolvers, LocaleResolver, ShopResolver
from ..plugins.base import PluginRegistry
from ..schema.registry import ExtensionRegistry
from ..store.persistence import PersistenceService
from ..store.sqlite import ExtensionStore
from .config import Settings
from .native import ENTITY_TYPE, AttributeGroupRepository

logger = logging.getLogger(__name__)


@dataclass
class GatewayServices:
    """Components shared by every request."""

    registry: ExtensionRegistry
    store: ExtensionStore
    persistence: PersistenceService
    inbound: InboundAdapter
    post_write: PostWriteAdapter
    outbound: OutboundAdapter
    repository: AttributeGroupRepository


def build_services(settings: Settings, plugins: PluginRegistry | None = None) -> GatewayServices:
    """Build the registry, store and adapters, installing extension tables.

    Args:
        settings: Gateway settings
        plugins: Plugin registry; loaded from settings.plugins when omitted
    """
    if plugins is None:
        plugins = PluginRegistry()
        for path in settings.plugins:
            plugins.load_path(path)

    registry = ExtensionRegistry(plugins)
    store = ExtensionStore(
        db_path=settings.db_path,
        table_prefix=settings.table_prefix,
        wal_mode=settings.wal_mode,
        busy_timeout_ms=settings.busy_timeout_ms,
    )
    resolvers = JunctionResolvers(
        locale=LocaleResolver(settings.locales),
        shop=ShopResolver(settings.shop_ids or None),
    )
    persistence = PersistenceService(registry, store, resolvers, strict=settings.strict)

    schema = registry.get_schema(ENTITY_TYPE)
    if schema.has_extensions:
        store.install_schema(schema)
    else:
        logger.warning(f"No plugin declares extension fields for {ENTITY_TYPE}")

    return GatewayServices(
        registry=registry,
        store=store,
        persistence=persistence,
        inbound=InboundAdapter(registry, resolvers, strict=settings.strict),
        post_write=PostWriteAdapter(registry, persistence),
        outbound=OutboundAdapter(registry, persistence),
        repository=AttributeGroupRepository(),
    )
