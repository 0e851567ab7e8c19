"""
Shared fixtures: a Widget test plugin, junction resolvers and a
temporary SQLite-backed persistence service.
"""

import tempfile
from pathlib import Path

import pytest

from extfields.convert import JunctionResolvers, LocaleResolver, ShopResolver
from extfields.plugins import AttributeGroupExtrasPlugin, ExtensionPlugin, PluginRegistry
from extfields.schema import ExtensionRegistry, field, junction
from extfields.store import ExtensionStore, PersistenceService

LOCALES = {"fr-FR": 1, "en-GB": 2}


class WidgetPlugin(ExtensionPlugin):
    """Declares one table per scope for the Widget entity."""

    name = "widget"

    def on_describe_schema(self, entity_type, schema):
        if entity_type != "Widget":
            return None
        schema.add_entity_table(
            "widget_extra",
            [
                field("colour", "string", "colour"),
                field("weight", "integer", "weight"),
                field("size", "enum", "size", allowed_values=("s", "m", "l")),
            ],
        )
        schema.add_locale_table(
            "widget_lang_extra",
            junction("idLang", "id_lang"),
            [field("label", "string", "label")],
            json_key="widgetLangExtra",
        )
        schema.add_shop_table(
            "widget_shop_extra",
            junction("idShop", "id_shop"),
            [field("a", "integer", "a"), field("b", "integer", "b")],
            json_key="widgetShopExtra",
        )
        return None


@pytest.fixture
def plugins():
    """Plugin registry with the Widget and AttributeGroup plugins."""
    return PluginRegistry([WidgetPlugin(), AttributeGroupExtrasPlugin()])


@pytest.fixture
def registry(plugins):
    return ExtensionRegistry(plugins)


@pytest.fixture
def resolvers():
    return JunctionResolvers(locale=LocaleResolver(LOCALES), shop=ShopResolver([1, 2, 3]))


@pytest.fixture
def data_dir():
    """Create temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def store(data_dir, registry):
    """Store with the Widget and AttributeGroup tables installed."""
    store = ExtensionStore(str(Path(data_dir) / "extensions.db"), wal_mode=False)
    store.install_schema(registry.get_schema("Widget"))
    store.install_schema(registry.get_schema("AttributeGroup"))
    return store


@pytest.fixture
def service(registry, store, resolvers):
    return PersistenceService(registry, store, resolvers)
