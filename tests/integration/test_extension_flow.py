"""
Integration tests for the full request flow without HTTP.

inbound -> native write -> post-write -> outbound, using a SQLite file
and plugins contributed by two independent packages.
"""

import pytest

from extfields.adapters import InboundAdapter, OutboundAdapter, PostWriteAdapter, RequestContext
from extfields.plugins import ExtensionPlugin, PluginRegistry
from extfields.schema import ExtensionRegistry, field
from extfields.store import ExtensionStore, PersistenceService

from ..conftest import WidgetPlugin


class WidgetStockPlugin(ExtensionPlugin):
    """Second plugin adding a column to a table declared by WidgetPlugin."""

    name = "widget_stock"

    def on_describe_schema(self, entity_type, schema):
        if entity_type == "Widget":
            schema.add_fields("widget_extra", [field("stock", "integer", "stock")])


class NativeWidget:
    def __init__(self, widget_id, name):
        self.widgetId = widget_id
        self.name = name


class TestExtensionFlow:
    """End-to-end flow through the three adapters."""

    @pytest.fixture
    def components(self, data_dir, resolvers):
        registry = ExtensionRegistry(PluginRegistry([WidgetPlugin(), WidgetStockPlugin()]))
        store = ExtensionStore(f"{data_dir}/flow.db", wal_mode=True)
        store.install_schema(registry.get_schema("Widget"))
        persistence = PersistenceService(registry, store, resolvers)
        return (
            InboundAdapter(registry, resolvers),
            PostWriteAdapter(registry, persistence),
            OutboundAdapter(registry, persistence),
        )

    def test_create_then_read(self, components):
        inbound, post_write, outbound = components
        context = RequestContext()

        payload = {
            "name": "Bolt",
            "colour": "grey",
            "stock": "12",
            "widgetLangExtra": {"label": {"fr-FR": "Boulon", "en-GB": "Bolt"}},
        }
        cleaned = inbound.process("Widget", payload, context)
        assert cleaned == {"name": "Bolt"}

        widget = NativeWidget(5, cleaned["name"])
        post_write.process("Widget", widget, context)

        output = outbound.process("Widget", widget, {"id": 5, "name": "Bolt"})
        assert output == {
            "id": 5,
            "name": "Bolt",
            "colour": "grey",
            "weight": 0,
            "size": "",
            "stock": 12,
            "widgetLangExtra": {"label": {"fr-FR": "Boulon", "en-GB": "Bolt"}},
        }

    def test_new_request_new_context(self, components):
        """Stashed data never leaks across requests."""
        inbound, post_write, outbound = components

        first = RequestContext()
        inbound.process("Widget", {"colour": "red"}, first)
        post_write.process("Widget", NativeWidget(1, "a"), first)

        second = RequestContext()
        inbound.process("Widget", {"name": "b"}, second)
        post_write.process("Widget", NativeWidget(2, "b"), second)

        assert outbound.process("Widget", NativeWidget(2, "b"), {}) == {}
        assert outbound.process("Widget", NativeWidget(1, "a"), {})["colour"] == "red"
