"""
Unit tests for the SchemaBuilder accumulator.
"""

import pytest

from extfields.errors import SchemaDefinitionError
from extfields.schema import SchemaBuilder, Scope, field, junction


class TestSchemaBuilder:
    """Tests for SchemaBuilder."""

    def test_empty_builder(self):
        """A fresh accumulator builds a schema without extensions."""
        builder = SchemaBuilder("Widget")
        assert builder.is_empty()
        assert builder.id_column is None

        schema = builder.build()
        assert schema.has_extensions is False
        assert schema.id_column == "id_widget"

    def test_explicit_id_column(self):
        schema = SchemaBuilder("Widget").set_id_column("widget_pk").build()
        assert schema.id_column == "widget_pk"

    def test_tables_grouped_by_scope(self):
        builder = SchemaBuilder("Widget")
        builder.add_entity_table("widget_extra", [field("colour", "string", "colour")])
        builder.add_locale_table(
            "widget_lang_extra", junction("idLang", "id_lang"), [field("label", "string", "label")]
        )
        builder.add_shop_table(
            "widget_shop_extra", junction("idShop", "id_shop"), [field("a", "integer", "a")]
        )

        schema = builder.build()
        assert [t.storage_table for t in schema.entity_tables] == ["widget_extra"]
        assert [t.storage_table for t in schema.locale_tables] == ["widget_lang_extra"]
        assert [t.storage_table for t in schema.scope_tables] == ["widget_shop_extra"]
        assert schema.locale_tables[0].scope == Scope.LOCALE

    def test_duplicate_table_rejected(self):
        builder = SchemaBuilder("Widget")
        builder.add_entity_table("widget_extra", [])
        with pytest.raises(SchemaDefinitionError, match="already declared"):
            builder.add_entity_table("widget_extra", [])

    def test_add_fields_to_existing_table(self):
        """A later plugin can extend a table declared by an earlier one."""
        builder = SchemaBuilder("Widget")
        builder.add_entity_table("widget_extra", [field("colour", "string", "colour")])
        builder.add_fields("widget_extra", [field("weight", "integer", "weight")])

        table = builder.get_table("widget_extra")
        assert table.get_field_names() == ["colour", "weight"]
        assert len(builder.entity_tables) == 1

    def test_add_fields_to_unknown_table(self):
        with pytest.raises(SchemaDefinitionError, match="undeclared"):
            SchemaBuilder("Widget").add_fields("nope", [field("a", "string", "a")])

    def test_dict_round_trip(self, registry):
        """The hook dictionary shape rebuilds an identical schema."""
        schema = registry.get_schema("AttributeGroup")
        rebuilt = SchemaBuilder.from_dict("AttributeGroup", schema.to_dict()).build()
        assert rebuilt == schema

    def test_from_dict_custom_junction(self):
        builder = SchemaBuilder.from_dict(
            "Widget",
            {
                "shop": {
                    "widget_store_extra": {
                        "_junction": "idStore",
                        "_jsonKey": "widgetStoreExtra",
                        "idStore": {"type": "int", "column": "id_store"},
                        "stock": {"type": "int", "column": "stock"},
                    }
                }
            },
        )
        table = builder.build().scope_tables[0]
        assert table.junction_name == "idStore"
        assert table.junction_field.column == "id_store"
        assert table.get_field_names() == ["stock"]

    def test_from_dict_missing_junction(self):
        with pytest.raises(SchemaDefinitionError, match="junction"):
            SchemaBuilder.from_dict(
                "Widget",
                {"lang": {"widget_lang_extra": {"label": {"type": "string", "column": "label"}}}},
            )

    def test_to_dict_omits_unset_entity_keys(self):
        data = SchemaBuilder("Widget").to_dict()
        assert data["entity"] == {}
