"""
Example plugin adding custom fields to the AttributeGroup entity.

Declares one table per storage shape:
- attribute_group_extra: flat fields ("stringField": "value")
- attribute_group_lang_extra: localized fields under "attributeGroupLangExtra"
  ({"stringLangField": {"fr-FR": "...", "en-GB": "..."}})
- attribute_group_shop_extra: per-shop fields under "attributeGroupShopExtra"
  ({"intShopField": {"1": 100, "2": 200}})

Storage tables are created with extfields.store.ExtensionStore.install_schema()
or the "extfields-schema install AttributeGroup" command.
"""

from __future__ import annotations

from ..schema import SchemaBuilder, field, junction
from .base import ExtensionPlugin

ENTITY_TYPE = "AttributeGroup"


class AttributeGroupExtrasPlugin(ExtensionPlugin):
    """Adds string/int/bool/enum, localized and per-shop fields to AttributeGroup."""

    name = "attribute_group_extras"

    def on_describe_schema(self, entity_type: str, schema: SchemaBuilder) -> None:
        if entity_type != ENTITY_TYPE:
            return None

        if schema.id_column is None:
            schema.set_id_column("id_attribute_group")

        schema.add_entity_table(
            "attribute_group_extra",
            [
                field("stringField", "string", "string_field"),
                field("intField", "integer", "int_field"),
                field("boolField", "boolean", "bool_field"),
                field(
                    "enumField",
                    "enum",
                    "enum_field",
                    allowed_values=("value1", "value2", "value3"),
                ),
            ],
        )
        schema.add_locale_table(
            "attribute_group_lang_extra",
            junction("idLang", "id_lang"),
            [field("stringLangField", "string", "string_lang_field", nullable=True)],
            json_key="attributeGroupLangExtra",
        )
        schema.add_shop_table(
            "attribute_group_shop_extra",
            junction("idShop", "id_shop"),
            [field("intShopField", "integer", "int_shop_field")],
            json_key="attributeGroupShopExtra",
        )
        return None
