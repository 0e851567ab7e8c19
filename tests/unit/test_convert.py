"""
Unit tests for wire <-> row conversion.

Tests cover:
- Junction resolvers
- Value casting and defaults
- extract() scope isolation
- normalize_rows() / pivot() round trip
"""

import datetime as dt

import pytest

from extfields.convert import (
    JunctionResolvers,
    LocaleResolver,
    ShopResolver,
    cast_value,
    default_value,
    extract,
    normalize_rows,
    pivot,
    row_from_storage,
)
from extfields.convert.rows import is_row_form, junction_id_of
from extfields.convert.values import storage_value
from extfields.errors import UnresolvableJunctionError
from extfields.schema import FieldKind, field


class TestJunctionResolvers:
    """Tests for LocaleResolver and ShopResolver."""

    def test_locale_resolver(self):
        locales = LocaleResolver({"fr-FR": 1, "en-GB": 2})
        assert locales.to_id("en-GB") == 2
        assert locales.to_id("de-DE") is None
        assert locales.to_id(1) is None
        assert locales.to_key(1) == "fr-FR"
        assert locales.to_key(9) is None

    def test_shop_resolver_any_positive(self):
        shops = ShopResolver()
        assert shops.to_id("7") == 7
        assert shops.to_id(7) == 7
        assert shops.to_id("0") is None
        assert shops.to_id(-1) is None
        assert shops.to_id(True) is None
        assert shops.to_id("x") is None
        assert shops.to_key(7) == "7"

    def test_shop_resolver_known_ids(self):
        shops = ShopResolver([1, 2])
        assert shops.to_id("2") == 2
        assert shops.to_id("3") is None
        assert shops.to_key(3) is None

    def test_for_table(self, registry, resolvers):
        schema = registry.get_schema("Widget")
        assert resolvers.for_table(schema.locale_tables[0]) is resolvers.locale
        assert resolvers.for_table(schema.scope_tables[0]) is resolvers.shop
        with pytest.raises(ValueError):
            resolvers.for_table(schema.entity_tables[0])


class TestValues:
    """Tests for per-kind casting."""

    def test_defaults(self):
        assert default_value(FieldKind.STRING) == ""
        assert default_value(FieldKind.INTEGER) == 0
        assert default_value(FieldKind.FLOAT) == 0.0
        assert default_value(FieldKind.BOOLEAN) is False
        assert default_value(FieldKind.ENUM) == ""

    def test_cast_integer(self):
        assert cast_value("42", FieldKind.INTEGER) == 42
        assert cast_value(3.9, FieldKind.INTEGER) == 3
        with pytest.raises(ValueError):
            cast_value("abc", FieldKind.INTEGER)

    def test_cast_integer_exact_for_large_digit_strings(self):
        """Digit strings beyond float precision are not rounded."""
        assert cast_value("9007199254740993", FieldKind.INTEGER) == 9007199254740993
        assert cast_value(" -12 ", FieldKind.INTEGER) == -12
        assert cast_value("3.0", FieldKind.INTEGER) == 3

    def test_cast_integer_out_of_range(self):
        assert cast_value(2**63 - 1, FieldKind.INTEGER) == 2**63 - 1
        assert cast_value(-(2**63), FieldKind.INTEGER) == -(2**63)
        with pytest.raises(ValueError, match="out of range"):
            cast_value(10**20, FieldKind.INTEGER)
        with pytest.raises(ValueError, match="out of range"):
            cast_value("1e400", FieldKind.INTEGER)
        with pytest.raises(ValueError, match="out of range"):
            cast_value(str(2**63), FieldKind.INTEGER)

    def test_cast_boolean(self):
        assert cast_value("yes", FieldKind.BOOLEAN) is True
        assert cast_value("0", FieldKind.BOOLEAN) is False
        assert cast_value(1, FieldKind.BOOLEAN) is True
        with pytest.raises(ValueError):
            cast_value("maybe", FieldKind.BOOLEAN)

    def test_cast_dates(self):
        assert cast_value(dt.date(2024, 5, 1), FieldKind.DATE) == "2024-05-01"
        assert (
            cast_value(dt.datetime(2024, 5, 1, 8, 30), FieldKind.DATETIME)
            == "2024-05-01 08:30:00"
        )

    def test_cast_string(self):
        assert cast_value(12, FieldKind.STRING) == "12"
        assert cast_value(None, FieldKind.STRING) is None

    def test_storage_value_none(self):
        assert storage_value(None, field("a", "integer", "a")) == 0
        assert storage_value(None, field("a", "integer", "a", nullable=True)) is None


class TestExtract:
    """Tests for extract()."""

    def test_scope_isolation(self, registry, resolvers):
        """Extension fields leave the payload; native fields stay."""
        schema = registry.get_schema("AttributeGroup")
        payload = {
            "names": {"en-GB": "Colour"},
            "type": "select",
            "stringField": "hello",
            "intField": 4,
            "attributeGroupLangExtra": {"stringLangField": {"fr-FR": "bonjour"}},
            "attributeGroupShopExtra": {"intShopField": {"1": 100}},
        }

        extension_data, cleaned = extract(payload, schema, resolvers)

        assert cleaned == {"names": {"en-GB": "Colour"}, "type": "select"}
        assert extension_data == {
            "stringField": "hello",
            "intField": 4,
            "attributeGroupLangExtra": [{"idLang": 1, "stringLangField": "bonjour"}],
            "attributeGroupShopExtra": [{"idShop": 1, "intShopField": 100}],
        }
        assert "stringField" in payload

    def test_nothing_to_extract(self, registry, resolvers):
        schema = registry.get_schema("AttributeGroup")
        extension_data, cleaned = extract({"type": "select"}, schema, resolvers)
        assert extension_data == {}
        assert cleaned == {"type": "select"}


class TestRows:
    """Tests for normalize_rows() and pivot()."""

    @pytest.fixture
    def lang_table(self, registry):
        return registry.get_schema("Widget").locale_tables[0]

    @pytest.fixture
    def shop_table(self, registry):
        return registry.get_schema("Widget").scope_tables[0]

    def test_widget_unpivot(self, lang_table, resolvers):
        rows = normalize_rows(
            {"label": {"fr-FR": "Rouge", "en-GB": "Red"}}, lang_table, resolvers.locale
        )
        assert rows == [{"idLang": 1, "label": "Rouge"}, {"idLang": 2, "label": "Red"}]

    def test_round_trip(self, shop_table, resolvers):
        wire = {"a": {"1": 10, "2": 20}, "b": {"2": 5, "3": 7}}
        rows = normalize_rows(wire, shop_table, resolvers.shop)
        assert rows == [
            {"idShop": 1, "a": 10},
            {"idShop": 2, "a": 20, "b": 5},
            {"idShop": 3, "b": 7},
        ]
        assert pivot(rows, shop_table, resolvers.shop) == wire

    def test_unknown_locale_dropped(self, lang_table, resolvers):
        rows = normalize_rows(
            {"label": {"xx-XX": "?", "en-GB": "Red"}}, lang_table, resolvers.locale
        )
        assert rows == [{"idLang": 2, "label": "Red"}]

    def test_unknown_locale_strict(self, lang_table, resolvers):
        with pytest.raises(UnresolvableJunctionError) as exc_info:
            normalize_rows({"label": {"xx-XX": "?"}}, lang_table, resolvers.locale, strict=True)
        assert exc_info.value.value == "xx-XX"
        assert exc_info.value.code == "UNRESOLVABLE_JUNCTION"

    def test_undeclared_fields_ignored(self, lang_table, resolvers):
        rows = normalize_rows(
            {"label": {"fr-FR": "Rouge"}, "secret": {"fr-FR": "x"}}, lang_table, resolvers.locale
        )
        assert rows == [{"idLang": 1, "label": "Rouge"}]

    def test_row_form_passes_through(self, lang_table, resolvers):
        rows = [{"idLang": 1, "label": "Rouge"}]
        assert is_row_form(rows, lang_table)
        assert normalize_rows(rows, lang_table, resolvers.locale) == rows

    def test_non_object_value_ignored(self, lang_table, resolvers):
        assert normalize_rows("Rouge", lang_table, resolvers.locale) == []
        assert normalize_rows({"label": "Rouge"}, lang_table, resolvers.locale) == []

    def test_entity_table_has_no_rows(self, registry, resolvers):
        entity_table = registry.get_schema("Widget").entity_tables[0]
        with pytest.raises(ValueError, match="no junction"):
            normalize_rows({"colour": {"1": "red"}}, entity_table, resolvers.shop)

    def test_junction_id_of(self, shop_table):
        assert junction_id_of({"idShop": 2}, shop_table) == 2
        assert junction_id_of({"idShop": "3"}, shop_table) == 3
        assert junction_id_of({"idShop": 0}, shop_table) is None
        assert junction_id_of({"idShop": True}, shop_table) is None
        assert junction_id_of({}, shop_table) is None

    def test_pivot_skips_unresolvable_rows(self, lang_table, resolvers):
        rows = [{"idLang": 1, "label": "Rouge"}, {"idLang": 0, "label": "?"}, {"idLang": 9, "label": "?"}]
        assert pivot(rows, lang_table, resolvers.locale) == {"label": {"fr-FR": "Rouge"}}

    def test_row_from_storage(self, shop_table):
        row = row_from_storage({"id_widget": 1, "id_shop": 2, "a": 5, "b": None}, shop_table)
        assert row == {"idShop": 2, "a": 5, "b": None}


def test_resolvers_are_frozen():
    resolvers = JunctionResolvers(locale=LocaleResolver({}), shop=ShopResolver())
    with pytest.raises(AttributeError):
        resolvers.locale = LocaleResolver({"fr-FR": 1})
