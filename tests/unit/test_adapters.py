"""
Unit tests for the request-boundary adapters.

Tests cover:
- Entity id resolution on mappings and objects
- Inbound set-once stash semantics
- Post-write id resolution and persistence
- Outbound merge
"""

from dataclasses import dataclass

import pytest

from extfields.adapters import (
    EXTENSION_DATA_ATTRIBUTE,
    InboundAdapter,
    OutboundAdapter,
    PostWriteAdapter,
    RequestContext,
    resolve_entity_id,
    to_entity_data,
)
from extfields.store import Statement

ACCESSORS = ("id_attribute_group", "attributeGroupId", "attributeGroup", "id")


@dataclass
class AttributeGroupResult:
    attributeGroupId: int
    type: str = "select"


class Unreadable:
    @property
    def attributeGroupId(self):
        raise RuntimeError("not initialized")

    id = 12


class TestIdentity:
    """Tests for resolve_entity_id() and to_entity_data()."""

    def test_mapping_accepts_digit_strings(self):
        assert resolve_entity_id({"attributeGroupId": "5"}, ACCESSORS) == 5
        assert resolve_entity_id({"id": 3}, ACCESSORS) == 3

    def test_mapping_order(self):
        assert resolve_entity_id({"id": 3, "id_attribute_group": 4}, ACCESSORS) == 4

    def test_mapping_rejects_non_positive(self):
        assert resolve_entity_id({"id": 0}, ACCESSORS) is None
        assert resolve_entity_id({"id": "-2"}, ACCESSORS) is None
        assert resolve_entity_id({}, ACCESSORS) is None

    def test_object_attribute(self):
        assert resolve_entity_id(AttributeGroupResult(8), ACCESSORS) == 8

    def test_object_rejects_strings_and_bools(self):
        @dataclass
        class Loose:
            attributeGroupId: object

        assert resolve_entity_id(Loose("8"), ACCESSORS) is None
        assert resolve_entity_id(Loose(True), ACCESSORS) is None

    def test_object_getter_method(self):
        class WithGetter:
            def attributeGroupId(self):
                return 6

        assert resolve_entity_id(WithGetter(), ACCESSORS) == 6

    def test_introspection_failure_is_not_found(self):
        """A failing accessor is skipped; later names still apply."""
        assert resolve_entity_id(Unreadable(), ACCESSORS) == 12
        assert resolve_entity_id(Unreadable(), ("attributeGroupId",)) is None

    def test_none_source(self):
        assert resolve_entity_id(None, ACCESSORS) is None

    def test_to_entity_data(self):
        assert to_entity_data(AttributeGroupResult(1)) == {"attributeGroupId": 1, "type": "select"}
        assert to_entity_data({"a": 1}) == {"a": 1}
        assert to_entity_data(None) == {}

    def test_to_entity_data_plain_object(self):
        class Plain:
            def __init__(self):
                self.name = "x"
                self._secret = "y"

        assert to_entity_data(Plain()) == {"name": "x"}


class TestInboundAdapter:
    """Tests for InboundAdapter."""

    @pytest.fixture
    def inbound(self, registry, resolvers):
        return InboundAdapter(registry, resolvers)

    def test_strips_and_stashes(self, inbound):
        context = RequestContext()
        cleaned = inbound.process(
            "AttributeGroup", {"type": "select", "stringField": "x"}, context
        )
        assert cleaned == {"type": "select"}
        assert context.extension_data == {"stringField": "x"}

    def test_unregistered_entity_passes_through(self, inbound):
        context = RequestContext()
        payload = {"stringField": "x"}
        assert inbound.process("Unregistered", payload, context) is payload
        assert not context.has(EXTENSION_DATA_ATTRIBUTE)

    def test_non_mapping_passes_through(self, inbound):
        context = RequestContext()
        assert inbound.process("AttributeGroup", ["a"], context) == ["a"]

    def test_second_pass_keeps_real_data(self, inbound):
        """A later empty extraction never overwrites stashed data."""
        context = RequestContext()
        inbound.process("AttributeGroup", {"stringField": "x"}, context)
        inbound.process("AttributeGroup", {"type": "select"}, context)
        assert context.extension_data == {"stringField": "x"}

    def test_second_pass_does_not_replace_data(self, inbound):
        context = RequestContext()
        inbound.process("AttributeGroup", {"stringField": "x"}, context)
        inbound.process("AttributeGroup", {"stringField": "y"}, context)
        assert context.extension_data == {"stringField": "x"}

    def test_empty_slot_filled_later(self, inbound):
        context = RequestContext()
        inbound.process("AttributeGroup", {"type": "select"}, context)
        assert context.extension_data == {}
        inbound.process("AttributeGroup", {"stringField": "x"}, context)
        assert context.extension_data == {"stringField": "x"}


class TestPostWriteAndOutbound:
    """Tests for PostWriteAdapter and OutboundAdapter."""

    @pytest.fixture
    def post_write(self, registry, service):
        return PostWriteAdapter(registry, service)

    @pytest.fixture
    def outbound(self, registry, service):
        return OutboundAdapter(registry, service)

    def _context(self, data):
        context = RequestContext()
        context.set(EXTENSION_DATA_ATTRIBUTE, data)
        return context

    def test_persists_with_result_id(self, post_write, service):
        result = AttributeGroupResult(3)
        returned = post_write.process("AttributeGroup", result, self._context({"stringField": "x"}))
        assert returned is result
        assert service.load("AttributeGroup", 3)["stringField"] == "x"

    def test_uri_variables_take_precedence(self, post_write, service):
        post_write.process(
            "AttributeGroup",
            AttributeGroupResult(3),
            self._context({"stringField": "x"}),
            uri_variables={"attributeGroupId": "9"},
        )
        assert service.load("AttributeGroup", 9)["stringField"] == "x"
        assert service.load("AttributeGroup", 3) == {}

    def test_unresolvable_id_is_noop(self, post_write, service):
        post_write.process("AttributeGroup", object(), self._context({"stringField": "x"}))
        assert service.store.fetch_all(Statement('SELECT * FROM "attribute_group_extra"')) == []

    def test_passes_entity_data_to_plugins(self, registry, service):
        received = []

        class Spy:
            def persist(self, entity_type, entity_id, extension_data, entity_data):
                received.append(entity_data)

        adapter = PostWriteAdapter(registry, Spy())
        adapter.process("AttributeGroup", AttributeGroupResult(2), self._context({"intField": 1}))
        adapter.process(
            "AttributeGroup",
            AttributeGroupResult(2),
            self._context({"intField": 1}),
            entity_data={"explicit": True},
        )
        assert received == [{"attributeGroupId": 2, "type": "select"}, {"explicit": True}]

    def test_nothing_stashed(self, post_write):
        result = AttributeGroupResult(3)
        assert post_write.process("AttributeGroup", result, RequestContext()) is result

    def test_outbound_merges_extension_data(self, outbound, service):
        service.persist("AttributeGroup", 3, {"stringField": "x"})
        output = outbound.process(
            "AttributeGroup",
            AttributeGroupResult(3),
            {"attributeGroupId": 3, "stringField": "native"},
        )
        assert output["stringField"] == "x"
        assert output["intField"] == 0
        assert output["attributeGroupId"] == 3

    def test_outbound_falls_back_to_serialized_id(self, outbound, service):
        service.persist("AttributeGroup", 4, {"intField": 7})
        output = outbound.process("AttributeGroup", object(), {"id": 4})
        assert output["intField"] == 7

    def test_outbound_without_id(self, outbound):
        assert outbound.process("AttributeGroup", object(), {"type": "x"}) == {"type": "x"}

    def test_outbound_unregistered(self, outbound):
        assert outbound.process("Unregistered", {"id": 1}, {"id": 1}) == {"id": 1}
