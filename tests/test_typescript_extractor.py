"""Tests for the TypeScript declaration scanner."""
from pathlib import Path

import pytest

from setup_data.core.errors import SchemaError
from setup_data.graph.builder import build_dependency_graph, build_entities
from setup_data.schema.extractor import extract_schema, parse_entity_file
from setup_data.schema.types import FieldKind, SchemaDialect

TESTS_DIR = Path(__file__).parent
TS_DIR = TESTS_DIR / "fixtures" / "typescript"


class TestClassMembers:
    def test_methods_and_constructor_are_skipped(self):
        entity = parse_entity_file(TS_DIR / "customer.ts")

        assert entity.entity_name == "Customer"
        assert entity.dialect == SchemaDialect.TYPESCRIPT
        assert [f.name for f in entity.fields] == [
            "id", "name", "email", "tier", "status", "nickname", "referrerId", "tags", "createdAt",
        ]

    def test_decorators_attach_to_next_member(self):
        entity = parse_entity_file(TS_DIR / "customer.ts")

        assert entity.get_field("name").max_length == 40
        assert entity.get_field("email").has_attribute("IsEmail")
        assert entity.get_field("tier").attributes == []

    def test_optional_marker(self):
        entity = parse_entity_file(TS_DIR / "customer.ts")
        nickname = entity.get_field("nickname")

        assert nickname.is_required is False
        assert nickname.is_nullable is True
        assert entity.get_field("id").is_required is True

    def test_null_union_is_nullable(self):
        entity = parse_entity_file(TS_DIR / "customer.ts")
        referrer = entity.get_field("referrerId")

        assert referrer.kind == FieldKind.NUMBER
        assert referrer.is_nullable is True

    def test_string_literal_union(self):
        entity = parse_entity_file(TS_DIR / "customer.ts")
        status = entity.get_field("status")

        assert status.kind == FieldKind.STRING
        assert status.enum_values == ["active", "suspended"]

    def test_type_table(self):
        entity = parse_entity_file(TS_DIR / "customer.ts")

        assert entity.get_field("id").kind == FieldKind.NUMBER
        assert entity.get_field("createdAt").kind == FieldKind.DATE_TIME
        assert entity.get_field("tags").kind == FieldKind.ARRAY
        assert entity.get_field("tags").items.kind == FieldKind.STRING

    def test_string_enum_values(self):
        entity = parse_entity_file(TS_DIR / "customer.ts")

        members = entity.enums["CustomerTier"]
        assert [(m.name, m.value) for m in members] == [
            ("Bronze", "bronze"), ("Silver", "silver"), ("Gold", "gold"),
        ]


class TestDeclarations:
    def test_interface(self):
        entity = parse_entity_file(TS_DIR / "invoice.ts")

        assert entity.entity_name == "Invoice"
        assert entity.get_field("lines").kind == FieldKind.ARRAY
        assert entity.get_field("issuedOn").kind == FieldKind.DATE_TIME

    def test_type_alias(self):
        source = """
export type Coupon = {
  code: string;
  percentOff: number;
};
"""
        entity = extract_schema(source, SchemaDialect.TYPESCRIPT)

        assert entity.entity_name == "Coupon"
        assert [f.name for f in entity.fields] == ["code", "percentOff"]

    def test_nested_object_literal_is_not_a_member(self):
        source = """
interface Shipment {
  id: number;
  address: {
    street: string;
  };
  weight: number;
}
"""
        entity = extract_schema(source, SchemaDialect.TYPESCRIPT)

        assert [f.name for f in entity.fields] == ["id", "weight"]

    def test_no_declaration_raises(self):
        with pytest.raises(SchemaError):
            extract_schema("export const answer = 42;\n", SchemaDialect.TYPESCRIPT)


def test_batch_links_foreign_key_and_navigation():
    entities = build_entities(TS_DIR)
    invoice = entities["Invoice"]

    assert set(entities) == {"Customer", "Invoice"}
    assert invoice.get_field("customer").is_navigation is True
    assert invoice.get_field("customer").target_entity == "Customer"
    # Unknown element type stays a plain array
    assert invoice.get_field("lines").is_navigation is False

    graph = build_dependency_graph(entities)
    assert graph["Invoice"].dependencies == ("Customer",)
    assert graph["Customer"].dependencies == ()
