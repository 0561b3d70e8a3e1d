"""
Tests for the metaModel parser (schema AST construction).
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from metamodel_to_code.pipeline.schema_ast import (
    AndNode,
    ArrayNode,
    BaseTypeNode,
    LiteralNode,
    MapNode,
    OrNode,
    ReferenceNode,
    SchemaParseError,
    SchemaParser,
    StringLiteralNode,
    TupleNode,
)

TEST_DATA = Path(__file__).parent / "test_data"


def parse_type(raw):
    return SchemaParser().parse_type(raw, "type")


class TestParseDocument:
    """Parsing whole metaModel documents."""

    def test_parse_fixture(self):
        model = SchemaParser().parse((TEST_DATA / "mini_metamodel.json").read_bytes())

        assert model.version == "3.17.0"
        assert len(model.requests) == 4
        assert len(model.notifications) == 2
        assert model.find_structure("Range") is not None
        assert model.find_enumeration("MarkupKind") is not None
        assert model.find_type_alias("Foo") is not None
        assert model.find_structure("Missing") is None

    def test_parse_accepts_str_and_dict(self):
        data = {"metaData": {"version": "1.0"}, "structures": [{"name": "A", "properties": []}]}

        from_dict = SchemaParser().parse(data)
        from_str = SchemaParser().parse(json.dumps(data))

        assert from_dict == from_str

    def test_unknown_top_level_fields_are_ignored(self):
        model = SchemaParser().parse({"somethingElse": [1, 2, 3], "structures": []})
        assert model.structures == ()

    def test_missing_sections_are_empty(self):
        model = SchemaParser().parse({})
        assert model.version == ""
        assert model.requests == ()
        assert model.type_aliases == ()

    def test_invalid_json(self):
        with pytest.raises(SchemaParseError, match="invalid JSON"):
            SchemaParser().parse("{not json")

    def test_document_must_be_an_object(self):
        with pytest.raises(SchemaParseError, match="expected a JSON object"):
            SchemaParser().parse("[]")

    def test_section_must_be_an_array(self):
        with pytest.raises(SchemaParseError) as exc_info:
            SchemaParser().parse({"structures": {}})
        assert exc_info.value.path == "structures"

    def test_error_carries_source_path(self):
        data = {
            "structures": [
                {"name": "Ok", "properties": []},
                {"name": "Broken", "properties": [{"name": "a", "type": {"kind": "bogus"}}]},
            ]
        }
        with pytest.raises(SchemaParseError) as exc_info:
            SchemaParser().parse(data)

        assert exc_info.value.path == "structures[1].properties[0].type"
        assert str(exc_info.value) == "structures[1].properties[0].type: unknown type kind: 'bogus'"

    def test_property_without_type(self):
        with pytest.raises(SchemaParseError, match="property has no type"):
            SchemaParser().parse({"structures": [{"name": "A", "properties": [{"name": "a"}]}]})


class TestParseTypeNodes:
    """Two-pass parsing of the polymorphic type nodes."""

    def test_base_and_reference(self):
        assert parse_type({"kind": "base", "name": "string"}) == BaseTypeNode(name="string")
        assert parse_type({"kind": "reference", "name": "Range"}) == ReferenceNode(name="Range")

    def test_source_path_is_not_part_of_equality(self):
        first = SchemaParser().parse_type({"kind": "reference", "name": "Range"}, "a")
        second = SchemaParser().parse_type({"kind": "reference", "name": "Range"}, "b")
        assert first == second
        assert first.source_path == "a"

    def test_array(self):
        node = parse_type({"kind": "array", "element": {"kind": "base", "name": "integer"}})
        assert isinstance(node, ArrayNode)
        assert node.element == BaseTypeNode(name="integer")

    def test_map_value_is_a_type(self):
        node = parse_type(
            {
                "kind": "map",
                "key": {"kind": "base", "name": "DocumentUri"},
                "value": {"kind": "array", "element": {"kind": "reference", "name": "TextEdit"}},
            }
        )
        assert isinstance(node, MapNode)
        assert node.key == BaseTypeNode(name="DocumentUri")
        assert node.value == ArrayNode(element=ReferenceNode(name="TextEdit"))

    def test_literal_value_is_a_property_list(self):
        node = parse_type(
            {
                "kind": "literal",
                "value": {"properties": [{"name": "label", "type": {"kind": "base", "name": "string"}, "optional": True}]},
            }
        )
        assert isinstance(node, LiteralNode)
        assert len(node.properties) == 1
        assert node.properties[0].name == "label"
        assert node.properties[0].optional is True

    def test_string_literal_value_is_a_string(self):
        node = parse_type({"kind": "stringLiteral", "value": "markdown"})
        assert node == StringLiteralNode(value="markdown")

    def test_string_literal_with_non_string_value(self):
        with pytest.raises(SchemaParseError) as exc_info:
            parse_type({"kind": "stringLiteral", "value": 3})
        assert exc_info.value.path == "type.value"

    def test_or_and_tuple(self):
        items = [{"kind": "base", "name": "string"}, {"kind": "base", "name": "integer"}]
        assert isinstance(parse_type({"kind": "or", "items": items}), OrNode)
        assert isinstance(parse_type({"kind": "and", "items": items}), AndNode)
        tuple_node = parse_type({"kind": "tuple", "items": items})
        assert isinstance(tuple_node, TupleNode)
        assert len(tuple_node.items) == 2

    def test_missing_kind(self):
        with pytest.raises(SchemaParseError, match="type node has no kind"):
            parse_type({"name": "string"})

    def test_map_needs_key_and_value(self):
        with pytest.raises(SchemaParseError, match="map type needs both key and value"):
            parse_type({"kind": "map", "key": {"kind": "base", "name": "string"}})

    def test_nested_error_path(self):
        with pytest.raises(SchemaParseError) as exc_info:
            parse_type({"kind": "or", "items": [{"kind": "base", "name": "string"}, {"kind": "nope"}]})
        assert exc_info.value.path == "type.items[1]"


class TestOptionalDetection:
    def test_null_on_either_side(self):
        string = {"kind": "base", "name": "string"}
        null = {"kind": "base", "name": "null"}

        for items in ([string, null], [null, string]):
            node = parse_type({"kind": "or", "items": items})
            assert node.is_optional()
            assert node.non_null_item() == BaseTypeNode(name="string")

    def test_three_items_is_not_optional(self):
        node = parse_type(
            {
                "kind": "or",
                "items": [
                    {"kind": "base", "name": "string"},
                    {"kind": "base", "name": "integer"},
                    {"kind": "base", "name": "null"},
                ],
            }
        )
        assert not node.is_optional()
        assert node.non_null_item() is None


class TestParseEnumerations:
    def test_integral_float_values_become_ints(self):
        model = SchemaParser().parse(
            {"enumerations": [{"name": "Kind", "type": {"kind": "base", "name": "integer"}, "values": [{"name": "One", "value": 1.0}]}]}
        )
        value = model.enumerations[0].values[0].value
        assert value == 1
        assert isinstance(value, int)

    def test_fractional_value_in_integer_enum_is_rejected(self):
        schema = {
            "enumerations": [
                {"name": "Kind", "type": {"kind": "base", "name": "uinteger"}, "values": [{"name": "Half", "value": 1.5}]}
            ]
        }
        with pytest.raises(SchemaParseError, match="must be integral") as exc_info:
            SchemaParser().parse(schema)
        assert exc_info.value.path == "enumerations[0].values[0].value"

    def test_fractional_value_in_untyped_enum_is_kept(self):
        model = SchemaParser().parse({"enumerations": [{"name": "Kind", "values": [{"name": "Half", "value": 1.5}]}]})
        assert model.enumerations[0].values[0].value == 1.5

    def test_boolean_value_is_rejected(self):
        with pytest.raises(SchemaParseError) as exc_info:
            SchemaParser().parse({"enumerations": [{"name": "Kind", "values": [{"name": "Yes", "value": True}]}]})
        assert exc_info.value.path == "enumerations[0].values[0].value"

    def test_custom_values_and_proposed(self):
        model = SchemaParser().parse(
            {
                "enumerations": [
                    {
                        "name": "FoldingRangeKind",
                        "type": {"kind": "base", "name": "string"},
                        "supportsCustomValues": True,
                        "values": [{"name": "Comment", "value": "comment", "proposed": True}],
                    }
                ]
            }
        )
        enum = model.enumerations[0]
        assert enum.supports_custom_values
        assert enum.values[0].proposed


if __name__ == "__main__":
    pytest.main([__file__])
