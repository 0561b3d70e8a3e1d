"""
Tests for type filter expansion.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from metamodel_to_code.pipeline.analyzer import DependencyResolver, collect_references, resolve_dependencies
from metamodel_to_code.pipeline.schema_ast import SchemaParser

TEST_DATA = Path(__file__).parent / "test_data"


def load_model():
    return SchemaParser().parse((TEST_DATA / "mini_metamodel.json").read_bytes())


class TestResolveDependencies:
    def setup_method(self):
        self.model = load_model()

    def test_structure_pulls_in_property_types(self):
        assert resolve_dependencies(self.model, ["Range"]) == {"Range", "Position"}

    def test_alias_chain(self):
        assert resolve_dependencies(self.model, {"Outer"}) == {"Outer", "Inner"}

    def test_extends_and_mixins_are_followed(self):
        expanded = resolve_dependencies(self.model, ["HoverParams"])

        assert expanded == {
            "HoverParams",
            "TextDocumentPositionParams",
            "TextDocumentIdentifier",
            "Position",
            "WorkDoneProgressParams",
            # Referenced but not defined in the model: kept as-is
            "ProgressToken",
        }

    def test_self_reference_terminates(self):
        assert resolve_dependencies(self.model, ["SelectionRange"]) == {"SelectionRange", "Range", "Position"}

    def test_mutual_references_terminate(self):
        model = SchemaParser().parse(
            {
                "structures": [
                    {"name": "A", "properties": [{"name": "b", "type": {"kind": "reference", "name": "B"}}]},
                    {"name": "B", "properties": [{"name": "a", "type": {"kind": "reference", "name": "A"}}]},
                ]
            }
        )
        assert resolve_dependencies(model, ["A"]) == {"A", "B"}
        assert resolve_dependencies(model, ["B"]) == {"A", "B"}

    def test_union_alias(self):
        assert resolve_dependencies(self.model, ["FooList"]) == {"FooList", "Foo", "A", "B"}

    def test_enumerations_are_leaves(self):
        assert resolve_dependencies(self.model, ["MarkupContent"]) == {"MarkupContent", "MarkupKind"}

    def test_map_keys_and_values(self):
        assert resolve_dependencies(self.model, ["WorkspaceEdit"]) == {"WorkspaceEdit", "TextEdit", "Range", "Position"}

    def test_proposed_properties_are_skipped(self):
        assert "InlineCompletionParams" not in resolve_dependencies(self.model, ["TextEdit"])
        assert "InlineCompletionParams" in resolve_dependencies(self.model, ["TextEdit"], include_proposed=True)

    def test_proposed_types_behind_plain_properties_are_skipped(self):
        model = SchemaParser().parse(
            {
                "structures": [
                    {"name": "S", "properties": [{"name": "p", "type": {"kind": "reference", "name": "P"}}]},
                    {"name": "P", "properties": [], "proposed": True},
                ]
            }
        )
        assert resolve_dependencies(model, ["S"]) == {"S"}
        assert resolve_dependencies(model, ["S"], include_proposed=True) == {"S", "P"}

    def test_requested_names_are_always_kept(self):
        expanded = resolve_dependencies(self.model, ["InlineCompletionParams", "DoesNotExist"])
        assert expanded == {"InlineCompletionParams", "DoesNotExist"}

    def test_none_means_everything(self):
        assert resolve_dependencies(self.model, None) is None

    def test_empty_request(self):
        assert resolve_dependencies(self.model, []) == set()

    def test_result_is_a_superset_of_the_request(self):
        requested = {"Hover", "Diagnostic"}
        assert requested <= resolve_dependencies(self.model, requested)

    def test_resolver_keeps_its_visited_set(self):
        resolver = DependencyResolver(self.model)
        resolver.resolve(["Range"])
        assert resolver.resolve(["Outer"]) == {"Range", "Position", "Outer", "Inner"}


class TestCollectReferences:
    def test_nested_nodes(self):
        node = SchemaParser().parse_type(
            {
                "kind": "or",
                "items": [
                    {"kind": "array", "element": {"kind": "reference", "name": "A"}},
                    {
                        "kind": "map",
                        "key": {"kind": "reference", "name": "K"},
                        "value": {"kind": "tuple", "items": [{"kind": "reference", "name": "B"}]},
                    },
                    {"kind": "and", "items": [{"kind": "reference", "name": "C"}]},
                    {"kind": "base", "name": "string"},
                ],
            },
            "type",
        )
        assert collect_references(node) == {"A", "K", "B", "C"}

    def test_literal_properties(self):
        node = SchemaParser().parse_type(
            {
                "kind": "literal",
                "value": {
                    "properties": [
                        {"name": "a", "type": {"kind": "reference", "name": "A"}},
                        {"name": "b", "type": {"kind": "reference", "name": "B"}, "proposed": True},
                    ]
                },
            },
            "type",
        )
        assert collect_references(node) == {"A", "B"}
        assert collect_references(node, include_proposed=False) == {"A"}

    def test_none(self):
        assert collect_references(None) == set()


if __name__ == "__main__":
    pytest.main([__file__])
