"""
metaModel parser that builds an AST.

Phase 1 of the pipeline: parse the metaModel JSON document into immutable
nodes without resolving references or doing target-specific processing.
"""

from __future__ import annotations

import json
from typing import Any

from .nodes import (
    TYPE_NODE_KINDS,
    AndNode,
    ArrayNode,
    BaseTypeNode,
    Enumeration,
    EnumValue,
    LiteralNode,
    MapNode,
    MetaModel,
    Notification,
    OrNode,
    Property,
    ReferenceNode,
    Request,
    StringLiteralNode,
    Structure,
    TupleNode,
    TypeAlias,
    TypeNode,
)

# Enumeration base types whose values must be whole numbers
INTEGRAL_ENUM_BASES = ("integer", "uinteger")


class SchemaParseError(Exception):
    """Raised when the metaModel document cannot be parsed.

    This can happen when:
    - The document is not valid JSON or not a JSON object
    - A type node has a missing or unknown ``kind``
    - A kind-specific payload has the wrong shape
    """

    def __init__(self, message: str, path: str = ""):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class SchemaParser:
    """Parses a metaModel document into a MetaModel."""

    def parse(self, data: bytes | str | dict[str, Any]) -> MetaModel:
        """
        Parse a metaModel document.

        Args:
            data: Raw JSON (bytes or str) or an already decoded dictionary

        Returns:
            The immutable MetaModel

        Raises:
            SchemaParseError: If the document is malformed
        """
        if isinstance(data, (bytes, str)):
            try:
                data = json.loads(data)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise SchemaParseError(f"invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise SchemaParseError(f"expected a JSON object, got {type(data).__name__}")

        meta_data = data.get("metaData") or {}
        if not isinstance(meta_data, dict):
            raise SchemaParseError("expected an object", "metaData")

        # Unrecognized top-level fields are ignored
        return MetaModel(
            version=str(meta_data.get("version", "")),
            requests=tuple(self._parse_list(data, "requests", self._parse_request)),
            notifications=tuple(self._parse_list(data, "notifications", self._parse_notification)),
            structures=tuple(self._parse_list(data, "structures", self._parse_structure)),
            enumerations=tuple(self._parse_list(data, "enumerations", self._parse_enumeration)),
            type_aliases=tuple(self._parse_list(data, "typeAliases", self._parse_type_alias)),
        )

    def _parse_list(self, data: dict[str, Any], key: str, parse_item) -> list:
        raw = data.get(key)
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise SchemaParseError("expected an array", key)
        items = []
        for i, item in enumerate(raw):
            path = f"{key}[{i}]"
            items.append(parse_item(self._expect_object(item, path), path))
        return items

    def _expect_object(self, value: Any, path: str) -> dict[str, Any]:
        if not isinstance(value, dict):
            raise SchemaParseError(f"expected an object, got {type(value).__name__}", path)
        return value

    def _expect_list(self, value: Any, path: str) -> list:
        if not isinstance(value, list):
            raise SchemaParseError(f"expected an array, got {type(value).__name__}", path)
        return value

    def _string(self, raw: dict[str, Any], key: str, path: str) -> str:
        value = raw.get(key, "")
        if not isinstance(value, str):
            raise SchemaParseError(f"expected a string, got {type(value).__name__}", f"{path}.{key}")
        return value

    def _optional_type(self, raw: dict[str, Any], key: str, path: str) -> TypeNode | None:
        if raw.get(key) is None:
            return None
        return self.parse_type(raw[key], f"{path}.{key}")

    def _type_list(self, raw: dict[str, Any], key: str, path: str) -> tuple[TypeNode, ...]:
        values = raw.get(key)
        if values is None:
            return ()
        values = self._expect_list(values, f"{path}.{key}")
        return tuple(self.parse_type(v, f"{path}.{key}[{i}]") for i, v in enumerate(values))

    def parse_type(self, raw: Any, path: str) -> TypeNode:
        """
        Parse a single type node.

        The ``kind`` tag is read first; it decides how the shared ``value``
        field is decoded (map value type, literal property list or string
        constant).
        """
        raw = self._expect_object(raw, path)

        # First pass: kind-independent fields
        kind = raw.get("kind")
        if not isinstance(kind, str):
            raise SchemaParseError("type node has no kind", path)
        if kind not in TYPE_NODE_KINDS:
            raise SchemaParseError(f"unknown type kind: {kind!r}", path)

        # Second pass: kind-specific payload
        if kind == BaseTypeNode.KIND:
            return BaseTypeNode(name=self._string(raw, "name", path), source_path=path)

        if kind == ReferenceNode.KIND:
            return ReferenceNode(name=self._string(raw, "name", path), source_path=path)

        if kind == ArrayNode.KIND:
            if raw.get("element") is None:
                raise SchemaParseError("array type has no element", path)
            return ArrayNode(element=self.parse_type(raw["element"], f"{path}.element"), source_path=path)

        if kind == MapNode.KIND:
            if raw.get("key") is None or raw.get("value") is None:
                raise SchemaParseError("map type needs both key and value", path)
            return MapNode(
                key=self.parse_type(raw["key"], f"{path}.key"),
                value=self.parse_type(raw["value"], f"{path}.value"),
                source_path=path,
            )

        if kind == LiteralNode.KIND:
            return self._parse_literal(raw, path)

        if kind == StringLiteralNode.KIND:
            value = raw.get("value")
            if not isinstance(value, str):
                raise SchemaParseError("string literal value must be a string", f"{path}.value")
            return StringLiteralNode(value=value, source_path=path)

        items = self._type_list(raw, "items", path)
        if kind == OrNode.KIND:
            return OrNode(items=items, source_path=path)
        if kind == AndNode.KIND:
            return AndNode(items=items, source_path=path)
        return TupleNode(items=items, source_path=path)

    def _parse_literal(self, raw: dict[str, Any], path: str) -> LiteralNode:
        """Parse an inline literal: ``value`` must be ``{"properties": [...]}``."""
        value_path = f"{path}.value"
        value = self._expect_object(raw.get("value"), value_path)
        props_raw = self._expect_list(value.get("properties", []), f"{value_path}.properties")
        properties = tuple(
            self._parse_property(self._expect_object(p, f"{value_path}.properties[{i}]"), f"{value_path}.properties[{i}]")
            for i, p in enumerate(props_raw)
        )
        return LiteralNode(properties=properties, source_path=path)

    def _parse_property(self, raw: dict[str, Any], path: str) -> Property:
        if raw.get("type") is None:
            raise SchemaParseError("property has no type", path)
        return Property(
            name=self._string(raw, "name", path),
            type=self.parse_type(raw["type"], f"{path}.type"),
            optional=bool(raw.get("optional", False)),
            proposed=bool(raw.get("proposed", False)),
            documentation=self._string(raw, "documentation", path),
            since=self._string(raw, "since", path),
            deprecated=self._string(raw, "deprecated", path),
        )

    def _parse_structure(self, raw: dict[str, Any], path: str) -> Structure:
        props_raw = self._expect_list(raw.get("properties", []), f"{path}.properties")
        properties = tuple(
            self._parse_property(self._expect_object(p, f"{path}.properties[{i}]"), f"{path}.properties[{i}]") for i, p in enumerate(props_raw)
        )
        return Structure(
            name=self._string(raw, "name", path),
            properties=properties,
            extends=self._type_list(raw, "extends", path),
            mixins=self._type_list(raw, "mixins", path),
            proposed=bool(raw.get("proposed", False)),
            documentation=self._string(raw, "documentation", path),
            since=self._string(raw, "since", path),
            deprecated=self._string(raw, "deprecated", path),
        )

    def _parse_enumeration(self, raw: dict[str, Any], path: str) -> Enumeration:
        enum_type = self._optional_type(raw, "type", path)
        integral = isinstance(enum_type, BaseTypeNode) and enum_type.name in INTEGRAL_ENUM_BASES
        values_raw = self._expect_list(raw.get("values", []), f"{path}.values")
        values = []
        for i, v in enumerate(values_raw):
            value_path = f"{path}.values[{i}]"
            v = self._expect_object(v, value_path)
            value = v.get("value")
            # bool is an int subclass but never a valid enum value
            if isinstance(value, bool) or not isinstance(value, (str, int, float)):
                raise SchemaParseError("enum value must be a string or a number", f"{value_path}.value")
            if isinstance(value, float):
                if value.is_integer():
                    value = int(value)
                elif integral:
                    raise SchemaParseError(f"integer enum value must be integral, got {value}", f"{value_path}.value")
            values.append(
                EnumValue(
                    name=self._string(v, "name", value_path),
                    value=value,
                    proposed=bool(v.get("proposed", False)),
                    documentation=self._string(v, "documentation", value_path),
                    since=self._string(v, "since", value_path),
                )
            )
        return Enumeration(
            name=self._string(raw, "name", path),
            type=enum_type,
            values=tuple(values),
            supports_custom_values=bool(raw.get("supportsCustomValues", False)),
            proposed=bool(raw.get("proposed", False)),
            documentation=self._string(raw, "documentation", path),
            since=self._string(raw, "since", path),
            deprecated=self._string(raw, "deprecated", path),
        )

    def _parse_type_alias(self, raw: dict[str, Any], path: str) -> TypeAlias:
        return TypeAlias(
            name=self._string(raw, "name", path),
            type=self._optional_type(raw, "type", path),
            proposed=bool(raw.get("proposed", False)),
            documentation=self._string(raw, "documentation", path),
            since=self._string(raw, "since", path),
            deprecated=self._string(raw, "deprecated", path),
        )

    def _parse_request(self, raw: dict[str, Any], path: str) -> Request:
        return Request(
            method=self._string(raw, "method", path),
            direction=self._string(raw, "messageDirection", path),
            params=self._optional_type(raw, "params", path),
            result=self._optional_type(raw, "result", path),
            partial_result=self._optional_type(raw, "partialResult", path),
            error_data=self._optional_type(raw, "errorData", path),
            registration_method=self._string(raw, "registrationMethod", path),
            registration_options=self._optional_type(raw, "registrationOptions", path),
            proposed=bool(raw.get("proposed", False)),
            documentation=self._string(raw, "documentation", path),
            since=self._string(raw, "since", path),
            deprecated=self._string(raw, "deprecated", path),
        )

    def _parse_notification(self, raw: dict[str, Any], path: str) -> Notification:
        return Notification(
            method=self._string(raw, "method", path),
            direction=self._string(raw, "messageDirection", path),
            params=self._optional_type(raw, "params", path),
            registration_method=self._string(raw, "registrationMethod", path),
            registration_options=self._optional_type(raw, "registrationOptions", path),
            proposed=bool(raw.get("proposed", False)),
            documentation=self._string(raw, "documentation", path),
            since=self._string(raw, "since", path),
            deprecated=self._string(raw, "deprecated", path),
        )
