"""
AST node definitions for the protocol metaModel.

These nodes represent the parsed structure of a metaModel document before
any dependency resolution or target-specific lowering. All nodes are
frozen: the model is read-only once the parser has built it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TypeNode:
    """Base class for all type algebra nodes.

    Subclasses are the only valid kinds; ``KIND`` holds the wire tag.
    """

    KIND = ""

    # Original source location in the document (for error messages)
    source_path: str = field(default="", compare=False)


@dataclass(frozen=True)
class BaseTypeNode(TypeNode):
    """A scalar base type (string, integer, URI, LSPAny, null...)."""

    KIND = "base"

    name: str = ""


@dataclass(frozen=True)
class ReferenceNode(TypeNode):
    """A reference to a named structure, enumeration or type alias."""

    KIND = "reference"

    name: str = ""


@dataclass(frozen=True)
class ArrayNode(TypeNode):
    KIND = "array"

    element: TypeNode | None = None


@dataclass(frozen=True)
class MapNode(TypeNode):
    KIND = "map"

    key: TypeNode | None = None
    value: TypeNode | None = None


@dataclass(frozen=True)
class LiteralNode(TypeNode):
    """An anonymous inline record (object literal type)."""

    KIND = "literal"

    properties: tuple[Property, ...] = ()


@dataclass(frozen=True)
class StringLiteralNode(TypeNode):
    """A string constant type."""

    KIND = "stringLiteral"

    value: str = ""


@dataclass(frozen=True)
class OrNode(TypeNode):
    """A union of types."""

    KIND = "or"

    items: tuple[TypeNode, ...] = ()

    def is_optional(self) -> bool:
        """True for ``T | null``: exactly two items, one of them the null base type."""
        if len(self.items) != 2:
            return False
        return any(is_null(item) for item in self.items)

    def non_null_item(self) -> TypeNode | None:
        """Return the non-null side of an optional union, None otherwise."""
        if not self.is_optional():
            return None
        for item in self.items:
            if not is_null(item):
                return item
        return None


@dataclass(frozen=True)
class AndNode(TypeNode):
    """An intersection of types."""

    KIND = "and"

    items: tuple[TypeNode, ...] = ()


@dataclass(frozen=True)
class TupleNode(TypeNode):
    KIND = "tuple"

    items: tuple[TypeNode, ...] = ()


def is_null(node: TypeNode | None) -> bool:
    """Check whether a node is the null base type."""
    return isinstance(node, BaseTypeNode) and node.name == "null"


# Wire tag -> node class
TYPE_NODE_KINDS: dict[str, type[TypeNode]] = {
    cls.KIND: cls
    for cls in (
        BaseTypeNode,
        ReferenceNode,
        ArrayNode,
        MapNode,
        LiteralNode,
        StringLiteralNode,
        OrNode,
        AndNode,
        TupleNode,
    )
}


@dataclass(frozen=True)
class Property:
    """A property of a structure or of an inline literal."""

    name: str = ""
    type: TypeNode | None = None
    optional: bool = False
    proposed: bool = False
    documentation: str = ""
    since: str = ""
    deprecated: str = ""


@dataclass(frozen=True)
class Structure:
    """A named record type.

    ``extends`` and ``mixins`` are only used as sources of flattened
    properties; targets never see them as inheritance.
    """

    name: str = ""
    properties: tuple[Property, ...] = ()
    extends: tuple[TypeNode, ...] = ()
    mixins: tuple[TypeNode, ...] = ()
    proposed: bool = False
    documentation: str = ""
    since: str = ""
    deprecated: str = ""


@dataclass(frozen=True)
class EnumValue:
    name: str = ""
    value: Any = None  # str or int
    proposed: bool = False
    documentation: str = ""
    since: str = ""


@dataclass(frozen=True)
class Enumeration:
    name: str = ""
    type: TypeNode | None = None  # string, integer or uinteger base type
    values: tuple[EnumValue, ...] = ()
    supports_custom_values: bool = False
    proposed: bool = False
    documentation: str = ""
    since: str = ""
    deprecated: str = ""


@dataclass(frozen=True)
class TypeAlias:
    name: str = ""
    type: TypeNode | None = None
    proposed: bool = False
    documentation: str = ""
    since: str = ""
    deprecated: str = ""


@dataclass(frozen=True)
class Request:
    """A request method (expects a response)."""

    method: str = ""
    direction: str = ""  # "clientToServer", "serverToClient" or "both"
    params: TypeNode | None = None
    result: TypeNode | None = None
    partial_result: TypeNode | None = None
    error_data: TypeNode | None = None
    registration_method: str = ""
    registration_options: TypeNode | None = None
    proposed: bool = False
    documentation: str = ""
    since: str = ""
    deprecated: str = ""


@dataclass(frozen=True)
class Notification:
    method: str = ""
    direction: str = ""
    params: TypeNode | None = None
    registration_method: str = ""
    registration_options: TypeNode | None = None
    proposed: bool = False
    documentation: str = ""
    since: str = ""
    deprecated: str = ""


@dataclass(frozen=True)
class MetaModel:
    """Root of the parsed metaModel document."""

    version: str = ""
    requests: tuple[Request, ...] = ()
    notifications: tuple[Notification, ...] = ()
    structures: tuple[Structure, ...] = ()
    enumerations: tuple[Enumeration, ...] = ()
    type_aliases: tuple[TypeAlias, ...] = ()

    def find_structure(self, name: str) -> Structure | None:
        for structure in self.structures:
            if structure.name == name:
                return structure
        return None

    def find_type_alias(self, name: str) -> TypeAlias | None:
        for alias in self.type_aliases:
            if alias.name == name:
                return alias
        return None

    def find_enumeration(self, name: str) -> Enumeration | None:
        for enum in self.enumerations:
            if enum.name == name:
                return enum
        return None

    def proposed_types(self) -> dict[str, bool]:
        """Map every named type to its proposed flag."""
        proposed: dict[str, bool] = {}
        for structure in self.structures:
            proposed[structure.name] = structure.proposed
        for enum in self.enumerations:
            proposed[enum.name] = enum.proposed
        for alias in self.type_aliases:
            proposed[alias.name] = alias.proposed
        return proposed
