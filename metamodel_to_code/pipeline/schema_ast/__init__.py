"""
Schema AST (Abstract Syntax Tree) module.

Contains the metaModel node definitions and the parser.
"""

from __future__ import annotations

from .nodes import (
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
from .parser import SchemaParseError, SchemaParser

__all__ = [
    "TypeNode",
    "BaseTypeNode",
    "ReferenceNode",
    "ArrayNode",
    "MapNode",
    "LiteralNode",
    "StringLiteralNode",
    "OrNode",
    "AndNode",
    "TupleNode",
    "Property",
    "Structure",
    "Enumeration",
    "EnumValue",
    "TypeAlias",
    "Request",
    "Notification",
    "MetaModel",
    "SchemaParser",
    "SchemaParseError",
]
