"""
Base type classification.

Groups the metaModel's scalar base type names into target-facing
categories. The category decision is shared by every target; how a
category is spelled is decided by each target's BaseTypeTable.
"""

from __future__ import annotations

from enum import Enum


class BaseCategory(Enum):
    """Target-facing category of a base type."""

    STRING = "string"
    INTEGER = "integer"
    UINTEGER = "uinteger"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    NULL = "null"
    ANY = "any"  # LSPAny
    OBJECT = "object"  # LSPObject
    ARRAY = "array"  # LSPArray

    @property
    def is_string_like(self) -> bool:
        return self is BaseCategory.STRING

    @property
    def is_numeric(self) -> bool:
        return self in (BaseCategory.INTEGER, BaseCategory.UINTEGER, BaseCategory.DECIMAL)

    @property
    def is_dynamic(self) -> bool:
        return self in (BaseCategory.ANY, BaseCategory.OBJECT, BaseCategory.ARRAY)


BASE_TYPES: dict[str, BaseCategory] = {
    "string": BaseCategory.STRING,
    "URI": BaseCategory.STRING,
    "DocumentUri": BaseCategory.STRING,
    "RegExp": BaseCategory.STRING,
    "integer": BaseCategory.INTEGER,
    "uinteger": BaseCategory.UINTEGER,
    "decimal": BaseCategory.DECIMAL,
    "boolean": BaseCategory.BOOLEAN,
    "null": BaseCategory.NULL,
    "LSPAny": BaseCategory.ANY,
    "LSPObject": BaseCategory.OBJECT,
    "LSPArray": BaseCategory.ARRAY,
}


def classify(name: str) -> BaseCategory | None:
    """Return the category of a base type name, or None if it is unknown."""
    return BASE_TYPES.get(name)
