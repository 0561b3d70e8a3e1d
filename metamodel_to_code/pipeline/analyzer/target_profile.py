"""
Per-target parameters of the type lowerer.

A target is described by its base type spellings, its naming convention
and the shapes its type system cannot express directly. Everything else
about lowering is shared.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from ...utils import export_name
from .base_types import BaseCategory


@dataclass(frozen=True)
class BaseTypeTable:
    """Target spelling of each base category."""

    # Category -> target type (e.g. STRING -> "String")
    spellings: dict[BaseCategory, str] = field(default_factory=dict)

    # Category -> identifier-safe name used in composite names (e.g. ARRAY -> "ListAny")
    idents: dict[BaseCategory, str] = field(default_factory=dict)

    # Fallback for shapes the target cannot express
    any_type: str = "Any"
    any_ident: str = "Any"

    def spell(self, category: BaseCategory) -> str:
        return self.spellings.get(category, self.any_type)

    def ident(self, category: BaseCategory) -> str:
        return self.idents.get(category, self.spellings.get(category, self.any_ident))


@dataclass(frozen=True)
class NamingConvention:
    """How schema names become target identifiers."""

    # Leading characters replaced in type names ("_foo" -> "Xfoo")
    reserved_prefixes: dict[str, str] = field(default_factory=lambda: {"_": "X"})

    # Union composite naming: Or_Integer_String
    union_prefix: str = "Or_"
    union_separator: str = "_"

    # Collection wrapper naming
    map_array_wrapper_prefix: str = "MapArray_"
    array_wrapper_prefix: str = "ArrayOf_"
    map_wrapper_prefix: str = "MapOf_"
    wrapper_separator: str = "_"

    # Placeholder idents for anonymous shapes
    literal_ident: str = "Literal"
    string_literal_ident: str = "String"
    union_ident: str = "Union"
    intersection_ident: str = "Intersection"
    tuple_ident: str = "Tuple"

    def type_name(self, name: str) -> str:
        """Target identifier of a named schema type."""
        return export_name(name, self.reserved_prefixes)

    def union_name(self, idents: list[str]) -> str:
        return self.union_prefix + self.union_separator.join(idents)


@dataclass(frozen=True)
class TargetProfile:
    """Everything the lowerer needs to know about one target."""

    name: str = ""
    base_types: BaseTypeTable = field(default_factory=BaseTypeTable)
    naming: NamingConvention = field(default_factory=NamingConvention)

    # Named types that collapse to a base category (e.g. "DocumentUri" -> STRING)
    reference_overrides: dict[str, BaseCategory] = field(default_factory=dict)

    # The target forbids an array directly as a map value (proto3 map<K, repeated V>)
    wrap_map_array_values: bool = False

    # The target forbids arrays and maps as union members (proto3 oneof)
    wrap_union_collections: bool = False

    # Map keys must be scalars; other keys lower to the string scalar
    scalar_map_keys: bool = False

    def with_overrides(self, overrides: dict[str, BaseCategory]) -> TargetProfile:
        """Return a copy whose reference_overrides are extended by overrides."""
        if not overrides:
            return self
        merged = dict(self.reference_overrides)
        merged.update(overrides)
        return replace(self, reference_overrides=merged)
