"""
IR (Intermediate Representation) node definitions.

These nodes represent the filtered and lowered protocol, ready for
rendering. Every type is already mapped onto a target-representable
descriptor and every type name is final.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .base_types import BaseCategory


class TypeKind(Enum):
    """Kind of type in the IR."""

    SCALAR = "scalar"  # A base category (string, int, dynamic map...)
    NAMED = "named"  # A structure, enumeration or type alias
    ARRAY = "array"  # list[T]
    MAP = "map"  # dict[K, V]
    OPTIONAL = "optional"  # T | None
    UNION = "union"  # Reference to a synthesized UnionDef
    WRAPPER = "wrapper"  # Reference to a synthesized WrapperDef
    ANY = "any"  # Fallback for shapes the target cannot express


@dataclass(frozen=True)
class TypeRef:
    """A lowered type descriptor.

    Structurally equal descriptors compare and hash equal, so lowering
    the same node twice yields the same identity.
    """

    kind: TypeKind = TypeKind.ANY
    name: str = ""  # Target spelling (scalars, any) or identifier (named, composites)

    # For scalars
    category: BaseCategory | None = None

    # ARRAY: (element,)  MAP: (key, value)  OPTIONAL: (inner,)
    type_args: tuple[TypeRef, ...] = ()

    # For string literal constants
    const_value: Any = None


@dataclass(frozen=True)
class Variant:
    """One member of a synthesized union."""

    ident_name: str = ""  # Identifier-safe name, the sort key
    type_ref: TypeRef = field(default_factory=TypeRef)


@dataclass(frozen=True)
class UnionDef:
    """A union synthesized because the target has no structural unions."""

    name: str = ""
    variants: tuple[Variant, ...] = ()


@dataclass(frozen=True)
class WrapperDef:
    """A record with a single field holding an otherwise unrepresentable collection."""

    name: str = ""
    field_name: str = "items"
    wrapped: TypeRef = field(default_factory=TypeRef)


CompositeDef = UnionDef | WrapperDef


@dataclass
class FieldDef:
    """A field definition in a class."""

    name: str = ""  # Original JSON property name
    type_ref: TypeRef | None = None
    optional: bool = False
    documentation: str = ""
    since: str = ""
    deprecated: str = ""

    # Name of the structure the field was declared in (differs for flattened fields)
    declared_in: str = ""


@dataclass
class ClassDef:
    """A class definition (one per included structure)."""

    name: str = ""
    original_name: str = ""
    fields: list[FieldDef] = field(default_factory=list)
    documentation: str = ""
    since: str = ""
    deprecated: str = ""


@dataclass
class EnumMemberDef:
    name: str = ""
    value: Any = None
    documentation: str = ""


@dataclass
class EnumDef:
    """An enum definition."""

    name: str = ""
    original_name: str = ""
    value_category: BaseCategory = BaseCategory.STRING
    members: list[EnumMemberDef] = field(default_factory=list)
    supports_custom_values: bool = False
    documentation: str = ""
    since: str = ""
    deprecated: str = ""

    @property
    def is_string(self) -> bool:
        return self.value_category.is_string_like


@dataclass
class TypeAliasDef:
    """A type alias definition."""

    name: str = ""
    original_name: str = ""
    target_type: TypeRef | None = None
    documentation: str = ""
    since: str = ""
    deprecated: str = ""


@dataclass
class MethodDef:
    """A typed interface stub for a request or notification."""

    name: str = ""  # e.g. "TextDocumentHover"
    method: str = ""  # e.g. "textDocument/hover"
    direction: str = ""
    params: TypeRef | None = None
    result: TypeRef | None = None
    is_notification: bool = False
    documentation: str = ""
    since: str = ""

    @property
    def to_server(self) -> bool:
        return self.direction in ("clientToServer", "both")

    @property
    def to_client(self) -> bool:
        return self.direction in ("serverToClient", "both")


@dataclass
class IR:
    """The complete Intermediate Representation."""

    version: str = ""

    # All definitions, each sorted by name
    classes: list[ClassDef] = field(default_factory=list)
    enums: list[EnumDef] = field(default_factory=list)
    type_aliases: list[TypeAliasDef] = field(default_factory=list)
    methods: list[MethodDef] = field(default_factory=list)

    # Synthesized unions and wrappers, sorted by name, emitted after named types
    composites: list[tuple[str, CompositeDef]] = field(default_factory=list)

    # Generation comment lines (without comment markers)
    generation_comment: list[str] = field(default_factory=list)
