"""
Protocol Buffers code generation backend.

Generates proto3 messages, enums and oneof unions from IR. Type aliases
do not exist in proto3; references to them are spelled as their target.
"""

from __future__ import annotations

from typing import Any

from ...utils import camel_to_screaming_snake, camel_to_snake, strip_meta
from ..analyzer.base_types import BaseCategory
from ..analyzer.ir_nodes import IR, ClassDef, EnumDef, TypeKind, TypeRef, UnionDef, WrapperDef
from ..analyzer.target_profile import BaseTypeTable, NamingConvention, TargetProfile
from .base import CodeBackend

PROTO_PROFILE = TargetProfile(
    name="proto",
    base_types=BaseTypeTable(
        spellings={
            BaseCategory.STRING: "string",
            BaseCategory.INTEGER: "int32",
            BaseCategory.UINTEGER: "uint32",
            BaseCategory.DECIMAL: "double",
            BaseCategory.BOOLEAN: "bool",
            BaseCategory.NULL: "google.protobuf.NullValue",
            BaseCategory.ANY: "google.protobuf.Value",
            BaseCategory.OBJECT: "google.protobuf.Struct",
            BaseCategory.ARRAY: "google.protobuf.ListValue",
        },
        idents={
            BaseCategory.STRING: "String",
            BaseCategory.INTEGER: "Int32",
            BaseCategory.UINTEGER: "Uint32",
            BaseCategory.DECIMAL: "Double",
            BaseCategory.BOOLEAN: "Bool",
            BaseCategory.NULL: "Null",
            BaseCategory.ANY: "Value",
            BaseCategory.OBJECT: "Struct",
            BaseCategory.ARRAY: "ListValue",
        },
        any_type="google.protobuf.Value",
        any_ident="Value",
    ),
    naming=NamingConvention(reserved_prefixes={"$": "", "_": "X"}),
    reference_overrides={
        "DocumentUri": BaseCategory.STRING,
        "URI": BaseCategory.STRING,
        "ChangeAnnotationIdentifier": BaseCategory.STRING,
        "Pattern": BaseCategory.STRING,
        "GlobPattern": BaseCategory.STRING,
        "RegularExpressionEngineKind": BaseCategory.STRING,
        "ProgressToken": BaseCategory.STRING,
        "DocumentSelector": BaseCategory.STRING,
        "LSPAny": BaseCategory.ANY,
        "LSPObject": BaseCategory.OBJECT,
        "LSPArray": BaseCategory.ARRAY,
    },
    wrap_map_array_values=True,
    wrap_union_collections=True,
    scalar_map_keys=True,
)


def comment_lines(documentation: str, indent: str = "") -> list[str]:
    if not documentation:
        return []
    return [f"{indent}// {line}".rstrip() for line in documentation.split("\n")]


class ProtoBackend(CodeBackend):
    """Protocol Buffers (proto3) code generation backend."""

    PROFILE = PROTO_PROFILE
    TEMPLATE_LANG = "proto"
    FILE_EXTENSION = "proto"
    OUTPUT_FILE = "protocol.proto"
    DEFAULT_PACKAGE = "lsp"

    # proto3 has no interfaces to stub
    RENDERS_METHODS = False

    def __init__(self, config):
        super().__init__(config)
        self.aliases: dict[str, TypeRef | None] = {}

    def generate(self, ir: IR) -> dict[str, bytes]:
        """Generate proto3 definitions from IR."""
        self.aliases = {alias.name: alias.target_type for alias in ir.type_aliases}

        sections = []
        if ir.type_aliases:
            alias_lines = [{"name": a.original_name, "type": self.translate_type(a.target_type)} for a in ir.type_aliases]
            sections.append(self._render("aliases", {"aliases": alias_lines}))

        # Enums first (dependencies)
        for enum_def in ir.enums:
            sections.append(self._render("enum", self._prepare_enum_context(enum_def)))
        for class_def in ir.classes:
            sections.append(self._render("message", self._prepare_message_context(class_def)))

        unions = [c for _, c in ir.composites if isinstance(c, UnionDef)]
        wrappers = [c for _, c in ir.composites if isinstance(c, WrapperDef)]
        for union in unions:
            sections.append(self._render("union", self._prepare_union_context(union)))
        if wrappers:
            sections.append(self._render("wrappers", {"wrappers": [self._prepare_wrapper_context(w) for w in wrappers]}))

        prefix = self.prefix_template.render(
            generation_comment=self._header_lines(ir),
            package_name=self.package_name,
            go_package=self.config.go_package,
        )
        return {self.OUTPUT_FILE: self._assemble(prefix, sections)}

    def translate_type(self, type_ref: TypeRef | None) -> str:
        """Translate IR type to a proto3 field type."""
        type_ref = self._resolve(type_ref)
        if type_ref is None:
            return self.profile.base_types.any_type

        if type_ref.kind == TypeKind.OPTIONAL:
            return self.translate_type(type_ref.type_args[0])

        if type_ref.kind == TypeKind.ARRAY:
            return "repeated " + self._single_type(type_ref.type_args[0])

        if type_ref.kind == TypeKind.MAP:
            key, value = type_ref.type_args
            return f"map<{self.translate_type(key)}, {self._single_type(value)}>"

        return type_ref.name or self.profile.base_types.any_type

    def field_name(self, name: str) -> str:
        return camel_to_snake(strip_meta(name))

    # --- Context preparation ---

    def _prepare_message_context(self, class_def: ClassDef) -> dict[str, Any]:
        fields = []
        for number, field_def in enumerate(class_def.fields, start=1):
            proto_type = self.translate_type(field_def.type_ref)
            nullable = field_def.optional or (field_def.type_ref is not None and field_def.type_ref.kind == TypeKind.OPTIONAL)
            # repeated and map fields are inherently optional
            label = "optional " if nullable and not proto_type.startswith(("repeated ", "map<")) else ""
            fields.append(
                {
                    "name": self.field_name(field_def.name),
                    "type": label + proto_type,
                    "number": number,
                    "doc": comment_lines(field_def.documentation, "  "),
                }
            )
        return {
            "MESSAGE_NAME": class_def.name,
            "doc": comment_lines(class_def.documentation),
            "fields": fields,
        }

    def _prepare_enum_context(self, enum_def: EnumDef) -> dict[str, Any]:
        prefix = camel_to_screaming_snake(strip_meta(enum_def.original_name))

        # proto3 requires a zero value first
        numbered = enum_def.value_category.is_numeric and all(isinstance(m.value, int) for m in enum_def.members)
        has_zero = numbered and any(m.value == 0 for m in enum_def.members)
        members = []
        if not has_zero:
            members.append({"name": f"{prefix}_UNSPECIFIED", "number": 0, "doc": []})

        next_number = 1
        for member in enum_def.members:
            if numbered:
                number = member.value
            else:
                number = next_number
                next_number += 1
            first_line = member.documentation.split("\n")[0] if member.documentation else ""
            members.append(
                {
                    "name": f"{prefix}_{camel_to_screaming_snake(member.name)}",
                    "number": number,
                    "doc": comment_lines(first_line, "  "),
                }
            )

        # The zero value must come first
        members.sort(key=lambda m: m["number"] != 0)

        return {
            "ENUM_NAME": enum_def.name,
            "doc": comment_lines(enum_def.documentation),
            "members": members,
        }

    def _prepare_union_context(self, union: UnionDef) -> dict[str, Any]:
        fields = []
        for number, variant in enumerate(union.variants, start=1):
            resolved = self._resolve(variant.type_ref)
            name = camel_to_snake(variant.ident_name)
            if resolved is not None and resolved.kind == TypeKind.SCALAR:
                name += "_value"
            fields.append({"name": name, "type": self._single_type(variant.type_ref), "number": number})
        return {"UNION_NAME": union.name, "fields": fields}

    def _prepare_wrapper_context(self, wrapper: WrapperDef) -> dict[str, Any]:
        return {
            "name": wrapper.name,
            "field_name": wrapper.field_name,
            "type": self.translate_type(wrapper.wrapped),
        }

    # --- Helpers ---

    def _resolve(self, type_ref: TypeRef | None) -> TypeRef | None:
        """Follow named references to type aliases down to their target."""
        seen: set[str] = set()
        while type_ref is not None and type_ref.kind == TypeKind.NAMED and type_ref.name in self.aliases:
            if type_ref.name in seen:
                return None
            seen.add(type_ref.name)
            type_ref = self.aliases[type_ref.name]
        return type_ref

    def _single_type(self, type_ref: TypeRef | None) -> str:
        """Spell a type that must be a single scalar or message (no repeated, no map)."""
        type_ref = self._resolve(type_ref)
        if type_ref is not None and type_ref.kind == TypeKind.OPTIONAL:
            return self._single_type(type_ref.type_args[0])
        if type_ref is not None and type_ref.kind == TypeKind.ARRAY:
            return self.profile.base_types.spell(BaseCategory.ARRAY)
        if type_ref is not None and type_ref.kind == TypeKind.MAP:
            return self.profile.base_types.spell(BaseCategory.OBJECT)
        return self.translate_type(type_ref)
