"""
Go code generation backend.

Generates structs with json tags, typed string/integer constants, Or_*
union structs with JSON marshaling and the Server/Client interfaces.
"""

from __future__ import annotations

import json
from typing import Any

from ..analyzer.base_types import BaseCategory
from ..analyzer.ir_nodes import IR, ClassDef, EnumDef, MethodDef, TypeAliasDef, TypeKind, TypeRef, UnionDef, WrapperDef
from ..analyzer.target_profile import BaseTypeTable, NamingConvention, TargetProfile
from .base import CodeBackend

GO_PROFILE = TargetProfile(
    name="go",
    base_types=BaseTypeTable(
        spellings={
            BaseCategory.STRING: "string",
            BaseCategory.INTEGER: "int32",
            BaseCategory.UINTEGER: "uint32",
            BaseCategory.DECIMAL: "float64",
            BaseCategory.BOOLEAN: "bool",
            BaseCategory.NULL: "any",
            BaseCategory.ANY: "any",
            BaseCategory.OBJECT: "map[string]any",
            BaseCategory.ARRAY: "[]any",
        },
        idents={
            BaseCategory.NULL: "Null",
            BaseCategory.OBJECT: "LSPObject",
            BaseCategory.ARRAY: "LSPArray",
        },
        any_type="any",
        any_ident="any",
    ),
    naming=NamingConvention(reserved_prefixes={"_": "X"}),
    reference_overrides={
        "LSPAny": BaseCategory.ANY,
        "LSPObject": BaseCategory.OBJECT,
        "LSPArray": BaseCategory.ARRAY,
    },
)

# Go types that are already nil-able and never get a pointer
NILABLE_PREFIXES = ("*", "[]", "map[")


def go_string(value: str) -> str:
    """Quote a value as a Go string literal."""
    # JSON string escapes are a subset of Go's
    return json.dumps(value)


def go_doc(documentation: str, since: str = "", deprecated: str = "", indent: str = "") -> list[str]:
    """Line comments for a declaration, with @since and Deprecated paragraphs."""
    lines = documentation.split("\n") if documentation else []
    if since and f"@since {since}" not in documentation:
        lines += [""] * bool(lines) + [f"@since {since}"]
    if deprecated:
        lines += [""] * bool(lines) + [f"Deprecated: {deprecated}"]
    return [f"{indent}// {line}".rstrip() for line in lines]


class GolangBackend(CodeBackend):
    """Go code generation backend."""

    PROFILE = GO_PROFILE
    TEMPLATE_LANG = "golang"
    FILE_EXTENSION = "go"
    OUTPUT_FILE = "protocol.go"
    DEFAULT_PACKAGE = "protocol"

    def __init__(self, config):
        super().__init__(config)
        self.imports: set[str] = set()

    def generate(self, ir: IR) -> dict[str, bytes]:
        """Generate Go code from IR."""
        self.imports = set()

        sections = []
        for class_def in ir.classes:
            sections.append(self._render("struct", self._prepare_struct_context(class_def)))
        for enum_def in ir.enums:
            sections.append(self._render("enum", self._prepare_enum_context(enum_def)))
        for alias in ir.type_aliases:
            sections.append(self._render("alias", self._prepare_alias_context(alias)))

        for _, composite in ir.composites:
            if isinstance(composite, UnionDef):
                sections.append(self._render("union", self._prepare_union_context(composite)))
            else:
                sections.append(self._render("wrapper", self._prepare_wrapper_context(composite)))

        if ir.methods:
            sections.append(self._render("methods", self._prepare_methods_context(ir.methods)))

        prefix = self.prefix_template.render(
            generation_comment=self._header_lines(ir),
            package_name=self.package_name,
            imports=sorted(self.imports),
        )
        return {self.OUTPUT_FILE: self._assemble(prefix, sections)}

    def translate_type(self, type_ref: TypeRef | None) -> str:
        """Translate IR type to Go type string."""
        if type_ref is None:
            return self.profile.base_types.any_type

        if type_ref.kind == TypeKind.OPTIONAL:
            return self.pointer(self.translate_type(type_ref.type_args[0]))

        if type_ref.kind == TypeKind.ARRAY:
            return "[]" + self.translate_type(type_ref.type_args[0])

        if type_ref.kind == TypeKind.MAP:
            key, value = type_ref.type_args
            return f"map[{self.translate_type(key)}]{self.translate_type(value)}"

        return type_ref.name or self.profile.base_types.any_type

    def pointer(self, go_type: str) -> str:
        """Pointer to go_type, unless the type can already be nil."""
        if go_type.startswith(NILABLE_PREFIXES) or go_type == self.profile.base_types.any_type:
            return go_type
        return "*" + go_type

    def field_name(self, name: str) -> str:
        """Exported Go field name for a JSON property ("_meta" -> "Xmeta")."""
        return self.profile.naming.type_name(name)

    # --- Context preparation ---

    def _prepare_struct_context(self, class_def: ClassDef) -> dict[str, Any]:
        fields = []
        for field_def in class_def.fields:
            go_type = self.translate_type(field_def.type_ref)
            tag = field_def.name
            if field_def.optional:
                go_type = self.pointer(go_type)
                tag += ",omitempty"
            fields.append(
                {
                    "name": self.field_name(field_def.name),
                    "type": go_type,
                    "tag": tag,
                    "doc": go_doc(field_def.documentation, deprecated=field_def.deprecated, indent="\t"),
                }
            )
        return {
            "STRUCT_NAME": class_def.name,
            "doc": go_doc(class_def.documentation, class_def.since, class_def.deprecated),
            "fields": fields,
        }

    def _prepare_enum_context(self, enum_def: EnumDef) -> dict[str, Any]:
        numeric = enum_def.value_category.is_numeric
        members = []
        for member in enum_def.members:
            members.append(
                {
                    "name": enum_def.name + self.profile.naming.type_name(member.name),
                    "value": str(member.value) if numeric else go_string(str(member.value)),
                    "doc": go_doc(member.documentation, indent="\t"),
                }
            )
        return {
            "ENUM_NAME": enum_def.name,
            "doc": go_doc(enum_def.documentation, enum_def.since, enum_def.deprecated),
            "value_type": self.profile.base_types.spell(enum_def.value_category),
            "members": members,
        }

    def _prepare_alias_context(self, alias: TypeAliasDef) -> dict[str, Any]:
        return {
            "ALIAS_NAME": alias.name,
            "doc": go_doc(alias.documentation, alias.since, alias.deprecated),
            "type": self.translate_type(alias.target_type),
        }

    def _prepare_union_context(self, union: UnionDef) -> dict[str, Any]:
        if self.config.generate_json:
            self.imports.update({"encoding/json", "fmt"})
        types = [self.translate_type(v.type_ref) for v in union.variants]
        return {
            "UNION_NAME": union.name,
            "member_types": " | ".join(types),
            "type_list": "[" + " ".join(types) + "]",
            "types": types,
            "generate_json": self.config.generate_json,
        }

    def _prepare_wrapper_context(self, wrapper: WrapperDef) -> dict[str, Any]:
        return {
            "WRAPPER_NAME": wrapper.name,
            "field": self.field_name(wrapper.field_name),
            "tag": wrapper.field_name,
            "type": self.translate_type(wrapper.wrapped),
        }

    def _prepare_methods_context(self, methods: list[MethodDef]) -> dict[str, Any]:
        constants = [{"name": "Method" + m.name, "method": go_string(m.method)} for m in methods]
        server = [self._prepare_method_context(m) for m in methods if m.to_server] if self.config.generate_server else []
        client = [self._prepare_method_context(m) for m in methods if m.to_client] if self.config.generate_client else []
        if server or client:
            self.imports.add("context")
        return {"constants": constants, "server_methods": server, "client_methods": client}

    def _prepare_method_context(self, method: MethodDef) -> dict[str, Any]:
        args = "context.Context"
        if method.params is not None:
            args += ", " + self.pointer(self.translate_type(method.params))

        returns = "error"
        if not method.is_notification and not self._is_void(method.result):
            returns = f"({self.pointer(self.translate_type(method.result))}, error)"

        return {
            "signature": f"{method.name}({args}) {returns}",
            "doc": go_doc(method.documentation, method.since, indent="\t"),
        }

    # --- Helpers ---

    def _is_void(self, type_ref: TypeRef | None) -> bool:
        return type_ref is None or (type_ref.kind == TypeKind.SCALAR and type_ref.category == BaseCategory.NULL)
