"""
Kotlin code generation backend.

Generates kotlinx.serialization data classes, enum classes, sealed union
classes and protocol interface stubs from IR.
"""

from __future__ import annotations

from typing import Any

from ...utils import camel_to_screaming_snake, lower_first, strip_meta
from ..analyzer.base_types import BaseCategory
from ..analyzer.ir_nodes import (
    IR,
    ClassDef,
    EnumDef,
    FieldDef,
    MethodDef,
    TypeAliasDef,
    TypeKind,
    TypeRef,
    UnionDef,
    WrapperDef,
)
from ..analyzer.target_profile import BaseTypeTable, NamingConvention, TargetProfile
from .base import CodeBackend

KOTLIN_PROFILE = TargetProfile(
    name="kotlin",
    base_types=BaseTypeTable(
        spellings={
            BaseCategory.STRING: "String",
            BaseCategory.INTEGER: "Int",
            BaseCategory.UINTEGER: "UInt",
            BaseCategory.DECIMAL: "Double",
            BaseCategory.BOOLEAN: "Boolean",
            BaseCategory.NULL: "Nothing?",
            BaseCategory.ANY: "Any?",
            BaseCategory.OBJECT: "Map<String, Any?>",
            BaseCategory.ARRAY: "List<Any?>",
        },
        idents={
            BaseCategory.NULL: "Null",
            BaseCategory.ANY: "Any",
            BaseCategory.OBJECT: "Object",
            BaseCategory.ARRAY: "Array",
        },
        any_type="Any",
        any_ident="Any",
    ),
    naming=NamingConvention(reserved_prefixes={"_": "X"}),
    reference_overrides={
        "DocumentUri": BaseCategory.STRING,
        "URI": BaseCategory.STRING,
        "ChangeAnnotationIdentifier": BaseCategory.STRING,
        "Pattern": BaseCategory.STRING,
        "GlobPattern": BaseCategory.STRING,
        "RegularExpressionEngineKind": BaseCategory.STRING,
        "ProgressToken": BaseCategory.STRING,
        "DocumentSelector": BaseCategory.STRING,
    },
)

# Hard keywords cannot be used as property names without backticks
KOTLIN_KEYWORDS = {
    "as",
    "break",
    "class",
    "continue",
    "do",
    "else",
    "false",
    "for",
    "fun",
    "if",
    "in",
    "interface",
    "is",
    "null",
    "object",
    "package",
    "return",
    "super",
    "this",
    "throw",
    "true",
    "try",
    "typealias",
    "typeof",
    "val",
    "var",
    "when",
    "while",
}

PRIMITIVE_CHECKS = {
    BaseCategory.INTEGER: ("element is JsonPrimitive && element.intOrNull != null", "kotlinx.serialization.json.intOrNull"),
    BaseCategory.UINTEGER: ("element is JsonPrimitive && element.longOrNull != null", "kotlinx.serialization.json.longOrNull"),
    BaseCategory.DECIMAL: ("element is JsonPrimitive && element.doubleOrNull != null", "kotlinx.serialization.json.doubleOrNull"),
    BaseCategory.BOOLEAN: ("element is JsonPrimitive && element.booleanOrNull != null", "kotlinx.serialization.json.booleanOrNull"),
}
STRING_CHECK = "element is JsonPrimitive && element.isString"

ELEMENT_CLASSES = {"primitive": "JsonPrimitive", "array": "JsonArray", "object": "JsonObject"}


def kotlin_string(value: str) -> str:
    """Quote a value as a Kotlin string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")
    escaped = escaped.replace("\r", "").replace("\n", " ")
    return f'"{escaped}"'


def doc_lines(documentation: str, since: str = "", deprecated: str = "") -> list[str]:
    """KDoc body lines (without the comment markers)."""
    lines = documentation.split("\n") if documentation else []
    if since and f"@since {since}" not in documentation:
        lines += [""] * bool(lines) + [f"@since {since}"]
    if deprecated:
        lines += [""] * bool(lines) + [f"@deprecated {deprecated}"]
    # "*/" inside a documentation line would close the comment
    return [line.replace("*/", "*&#47;").rstrip() for line in lines]


def kdoc(lines: list[str], indent: str = "") -> list[str]:
    """Wrap documentation lines in a KDoc block, or nothing when there are none."""
    if not lines:
        return []
    body = [f"{indent} * {line}".rstrip() for line in lines]
    return [f"{indent}/**", *body, f"{indent} */"]


class KotlinBackend(CodeBackend):
    """Kotlin code generation backend."""

    PROFILE = KOTLIN_PROFILE
    TEMPLATE_LANG = "kotlin"
    FILE_EXTENSION = "kt"
    OUTPUT_FILE = "protocol.kt"
    DEFAULT_PACKAGE = "lsp.protocol"

    def __init__(self, config):
        super().__init__(config)
        self.imports: set[str] = set()

    def generate(self, ir: IR) -> dict[str, bytes]:
        """Generate Kotlin code from IR."""
        # Reset import tracking
        self.imports = set()

        sections = []
        for class_def in ir.classes:
            sections.append(self._render("class", self._prepare_class_context(class_def)))
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

        if ir.classes or ir.enums or ir.composites:
            self.imports.add("kotlinx.serialization.Serializable")

        prefix = self.prefix_template.render(
            generation_comment=self._header_lines(ir),
            package_name=self.package_name,
            imports=sorted(self.imports),
        )
        return {self.OUTPUT_FILE: self._assemble(prefix, sections)}

    def translate_type(self, type_ref: TypeRef | None) -> str:
        """Translate IR type to Kotlin type string."""
        if type_ref is None:
            return self.profile.base_types.any_type

        if type_ref.kind == TypeKind.OPTIONAL:
            inner = self.translate_type(type_ref.type_args[0])
            return inner if inner.endswith("?") else inner + "?"

        if type_ref.kind == TypeKind.ARRAY:
            return f"List<{self.translate_type(type_ref.type_args[0])}>"

        if type_ref.kind == TypeKind.MAP:
            key, value = type_ref.type_args
            return f"Map<{self.translate_type(key)}, {self.translate_type(value)}>"

        # Scalars, named types, composites and any carry their final spelling
        return type_ref.name or self.profile.base_types.any_type

    def field_name(self, name: str) -> str:
        """Kotlin property name for a JSON property."""
        kotlin_name = strip_meta(name)
        if kotlin_name in KOTLIN_KEYWORDS:
            return f"`{kotlin_name}`"
        return kotlin_name

    # --- Context preparation ---

    def _prepare_class_context(self, class_def: ClassDef) -> dict[str, Any]:
        fields = [self._prepare_field_context(f) for f in class_def.fields]
        return {
            "CLASS_NAME": class_def.name,
            "doc": kdoc(doc_lines(class_def.documentation, class_def.since, class_def.deprecated)),
            "deprecated": kotlin_string(class_def.deprecated) if class_def.deprecated else "",
            "fields": fields,
        }

    def _prepare_field_context(self, field_def: FieldDef) -> dict[str, Any]:
        name = self.field_name(field_def.name)
        kotlin_type = self.translate_type(field_def.type_ref)
        default = None
        if field_def.optional:
            if not kotlin_type.endswith("?"):
                kotlin_type += "?"
            default = "null"

        serial_name = None
        if strip_meta(field_def.name) != field_def.name:
            serial_name = kotlin_string(field_def.name)
            self.imports.add("kotlinx.serialization.SerialName")

        return {
            "name": name,
            "type": kotlin_type,
            "default": default,
            "serial_name": serial_name,
            "doc": kdoc(doc_lines(field_def.documentation, field_def.since, field_def.deprecated), "    "),
        }

    def _prepare_enum_context(self, enum_def: EnumDef) -> dict[str, Any]:
        value_type = self.profile.base_types.spell(enum_def.value_category)
        members = []
        for member in enum_def.members:
            if enum_def.is_string:
                value = kotlin_string(str(member.value))
            else:
                value = str(member.value)
                if enum_def.value_category == BaseCategory.DECIMAL:
                    value = repr(float(member.value))
                elif enum_def.value_category == BaseCategory.UINTEGER:
                    value += "u"
            members.append(
                {
                    "name": camel_to_screaming_snake(member.name),
                    "value": value,
                    "doc": kdoc(doc_lines(member.documentation), "    "),
                }
            )

        if enum_def.is_string:
            self.imports.add("kotlinx.serialization.SerialName")
        else:
            self.imports.update(
                {
                    "kotlinx.serialization.KSerializer",
                    "kotlinx.serialization.descriptors.PrimitiveKind",
                    "kotlinx.serialization.descriptors.PrimitiveSerialDescriptor",
                    "kotlinx.serialization.descriptors.SerialDescriptor",
                    "kotlinx.serialization.encoding.Decoder",
                    "kotlinx.serialization.encoding.Encoder",
                }
            )

        return {
            "ENUM_NAME": enum_def.name,
            "doc": kdoc(doc_lines(enum_def.documentation, enum_def.since, enum_def.deprecated)),
            "is_string": enum_def.is_string,
            "value_type": value_type,
            **self._enum_serial_calls(enum_def.value_category, value_type),
            "members": members,
        }

    def _enum_serial_calls(self, category: BaseCategory, value_type: str) -> dict[str, str]:
        if category == BaseCategory.DECIMAL:
            return {"serial_kind": "DOUBLE", "encode_call": "encodeDouble(value.value)", "decode_call": "decodeDouble()"}
        return {
            "serial_kind": "INT",
            "encode_call": "encodeInt(value.value.toInt())",
            "decode_call": f"decodeInt().to{value_type}()",
        }

    def _prepare_alias_context(self, alias: TypeAliasDef) -> dict[str, Any]:
        return {
            "ALIAS_NAME": alias.name,
            "doc": kdoc(doc_lines(alias.documentation, alias.since, alias.deprecated)),
            "type": self.translate_type(alias.target_type),
        }

    def _prepare_union_context(self, union: UnionDef) -> dict[str, Any]:
        self.imports.update(
            {
                "kotlinx.serialization.DeserializationStrategy",
                "kotlinx.serialization.json.JsonContentPolymorphicSerializer",
                "kotlinx.serialization.json.JsonElement",
            }
        )

        variants = []
        shapes = set()
        for variant in union.variants:
            shape = self._json_shape(variant.type_ref)
            shapes.add(shape)
            variants.append(
                {
                    "ident": variant.ident_name,
                    "type": self.translate_type(variant.type_ref),
                    "shape": shape,
                    "check": self._primitive_check(variant.type_ref) if shape == "primitive" else "",
                }
            )

        if shapes == {"primitive"}:
            discrimination = "primitive"
            self.imports.add("kotlinx.serialization.json.JsonPrimitive")
        elif shapes == {"object"}:
            discrimination = "object"
        else:
            discrimination = "mixed"
            for shape in shapes:
                self.imports.add("kotlinx.serialization.json." + ELEMENT_CLASSES[shape])

        return {
            "UNION_NAME": union.name,
            "member_types": " | ".join(v["type"] for v in variants),
            "variants": variants,
            "discrimination": discrimination,
            "element_classes": ELEMENT_CLASSES,
        }

    def _prepare_wrapper_context(self, wrapper: WrapperDef) -> dict[str, Any]:
        return {
            "WRAPPER_NAME": wrapper.name,
            "field_name": wrapper.field_name,
            "type": self.translate_type(wrapper.wrapped),
        }

    def _prepare_methods_context(self, methods: list[MethodDef]) -> dict[str, Any]:
        constants = [{"name": camel_to_screaming_snake(m.name), "method": kotlin_string(m.method)} for m in methods]
        server = [self._prepare_method_context(m) for m in methods if m.to_server] if self.config.generate_server else []
        client = [self._prepare_method_context(m) for m in methods if m.to_client] if self.config.generate_client else []
        return {"constants": constants, "server_methods": server, "client_methods": client}

    def _prepare_method_context(self, method: MethodDef) -> dict[str, Any]:
        result = None
        if not method.is_notification and not self._is_unit(method.result):
            result = self.translate_type(method.result)
        return {
            "function": lower_first(method.name),
            "method": method.method,
            "params": self.translate_type(method.params) if method.params is not None else None,
            "result": result,
            "is_notification": method.is_notification,
            "doc": kdoc(self._method_doc(method), "    "),
        }

    # --- Helpers ---

    def _method_doc(self, method: MethodDef) -> list[str]:
        lines = doc_lines(method.documentation, method.since)
        return lines + [""] * bool(lines) + [f"Method: {method.method}"]

    def _json_shape(self, type_ref: TypeRef) -> str:
        """JSON element kind a value of this type serializes to."""
        if type_ref.kind == TypeKind.OPTIONAL:
            return self._json_shape(type_ref.type_args[0])
        if type_ref.kind == TypeKind.ARRAY:
            return "array"
        if type_ref.kind == TypeKind.SCALAR:
            if type_ref.category == BaseCategory.ARRAY:
                return "array"
            if type_ref.category.is_dynamic or type_ref.category == BaseCategory.NULL:
                return "object"
            return "primitive"
        return "object"

    def _primitive_check(self, type_ref: TypeRef) -> str:
        while type_ref.kind == TypeKind.OPTIONAL:
            type_ref = type_ref.type_args[0]
        check = PRIMITIVE_CHECKS.get(type_ref.category)
        if check is None:
            return STRING_CHECK
        expression, extension = check
        self.imports.add(extension)
        return expression

    def _is_unit(self, type_ref: TypeRef | None) -> bool:
        return type_ref is None or (type_ref.kind == TypeKind.SCALAR and type_ref.category == BaseCategory.NULL)
