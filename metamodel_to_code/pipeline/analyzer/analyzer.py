"""
Schema analyzer that transforms the metaModel into IR.

Phase 2 of the pipeline: select the types and methods to generate,
flatten inheritance and lower every type through the TypeLowerer.
"""

from __future__ import annotations

import logging

from ...utils import method_name
from ..config import CodeGeneratorConfig
from ..schema_ast.nodes import (
    BaseTypeNode,
    Enumeration,
    MetaModel,
    Notification,
    Property,
    ReferenceNode,
    Request,
    Structure,
    TypeAlias,
)
from .base_types import BaseCategory, classify
from .dependency_resolver import collect_references
from .ir_nodes import (
    IR,
    ClassDef,
    EnumDef,
    EnumMemberDef,
    FieldDef,
    MethodDef,
    TypeAliasDef,
)
from .lowerer import LoweringContext, TypeLowerer
from .target_profile import TargetProfile

logger = logging.getLogger(__name__)


class SchemaAnalyzer:
    """Analyzes a metaModel and builds IR."""

    def __init__(self, profile: TargetProfile, config: CodeGeneratorConfig, context: LoweringContext | None = None):
        """
        Initialize the analyzer.

        Args:
            profile: Target lowering parameters
            config: Code generation configuration
            context: Composite table for this run (a fresh one by default)

        Raises:
            ValueError: If a type override names an unknown base type
        """
        self.config = config
        self.profile = profile.with_overrides(_override_categories(config.type_overrides))
        self.context = context if context is not None else LoweringContext()

        # Will be set during analysis
        self.model: MetaModel | None = None
        self.lowerer: TypeLowerer | None = None
        self.type_filter: set[str] | None = None
        self._structures: dict[str, Structure] = {}

    def analyze(self, model: MetaModel, type_filter: set[str] | None = None, include_methods: bool = True) -> IR:
        """
        Analyze the model and build IR.

        Args:
            model: The parsed metaModel
            type_filter: Names to generate (already expanded with dependencies), None for all
            include_methods: Whether requests and notifications are lowered into method stubs

        Returns:
            IR ready for code generation
        """
        self.model = model
        self.type_filter = type_filter
        self.lowerer = TypeLowerer(model, self.profile, self.config.include_proposed, self.context)
        self._structures = {s.name: s for s in model.structures}

        ir = IR(version=model.version)

        for structure in sorted(model.structures, key=lambda s: s.name):
            if self.should_include(structure.name, structure.proposed):
                ir.classes.append(self._analyze_structure(structure))

        for enum in sorted(model.enumerations, key=lambda e: e.name):
            if self.should_include(enum.name, enum.proposed):
                ir.enums.append(self._analyze_enumeration(enum))

        for alias in sorted(model.type_aliases, key=lambda a: a.name):
            if self.should_include(alias.name, alias.proposed):
                ir.type_aliases.append(self._analyze_alias(alias))

        if include_methods:
            methods = [self._analyze_method(r) for r in model.requests if self._should_include_method(r)]
            methods += [self._analyze_method(n) for n in model.notifications if self._should_include_method(n)]
            ir.methods = sorted(methods, key=lambda m: m.method)

        # Composites last, once every type has been lowered
        ir.composites = self.lowerer.registered_composites()

        logger.info(
            "Analyzed %d classes, %d enums, %d aliases, %d methods, %d composites",
            len(ir.classes),
            len(ir.enums),
            len(ir.type_aliases),
            len(ir.methods),
            len(ir.composites),
        )
        return ir

    def should_include(self, name: str, proposed: bool) -> bool:
        """Check the proposed filter, then the type filter."""
        if proposed and not self.config.include_proposed:
            return False
        if self.type_filter is not None and name not in self.type_filter:
            return False
        return True

    def _should_include_method(self, method: Request | Notification) -> bool:
        if method.proposed and not self.config.include_proposed:
            return False
        if self.type_filter is None:
            return True

        refs: set[str] = set()
        for node in (method.params, getattr(method, "result", None)):
            refs |= collect_references(node, self.config.include_proposed)
        return refs <= self.type_filter

    # --- Structures ---

    def _analyze_structure(self, structure: Structure) -> ClassDef:
        return ClassDef(
            name=self.profile.naming.type_name(structure.name),
            original_name=structure.name,
            fields=self._flatten_fields(structure, set()),
            documentation=structure.documentation,
            since=structure.since,
            deprecated=structure.deprecated,
        )

    def _flatten_fields(self, structure: Structure, seen: set[str]) -> list[FieldDef]:
        """
        Collect the fields of a structure, parents and mixins first.

        A later field with the same name replaces an earlier one and moves
        to its position.
        """
        if structure.name in seen:
            return []
        seen.add(structure.name)

        fields: dict[str, FieldDef] = {}

        def add(field_def: FieldDef) -> None:
            fields.pop(field_def.name, None)
            fields[field_def.name] = field_def

        for parent in (*structure.extends, *structure.mixins):
            if not isinstance(parent, ReferenceNode):
                continue
            parent_structure = self._structures.get(parent.name)
            if parent_structure is None:
                logger.debug("Structure %s extends unknown type %s", structure.name, parent.name)
                continue
            for field_def in self._flatten_fields(parent_structure, seen):
                add(field_def)

        for prop in structure.properties:
            if prop.proposed and not self.config.include_proposed:
                continue
            add(self._analyze_property(prop, structure.name))

        return list(fields.values())

    def _analyze_property(self, prop: Property, declared_in: str) -> FieldDef:
        return FieldDef(
            name=prop.name,
            type_ref=self.lowerer.lower(prop.type),
            optional=prop.optional,
            documentation=prop.documentation,
            since=prop.since,
            deprecated=prop.deprecated,
            declared_in=declared_in,
        )

    # --- Enumerations and aliases ---

    def _analyze_enumeration(self, enum: Enumeration) -> EnumDef:
        category = BaseCategory.STRING
        if isinstance(enum.type, BaseTypeNode):
            category = classify(enum.type.name) or BaseCategory.STRING

        members = [
            EnumMemberDef(name=value.name, value=value.value, documentation=value.documentation)
            for value in enum.values
            if not value.proposed or self.config.include_proposed
        ]
        return EnumDef(
            name=self.profile.naming.type_name(enum.name),
            original_name=enum.name,
            value_category=category,
            members=members,
            supports_custom_values=enum.supports_custom_values,
            documentation=enum.documentation,
            since=enum.since,
            deprecated=enum.deprecated,
        )

    def _analyze_alias(self, alias: TypeAlias) -> TypeAliasDef:
        return TypeAliasDef(
            name=self.profile.naming.type_name(alias.name),
            original_name=alias.name,
            target_type=self.lowerer.lower(alias.type),
            documentation=alias.documentation,
            since=alias.since,
            deprecated=alias.deprecated,
        )

    # --- Methods ---

    def _analyze_method(self, method: Request | Notification) -> MethodDef:
        is_notification = isinstance(method, Notification)
        return MethodDef(
            name=method_name(method.method),
            method=method.method,
            direction=method.direction,
            params=self.lowerer.lower(method.params) if method.params is not None else None,
            result=self.lowerer.lower(method.result) if getattr(method, "result", None) is not None else None,
            is_notification=is_notification,
            documentation=method.documentation,
            since=method.since,
        )


def _override_categories(type_overrides: dict[str, str]) -> dict[str, BaseCategory]:
    """Convert configured type overrides (name -> base type name) to categories."""
    overrides: dict[str, BaseCategory] = {}
    for name, base in sorted(type_overrides.items()):
        category = classify(base)
        if category is None:
            raise ValueError(f"Type override for {name!r} names unknown base type {base!r}")
        overrides[name] = category
    return overrides

