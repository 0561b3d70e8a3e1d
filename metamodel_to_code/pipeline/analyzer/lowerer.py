"""
Type lowering.

Maps every schema type node onto a descriptor the target type system can
express. Shapes the target lacks (structural unions, collections inside
unions, arrays as map values) are replaced by synthesized composite types,
which are memoized by name for the whole run so that structurally identical
shapes collapse to a single generated type.
"""

from __future__ import annotations

import logging

from ..schema_ast.nodes import (
    AndNode,
    ArrayNode,
    BaseTypeNode,
    LiteralNode,
    MapNode,
    MetaModel,
    OrNode,
    ReferenceNode,
    StringLiteralNode,
    TupleNode,
    TypeNode,
    is_null,
)
from .base_types import BaseCategory, classify
from .ir_nodes import CompositeDef, TypeKind, TypeRef, UnionDef, Variant, WrapperDef
from .target_profile import TargetProfile

logger = logging.getLogger(__name__)

# Categories a target map key may use as-is
KEY_CATEGORIES = (BaseCategory.STRING, BaseCategory.INTEGER, BaseCategory.UINTEGER, BaseCategory.BOOLEAN)


class LoweringContext:
    """Run-scoped table of synthesized composites."""

    def __init__(self):
        self.composites: dict[str, CompositeDef] = {}

    def __contains__(self, name: str) -> bool:
        return name in self.composites

    def register(self, name: str, composite: CompositeDef) -> bool:
        """Register a composite under name; returns False if the name was already taken."""
        if name in self.composites:
            return False
        self.composites[name] = composite
        logger.debug("Registered composite %s", name)
        return True

    def sorted_composites(self) -> list[tuple[str, CompositeDef]]:
        return sorted(self.composites.items(), key=lambda item: item[0])


class TypeLowerer:
    """Lowers schema type nodes to target type descriptors."""

    def __init__(
        self,
        model: MetaModel,
        profile: TargetProfile,
        include_proposed: bool = False,
        context: LoweringContext | None = None,
    ):
        """
        Initialize the lowerer.

        Args:
            model: The parsed metaModel (used to look up proposed flags)
            profile: Target parameters (base type spellings, naming, wrapper rules)
            include_proposed: When False, union items referencing proposed types are dropped
            context: Composite table shared by every lowering of one run
        """
        self.model = model
        self.profile = profile
        self.include_proposed = include_proposed
        self.context = context if context is not None else LoweringContext()
        self._proposed = model.proposed_types()

    # --- Public API ---

    def lower(self, node: TypeNode | None) -> TypeRef:
        """Lower a type node to a target type descriptor."""
        if node is None:
            return self._any("missing type")

        # T | null is optionality, whatever the item order
        if isinstance(node, OrNode):
            inner = node.non_null_item()
            if inner is not None:
                return TypeRef(kind=TypeKind.OPTIONAL, type_args=(self.lower(inner),))
            return self._lower_union(node)

        if isinstance(node, BaseTypeNode):
            category = classify(node.name)
            if category is None:
                return self._any(f"unknown base type {node.name!r}")
            return self._scalar(category)

        if isinstance(node, ReferenceNode):
            return self._lower_reference(node.name)

        if isinstance(node, ArrayNode):
            return TypeRef(kind=TypeKind.ARRAY, type_args=(self.lower(node.element),))

        if isinstance(node, MapNode):
            return self._lower_map(node)

        if isinstance(node, StringLiteralNode):
            return TypeRef(
                kind=TypeKind.SCALAR,
                name=self.profile.base_types.spell(BaseCategory.STRING),
                category=BaseCategory.STRING,
                const_value=node.value,
            )

        if isinstance(node, TupleNode):
            return self._scalar(BaseCategory.ARRAY)

        if isinstance(node, (AndNode, LiteralNode)):
            return self._any(f"{node.KIND} type")

        return self._any(f"unsupported node {type(node).__name__}")

    def ident_name(self, node: TypeNode | None) -> str:
        """
        Return an identifier-safe name for a type node.

        Used to name union variants and composites, so it must be stable and
        contain only characters valid in an identifier.
        """
        naming = self.profile.naming
        base_types = self.profile.base_types

        if node is None:
            return base_types.any_ident
        if isinstance(node, BaseTypeNode):
            category = classify(node.name)
            if category is None:
                return base_types.any_ident
            return base_types.ident(category)
        if isinstance(node, ReferenceNode):
            return naming.type_name(node.name)
        if isinstance(node, ArrayNode):
            return "Arr" + self.ident_name(node.element)
        if isinstance(node, MapNode):
            return "Map" + self.ident_name(node.key) + self.ident_name(node.value)
        if isinstance(node, LiteralNode):
            return naming.literal_ident
        if isinstance(node, StringLiteralNode):
            return naming.string_literal_ident
        if isinstance(node, OrNode):
            return naming.union_ident
        if isinstance(node, AndNode):
            return naming.intersection_ident
        if isinstance(node, TupleNode):
            return naming.tuple_ident
        return base_types.any_ident

    def registered_composites(self) -> list[tuple[str, CompositeDef]]:
        """All composites synthesized so far, sorted by name."""
        return self.context.sorted_composites()

    # --- Helpers ---

    def _scalar(self, category: BaseCategory) -> TypeRef:
        return TypeRef(kind=TypeKind.SCALAR, name=self.profile.base_types.spell(category), category=category)

    def _any(self, reason: str) -> TypeRef:
        logger.debug("Lowering %s to the any type", reason)
        return TypeRef(kind=TypeKind.ANY, name=self.profile.base_types.any_type)

    def _lower_reference(self, name: str) -> TypeRef:
        category = self.profile.reference_overrides.get(name)
        if category is not None:
            return self._scalar(category)
        return TypeRef(kind=TypeKind.NAMED, name=self.profile.naming.type_name(name))

    def _lower_map(self, node: MapNode) -> TypeRef:
        key = self.lower(node.key)
        if self.profile.scalar_map_keys and not (key.kind is TypeKind.SCALAR and key.category in KEY_CATEGORIES):
            key = self._scalar(BaseCategory.STRING)

        value = self.lower(node.value)
        if self.profile.wrap_map_array_values and isinstance(node.value, ArrayNode):
            naming = self.profile.naming
            name = naming.map_array_wrapper_prefix + self.ident_name(node.value.element)
            value = self._wrapper(name, "items", value)

        return TypeRef(kind=TypeKind.MAP, type_args=(key, value))

    def _lower_union(self, node: OrNode) -> TypeRef:
        items = [item for item in node.items if not is_null(item)]
        if not self.include_proposed:
            items = [item for item in items if not self._is_proposed_reference(item)]

        if not items:
            return self._any("empty union")
        if len(items) == 1:
            return self.lower(items[0])

        # Stable sort, so the first of several equal idents wins
        pairs = sorted(((self.ident_name(item), item) for item in items), key=lambda pair: pair[0])
        unique: list[tuple[str, TypeNode]] = []
        seen: set[str] = set()
        for ident, item in pairs:
            if ident in seen:
                continue
            seen.add(ident)
            unique.append((ident, item))

        if len(unique) == 1:
            return self.lower(unique[0][1])

        name = self.profile.naming.union_name([ident for ident, _ in unique])
        if name not in self.context:
            variants = tuple(Variant(ident_name=ident, type_ref=self._union_member(item)) for ident, item in unique)
            self.context.register(name, UnionDef(name=name, variants=variants))
        return TypeRef(kind=TypeKind.UNION, name=name)

    def _union_member(self, node: TypeNode) -> TypeRef:
        lowered = self.lower(node)
        if not self.profile.wrap_union_collections:
            return lowered

        naming = self.profile.naming
        if isinstance(node, ArrayNode):
            name = naming.array_wrapper_prefix + self.ident_name(node.element)
            return self._wrapper(name, "items", lowered)
        if isinstance(node, MapNode):
            name = naming.map_wrapper_prefix + naming.wrapper_separator.join(
                [self.ident_name(node.key), self.ident_name(node.value)]
            )
            return self._wrapper(name, "pairs", lowered)
        return lowered

    def _wrapper(self, name: str, field_name: str, wrapped: TypeRef) -> TypeRef:
        self.context.register(name, WrapperDef(name=name, field_name=field_name, wrapped=wrapped))
        return TypeRef(kind=TypeKind.WRAPPER, name=name)

    def _is_proposed_reference(self, node: TypeNode) -> bool:
        return isinstance(node, ReferenceNode) and self._proposed.get(node.name, False)
