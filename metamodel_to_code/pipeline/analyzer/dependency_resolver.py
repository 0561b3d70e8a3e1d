"""
Dependency resolver for type filters.

Expands a set of requested type names into the transitive closure of
every name they reference, so a subset of the protocol can be generated
without dangling references.
"""

from __future__ import annotations

import logging

from ..schema_ast.nodes import (
    AndNode,
    ArrayNode,
    LiteralNode,
    MapNode,
    MetaModel,
    OrNode,
    ReferenceNode,
    TupleNode,
    TypeNode,
)

logger = logging.getLogger(__name__)


class DependencyResolver:
    """Collects transitive type dependencies.

    One instance holds the visited set of a single resolution; create a new
    resolver for every generation run.
    """

    def __init__(self, model: MetaModel, include_proposed: bool = False):
        """
        Initialize the resolver.

        Args:
            model: The parsed metaModel
            include_proposed: Whether proposed properties and types are followed
        """
        self.model = model
        self.include_proposed = include_proposed
        self.visited: set[str] = set()
        self._structures = {s.name: s for s in model.structures}
        self._aliases = {a.name: a for a in model.type_aliases}
        self._proposed = model.proposed_types()

    def resolve(self, names: set[str] | list[str]) -> set[str]:
        """
        Expand names to include everything they reference.

        Args:
            names: Requested type names

        Returns:
            The requested names plus all transitive dependencies
        """
        for name in sorted(names):
            self._collect(name)
        return set(self.visited)

    def _collect(self, name: str) -> None:
        if name in self.visited:
            return
        # Mark before descending so reference cycles terminate
        self.visited.add(name)

        structure = self._structures.get(name)
        if structure is not None:
            for prop in structure.properties:
                if prop.proposed and not self.include_proposed:
                    continue
                self._collect_type(prop.type)
            for parent in structure.extends:
                self._collect_type(parent)
            for mixin in structure.mixins:
                self._collect_type(mixin)
            return

        alias = self._aliases.get(name)
        if alias is not None:
            self._collect_type(alias.type)
            return

        # Enumerations are leaves; unknown names stay in the set as-is
        if name not in self._proposed:
            logger.debug("Type %s is referenced but not defined in the model", name)

    def _collect_type(self, node: TypeNode | None) -> None:
        for name in sorted(collect_references(node, self.include_proposed)):
            if self._proposed.get(name) and not self.include_proposed:
                continue
            self._collect(name)


def collect_references(node: TypeNode | None, include_proposed: bool = True) -> set[str]:
    """
    Return the names directly referenced by a type node.

    Nested nodes (array elements, map keys and values, union, intersection and
    tuple items, inline literal properties) are walked; named types are not
    expanded.

    Args:
        node: The type node to inspect
        include_proposed: Whether proposed literal properties are walked
    """
    refs: set[str] = set()
    _walk(node, refs, include_proposed)
    return refs


def _walk(node: TypeNode | None, refs: set[str], include_proposed: bool) -> None:
    if node is None:
        return
    if isinstance(node, ReferenceNode):
        refs.add(node.name)
    elif isinstance(node, ArrayNode):
        _walk(node.element, refs, include_proposed)
    elif isinstance(node, MapNode):
        _walk(node.key, refs, include_proposed)
        _walk(node.value, refs, include_proposed)
    elif isinstance(node, (OrNode, AndNode, TupleNode)):
        for item in node.items:
            _walk(item, refs, include_proposed)
    elif isinstance(node, LiteralNode):
        for prop in node.properties:
            if prop.proposed and not include_proposed:
                continue
            _walk(prop.type, refs, include_proposed)


def resolve_dependencies(model: MetaModel, names: set[str] | list[str] | None, include_proposed: bool = False) -> set[str] | None:
    """
    Expand a type filter with all transitively referenced types.

    Returns None when names is None (meaning "generate all types").
    """
    if names is None:
        return None
    expanded = DependencyResolver(model, include_proposed).resolve(names)
    logger.debug("Resolved %d requested types to %d types", len(set(names)), len(expanded))
    return expanded
