"""
Analyzer module.

Contains dependency resolution, type lowering and IR building.
"""

from __future__ import annotations

from .analyzer import SchemaAnalyzer
from .base_types import BaseCategory, classify
from .dependency_resolver import DependencyResolver, collect_references, resolve_dependencies
from .ir_nodes import (
    IR,
    ClassDef,
    CompositeDef,
    EnumDef,
    EnumMemberDef,
    FieldDef,
    MethodDef,
    TypeAliasDef,
    TypeKind,
    TypeRef,
    UnionDef,
    Variant,
    WrapperDef,
)
from .lowerer import LoweringContext, TypeLowerer
from .target_profile import BaseTypeTable, NamingConvention, TargetProfile

__all__ = [
    "BaseCategory",
    "classify",
    "DependencyResolver",
    "collect_references",
    "resolve_dependencies",
    "ClassDef",
    "FieldDef",
    "TypeRef",
    "TypeKind",
    "EnumDef",
    "EnumMemberDef",
    "TypeAliasDef",
    "MethodDef",
    "Variant",
    "UnionDef",
    "WrapperDef",
    "CompositeDef",
    "IR",
    "LoweringContext",
    "TypeLowerer",
    "BaseTypeTable",
    "NamingConvention",
    "TargetProfile",
    "SchemaAnalyzer",
]
