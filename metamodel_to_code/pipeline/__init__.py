"""
Pipeline - metaModel to typed source generator.

This module provides a multi-phase architecture for generating target
source from an LSP-style metaModel document:

1. Phase 1 (Parser): Parse the document into the schema AST
2. Phase 2 (Resolver): Expand a type filter with its dependencies
3. Phase 3 (Analyzer): Lower every type and build the IR
4. Phase 4 (Backend): Render the IR through Jinja2 templates
5. Phase 5 (Writer): Atomically write the generated files
"""

from __future__ import annotations

from .config import CodeGeneratorConfig, OutputConfig, OutputMode
from .generator import PipelineGenerator
from .schema_ast import SchemaParseError
from .writer import AtomicWriter, OutputValidationError, write_outputs

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "OutputConfig",
    "OutputMode",
    "SchemaParseError",
    "AtomicWriter",
    "OutputValidationError",
    "write_outputs",
]
