"""metaModel to Code Generator

A Python package for generating typed source from an LSP-style
metaModel document. Supports Go, Kotlin and Protocol Buffers output through
a shared type-lowering engine.
"""

import logging

__version__ = "1.0.1"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .pipeline import (  # noqa: E402
    AtomicWriter,
    CodeGeneratorConfig,
    OutputConfig,
    OutputMode,
    PipelineGenerator,
    SchemaParseError,
)

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "OutputConfig",
    "OutputMode",
    "SchemaParseError",
    "AtomicWriter",
]
