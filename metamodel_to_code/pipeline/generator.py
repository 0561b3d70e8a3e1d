"""
Pipeline generator - orchestrates all phases.

1. Parse the metaModel document into the schema AST
2. Expand the type filter with its dependencies
3. Analyze and lower the AST into IR
4. Render the IR with the target backend
"""

from __future__ import annotations

import logging
from typing import Any

from .. import __version__
from ..cli_utils import reconstruct_command_line
from .analyzer import LoweringContext, SchemaAnalyzer, resolve_dependencies
from .analyzer.ir_nodes import IR
from .backends import get_backend
from .config import CodeGeneratorConfig
from .schema_ast import MetaModel, SchemaParser

logger = logging.getLogger(__name__)


class PipelineGenerator:
    """Generates target source from a metaModel document."""

    def __init__(self, schema: MetaModel | dict[str, Any] | bytes | str, config: CodeGeneratorConfig, language: str):
        """
        Initialize the generator.

        Args:
            schema: The metaModel (raw JSON, decoded dict or an already parsed model)
            config: Code generation configuration
            language: Target language name (see list_backends())

        Raises:
            ValueError: If the language has no registered backend
        """
        self.schema = schema
        self.config = config
        self.language = language
        self.backend = get_backend(language, config)

    def parse(self) -> MetaModel:
        """Phase 1: parse the document (SchemaParseError on malformed input)."""
        if isinstance(self.schema, MetaModel):
            return self.schema
        return SchemaParser().parse(self.schema)

    def type_filter(self, model: MetaModel) -> set[str] | None:
        """Phase 2: the names to generate, or None for everything."""
        if not self.config.types:
            return None
        names = set(self.config.types)
        if not self.config.resolve_deps:
            return names
        return resolve_dependencies(model, names, self.config.include_proposed)

    def analyze(self, model: MetaModel) -> IR:
        """Phase 3: build the IR with a fresh composite table."""
        analyzer = SchemaAnalyzer(self.backend.profile, self.config, LoweringContext())
        ir = analyzer.analyze(model, self.type_filter(model), include_methods=self.backend.RENDERS_METHODS)
        ir.generation_comment = self._generation_comment(model)
        return ir

    def generate(self) -> dict[str, bytes]:
        """
        Run the whole pipeline.

        Returns:
            Output file name -> file content
        """
        model = self.parse()
        ir = self.analyze(model)
        files = self.backend.generate(ir)
        logger.info("Generated %s for %s (%s)", ", ".join(sorted(files)), self.language, model.version or "unversioned")
        return files

    def _generation_comment(self, model: MetaModel) -> list[str]:
        """Header lines for the generated files."""
        if not self.config.add_generation_comment:
            return []

        lines = [f"Code generated by metamodel_to_code v{__version__}. DO NOT EDIT."]
        if self.config.source:
            lines.append(f"Source: {self.config.source}")
        if self.config.ref:
            lines.append(f"Ref: {self.config.ref}")
        if self.config.commit_hash:
            lines.append(f"Commit: {self.config.commit_hash}")
        lsp_version = self.config.lsp_version or model.version
        if lsp_version:
            lines.append(f"LSP Version: {lsp_version}")

        # Imported here, the command module imports this one
        from ..metamodel_to_code import metamodel_to_code as click_command

        lines.append(f"Command: {reconstruct_command_line(click_command)}")
        return lines
