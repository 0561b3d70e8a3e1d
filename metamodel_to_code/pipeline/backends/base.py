"""
Base class for code generation backends.

Defines the interface that all target backends must implement. Backends
only spell and lay out what the analyzer has already lowered.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import jinja2

from ..analyzer.ir_nodes import IR, TypeRef
from ..analyzer.target_profile import TargetProfile
from ..config import CodeGeneratorConfig


class CodeBackend(ABC):
    """Abstract base class for code generation backends."""

    # Lowering parameters of the target
    PROFILE: TargetProfile = TargetProfile()

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    # Name of the generated file
    OUTPUT_FILE: str = ""

    # Package used when the configuration does not name one
    DEFAULT_PACKAGE: str = ""

    COMMENT_PREFIX: str = "//"

    # Whether request and notification stubs are generated
    RENDERS_METHODS: bool = True

    def __init__(self, config: CodeGeneratorConfig):
        """
        Initialize the backend.

        Args:
            config: Code generation configuration
        """
        self.config = config
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )
        self.prefix_template = self.jinja_env.get_template(f"prefix.{self.FILE_EXTENSION}.jinja2")

    def template(self, kind: str) -> jinja2.Template:
        """Return the template for one kind of declaration (class, enum, union...)."""
        return self.jinja_env.get_template(f"{kind}.{self.FILE_EXTENSION}.jinja2")

    @property
    def profile(self) -> TargetProfile:
        return self.PROFILE

    @property
    def package_name(self) -> str:
        return self.config.package_name or self.DEFAULT_PACKAGE

    @abstractmethod
    def generate(self, ir: IR) -> dict[str, bytes]:
        """
        Generate code from IR.

        Args:
            ir: The intermediate representation

        Returns:
            Output file name -> file content
        """

    @abstractmethod
    def translate_type(self, type_ref: TypeRef | None) -> str:
        """
        Translate an IR type to a target type string.

        Args:
            type_ref: The type reference

        Returns:
            Target type string
        """

    def _header_lines(self, ir: IR) -> list[str]:
        """Generation comment lines with the target's comment prefix."""
        return [f"{self.COMMENT_PREFIX} {line}".rstrip() for line in ir.generation_comment]

    def _assemble(self, prefix: str, sections: list[str]) -> bytes:
        """Join the prefix and the rendered declarations into the file content."""
        content = prefix
        for section in sections:
            content += section + "\n"
        return content.rstrip("\n").encode("utf-8") + b"\n"

    def _render(self, kind: str, context: dict[str, Any]) -> str:
        return self.template(kind).render(context).rstrip("\n") + "\n"
