"""
Configuration for the code generator pipeline.

Loaded from a JSON file (``--config``) and overridden by command line flags.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class OutputMode(str, Enum):
    """Output mode for file generation.

    Controls behavior when the output file already exists.
    """

    ERROR_IF_EXISTS = "error"  # Default: raise error if file exists
    FORCE = "force"  # Overwrite


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        mode: How to handle existing output files
        atomic_write: Whether to use atomic file writes
    """

    mode: OutputMode = OutputMode.ERROR_IF_EXISTS
    atomic_write: bool = True


@dataclass
class CodeGeneratorConfig:
    """Configuration options for code generation."""

    # Types to generate (empty = all); expanded with their dependencies when resolve_deps is set
    types: list[str] = field(default_factory=list)

    # Whether to add transitively referenced types to a type filter
    resolve_deps: bool = True

    # Whether proposed (unstable) types, properties and methods are generated
    include_proposed: bool = False

    # Interface stubs
    generate_client: bool = True
    generate_server: bool = True

    # Go only: MarshalJSON/UnmarshalJSON methods on union structs
    generate_json: bool = True

    # Target package (Go package / Kotlin package / proto package); empty = target default
    package_name: str = ""

    # Proto only: option go_package
    go_package: str = ""

    # Schema type name -> base type name (e.g. {"DocumentUri": "string"})
    type_overrides: dict[str, str] = field(default_factory=dict)

    # Add generation comment at top of file
    add_generation_comment: bool = True

    # Header metadata
    source: str = ""
    ref: str = ""
    commit_hash: str = ""
    lsp_version: str = ""  # Defaults to the schema version

    # Output configuration
    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> CodeGeneratorConfig:
        """Create a config from a dictionary."""
        config = CodeGeneratorConfig()
        for k, v in d.items():
            if k == "output" and isinstance(v, dict):
                mode = v.get("mode", OutputMode.ERROR_IF_EXISTS)
                if isinstance(mode, str):
                    mode = OutputMode(mode)
                config.output = OutputConfig(
                    mode=mode,
                    atomic_write=v.get("atomic_write", True),
                )
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "types": self.types,
            "resolve_deps": self.resolve_deps,
            "include_proposed": self.include_proposed,
            "generate_client": self.generate_client,
            "generate_server": self.generate_server,
            "generate_json": self.generate_json,
            "package_name": self.package_name,
            "go_package": self.go_package,
            "type_overrides": self.type_overrides,
            "add_generation_comment": self.add_generation_comment,
            "source": self.source,
            "ref": self.ref,
            "commit_hash": self.commit_hash,
            "lsp_version": self.lsp_version,
            "output": {
                "mode": self.output.mode.value,
                "atomic_write": self.output.atomic_write,
            },
        }
