"""
Atomic file writer for safe code generation.

Ensures that file writes are atomic to prevent data corruption
from interrupted operations.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable
from pathlib import Path

from .config import OutputConfig, OutputMode

logger = logging.getLogger(__name__)


class OutputValidationError(Exception):
    """Raised when generated output fails validation before being written.

    This can happen when:
    - The generated content is empty
    - The generated content is not valid UTF-8
    """

    pass


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file

    This ensures that an interrupted write operation never leaves
    the target file in an incomplete state.
    """

    def __init__(self, validate: Callable[[bytes], None] | None = None, atomic: bool = True):
        """Initialize the atomic writer.

        Args:
            validate: Optional validation function for generated content
            atomic: When False, write the target file directly
        """
        self._validate = validate or self._default_validate
        self.atomic = atomic

    def write(self, path: Path, content: bytes, validate: bool = True) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate before finalizing

        Raises:
            OutputValidationError: If validation fails
            OSError: If file operations fail
        """
        if validate:
            self._validate(content)

        path.parent.mkdir(parents=True, exist_ok=True)

        if not self.atomic:
            path.write_bytes(content)
            return

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "wb") as f:
                f.write(content)
            temp_path.replace(path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise

    def write_if_not_exists(self, path: Path, content: bytes, validate: bool = True) -> None:
        """Write content only if the file doesn't exist.

        Raises:
            FileExistsError: If the file already exists
            OutputValidationError: If validation fails
        """
        if path.exists():
            raise FileExistsError(f"Output file already exists: {path}. Use --force to overwrite.")
        self.write(path, content, validate)

    def _default_validate(self, content: bytes) -> None:
        if not content.strip():
            raise OutputValidationError("Generated output is empty")

        try:
            content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise OutputValidationError(f"Generated output is not valid UTF-8: {e}") from e


def write_outputs(files: dict[str, bytes], output: str | Path, output_config: OutputConfig) -> list[Path]:
    """
    Write generated files.

    Args:
        files: Output file name -> content
        output: A directory (receives every file) or, for a single file, the target path
        output_config: Existing-file handling and atomicity

    Returns:
        The paths written, in file name order

    Raises:
        FileExistsError: If a target exists and the mode is ERROR_IF_EXISTS
        ValueError: If several files are generated but output is not a directory
    """
    # Path() drops a trailing separator, so check the raw string first
    is_dir = str(output).endswith(("/", "\\")) or Path(output).is_dir()
    output = Path(output)
    if not is_dir and len(files) > 1:
        raise ValueError(f"{len(files)} files generated; output must be a directory")

    writer = AtomicWriter(atomic=output_config.atomic_write)
    written = []
    for name in sorted(files):
        path = output / name if is_dir else output
        if output_config.mode == OutputMode.FORCE:
            writer.write(path, files[name])
        else:
            writer.write_if_not_exists(path, files[name])
        logger.info("Wrote %s (%d bytes)", path, len(files[name]))
        written.append(path)
    return written
