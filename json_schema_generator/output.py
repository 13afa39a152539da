"""
Atomic writing of generated schema files.

Ensures that an interrupted run never leaves a half-written schema behind.
"""

from __future__ import annotations

import json
import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class OutputMode(str, Enum):
    """Behavior when the output file already exists."""

    ERROR_IF_EXISTS = "error"  # Default: raise error if file exists
    FORCE = "force"  # Overwrite


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        mode: How to handle existing output files
        validate_before_write: Whether to parse the JSON before writing
        atomic_write: Whether to use atomic file writes
    """

    mode: OutputMode = OutputMode.ERROR_IF_EXISTS
    validate_before_write: bool = True
    atomic_write: bool = True


class SchemaWriteError(Exception):
    """Raised when a schema file cannot be written.

    This can happen when:
    - The output file exists and the mode is "error"
    - The content is not valid JSON
    """

    pass


def validate_json(content: str) -> None:
    try:
        json.loads(content)
    except json.JSONDecodeError as e:
        raise SchemaWriteError(f"Generated schema is not valid JSON: {e}") from e


class AtomicWriter:
    """Writes files through a temporary file in the same directory.

    1. Write to a temporary file next to the target
    2. Validate the content
    3. Atomically replace the target file
    """

    def __init__(self, validate: Callable[[str], None] | None = None):
        """Initialize the atomic writer.

        Args:
            validate: Optional validation function, raising SchemaWriteError
        """
        self._validate = validate or validate_json

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate before finalizing

        Raises:
            SchemaWriteError: If validation fails
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        # same directory, so the rename stays on one filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)
            if validate:
                self._validate(content)
            temp_path.replace(path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise

    def write_if_not_exists(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content only if the file doesn't exist.

        Raises:
            SchemaWriteError: If the file already exists or validation fails
        """
        if path.exists():
            raise SchemaWriteError(f"Output file already exists: {path}. Use force mode to overwrite.")
        self.write(path, content, validate)


def write_schema(path: Path, content: str, config: OutputConfig) -> None:
    """Write one schema file according to the output configuration."""
    if config.atomic_write:
        writer = AtomicWriter()
        if config.mode == OutputMode.ERROR_IF_EXISTS:
            writer.write_if_not_exists(path, content, config.validate_before_write)
        else:
            writer.write(path, content, config.validate_before_write)
        return
    if config.mode == OutputMode.ERROR_IF_EXISTS and path.exists():
        raise SchemaWriteError(f"Output file already exists: {path}. Use force mode to overwrite.")
    if config.validate_before_write:
        validate_json(content)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
