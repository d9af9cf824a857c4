"""
Atomic file writer for generated configuration.

Ensures that file writes are atomic to prevent data corruption
from interrupted operations.
"""

from __future__ import annotations

import json
import logging
import tempfile
from collections.abc import Callable
from pathlib import Path

from .config import ConverterConfig
from .errors import MalformedInputError, NginxConfError
from .parser import ConfParser

logger = logging.getLogger(__name__)


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file

    This ensures that an interrupted write operation never leaves
    the target file in an incomplete state.
    """

    def __init__(
        self,
        validate_conf: Callable[[str], None] | None = None,
        validate_json: Callable[[str], None] | None = None,
        config: ConverterConfig | None = None,
    ):
        """Initialize the atomic writer.

        Args:
            validate_conf: Optional validation function for configuration text
            validate_json: Optional validation function for JSON output
            config: Converter options used by the default configuration validation
        """
        self._config = config
        self._validate_conf = validate_conf or self._default_validate_conf
        self._validate_json = validate_json or self._default_validate_json

    def write(
        self,
        path: Path,
        content: str,
        fmt: str,
        validate: bool = True,
    ) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            fmt: Content format for validation ("conf" or "json")
            validate: Whether to validate before finalizing

        Raises:
            MalformedInputError: If validation fails
            OSError: If file operations fail
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory ensures atomic rename on the same filesystem
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
                self.validate(content, fmt)

            temp_path.replace(path)
            logger.debug("Wrote %d characters to %s", len(content), path)

        except Exception:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    pass  # Best effort cleanup
            raise

    def write_if_not_exists(
        self,
        path: Path,
        content: str,
        fmt: str,
        validate: bool = True,
    ) -> bool:
        """Write content only if the file doesn't exist.

        Returns:
            True if file was written

        Raises:
            FileExistsError: If the file already exists
            MalformedInputError: If validation fails
        """
        if Path(path).exists():
            raise FileExistsError(f"Output file already exists: {path}. Use force mode to overwrite.")

        self.write(path, content, fmt, validate)
        return True

    def validate(self, content: str, fmt: str) -> None:
        """Validate content for its format without writing it."""
        if fmt == "conf":
            self._validate_conf(content)
        elif fmt == "json":
            self._validate_json(content)
        else:
            # Unknown format, skip validation
            pass

    def _default_validate_conf(self, content: str) -> None:
        """Default configuration validation: the text must parse back into a tree.

        Raises:
            MalformedInputError: If validation fails
        """
        try:
            ConfParser(self._config).parse(content, source="<generated>")
        except NginxConfError as e:
            raise MalformedInputError(f"Generated configuration is not valid: {e}") from e

    def _default_validate_json(self, content: str) -> None:
        """Default JSON validation.

        Raises:
            MalformedInputError: If validation fails
        """
        try:
            json.loads(content)
        except json.JSONDecodeError as e:
            raise MalformedInputError(f"Generated JSON is not valid: {e}") from e
