"""
Configuration for the conversion pipeline.

Parsing, serialization and output options, loadable from a JSON
dictionary for the command line.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class OutputMode(str, Enum):
    """Output mode for file writing.

    Controls behavior when the output file already exists.
    """

    ERROR_IF_EXISTS = "error"  # Default: raise error if file exists
    FORCE = "force"  # Overwrite the existing file


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        mode: How to handle existing output files
        validate_before_write: Whether to re-parse configuration text before writing it
        atomic_write: Whether to use atomic file writes
    """

    mode: OutputMode = OutputMode.ERROR_IF_EXISTS
    validate_before_write: bool = True
    atomic_write: bool = True


@dataclass
class ConverterConfig:
    """Configuration options for parsing and serialization."""

    # Resolve include directives when reading files
    parse_includes: bool = True

    # Root directory for relative include patterns (empty = directory of the top-level file)
    includes_root: str = ""

    # Skip include directives that match no files instead of raising
    ignore_include_errors: bool = False

    # Directive name that pulls in other files
    include_keyword: str = "include"

    # Blocks whose name ends with this suffix are captured verbatim
    verbatim_suffix: str = "by_lua_block"

    # Spaces per nesting level in generated text
    indent_width: int = 4

    # Spaces between the longest key of a block and its values
    key_padding: int = 4

    # Add generation comment at top of generated configuration text
    add_generation_comment: bool = False

    # Output configuration
    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> ConverterConfig:
        """Create a config from a dictionary."""
        config = ConverterConfig()
        for k, v in d.items():
            if k == "output" and isinstance(v, dict):
                mode = v.get("mode", OutputMode.ERROR_IF_EXISTS)
                if isinstance(mode, str):
                    mode = OutputMode(mode)
                config.output = OutputConfig(
                    mode=mode,
                    validate_before_write=v.get("validate_before_write", True),
                    atomic_write=v.get("atomic_write", True),
                )
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "parse_includes": self.parse_includes,
            "includes_root": self.includes_root,
            "ignore_include_errors": self.ignore_include_errors,
            "include_keyword": self.include_keyword,
            "verbatim_suffix": self.verbatim_suffix,
            "indent_width": self.indent_width,
            "key_padding": self.key_padding,
            "add_generation_comment": self.add_generation_comment,
            "output": {
                "mode": self.output.mode.value,
                "validate_before_write": self.output.validate_before_write,
                "atomic_write": self.output.atomic_write,
            },
        }
