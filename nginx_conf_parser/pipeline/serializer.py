"""
Configuration serializer.

Converts a value tree back to configuration text:
- 4-space indentation per nesting level
- values of sibling directives start at a common column
- a blank line after every closing brace
- repeated keys emit one statement or block per collection item
"""

from __future__ import annotations

from .config import ConverterConfig
from .tree import RAW_KEY, Block, Collection, ConfigValue, Scalar, VerbatimLines


class ConfSerializer:
    """Serializes a ``Block`` tree to configuration text."""

    def __init__(self, config: ConverterConfig | None = None):
        self.config = config or ConverterConfig()
        self.indent = " " * self.config.indent_width

    def serialize(self, tree: Block, header: str | None = None) -> str:
        """Serialize a document.

        Args:
            tree: Root block of the document
            header: Optional comment text written above the document, one ``#`` line per line

        Returns:
            Configuration text
        """
        parts: list[str] = []
        if header:
            parts.extend(f"# {line}".rstrip() + "\n" for line in header.splitlines())
            parts.append("\n")
        parts.extend(self._serialize_block(tree, 0))
        return "".join(parts)

    def _serialize_block(self, block: Block, depth: int) -> list[str]:
        """Serialize the children of a block at the given depth."""
        indent = self.indent * depth
        longest = max([1, *(len(key) for key in block.keys())])
        pad = longest + self.config.key_padding

        parts: list[str] = []
        for key, value in block.items():
            parts.extend(self._serialize_entry(key, value, indent, pad, depth))
        return parts

    def _serialize_entry(self, key: str, value: ConfigValue, indent: str, pad: int, depth: int) -> list[str]:
        if isinstance(value, Scalar):
            return [self._serialize_scalar(key, value, indent, pad)]

        if isinstance(value, Block):
            return [
                f"{indent}{key} {{\n",
                *self._serialize_block(value, depth + 1),
                f"{indent}}}\n\n",
            ]

        if isinstance(value, Collection):
            parts: list[str] = []
            for item in value.items:
                if isinstance(item, Collection):
                    raise ValueError(f"Collection under '{key}' contains a nested collection")
                parts.extend(self._serialize_entry(key, item, indent, pad, depth))
            return parts

        if isinstance(value, VerbatimLines):
            if key != RAW_KEY:
                raise ValueError(f"Verbatim lines must be stored under '{RAW_KEY}', found under '{key}'")
            return [f"{indent}{line}\n" for line in value.lines]

        raise TypeError(f"Cannot serialize value of type {type(value).__name__} under '{key}'")

    def _serialize_scalar(self, key: str, value: Scalar, indent: str, pad: int) -> str:
        if not value.text:
            return f"{indent}{key};\n"
        spacing = " " * (pad - len(key))
        return f"{indent}{key}{spacing}{value.text};\n"
