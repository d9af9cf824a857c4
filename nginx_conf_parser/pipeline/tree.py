"""
Tree value model for parsed configuration.

A parsed document is a ``Block`` whose children are one of four
value kinds:

- ``Scalar``: the argument text of a directive
- ``Block``: an ordered mapping for a ``{ ... }`` body
- ``Collection``: two or more values that share a key
- ``VerbatimLines``: the raw body of a verbatim block, stored under ``_raw``
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from .paths import PathLike, as_path

RAW_KEY = "_raw"


@dataclass
class Scalar:
    """A directive argument, semicolon stripped."""

    text: str = ""


@dataclass
class Block:
    """An ordered mapping from key to child value."""

    children: dict[str, ConfigValue] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.children)

    def __contains__(self, key: object) -> bool:
        return key in self.children

    def __getitem__(self, key: str) -> ConfigValue:
        return self.children[key]

    def keys(self):
        return self.children.keys()

    def items(self):
        return self.children.items()

    def get(self, path: PathLike) -> ConfigValue | None:
        """Look up a descendant by path (see :func:`get_value`)."""
        return get_value(self, path)

    def set(self, path: PathLike, value: ConfigValue) -> bool:
        """Store a descendant by path (see :func:`set_value`)."""
        return set_value(self, path, value)


@dataclass
class Collection:
    """Values that share one key, in encounter order."""

    items: list[ConfigValue] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> ConfigValue:
        return self.items[index]


@dataclass
class VerbatimLines:
    """Raw lines captured from a verbatim block body."""

    lines: list[str] = field(default_factory=list)


ConfigValue = Union[Scalar, Block, Collection, VerbatimLines]


def _child(node: ConfigValue, segment) -> ConfigValue | None:
    """Return the child of *node* addressed by *segment*, or None."""
    if isinstance(node, Block):
        if isinstance(segment, str):
            return node.children.get(segment)
        return None
    if isinstance(node, Collection):
        if isinstance(segment, int) and not isinstance(segment, bool) and 0 <= segment < len(node.items):
            return node.items[segment]
        return None
    # Scalars and verbatim lines have no children
    return None


def get_value(tree: ConfigValue, path: PathLike) -> ConfigValue | None:
    """Retrieve the value at *path*.

    Args:
        tree: The root value to search
        path: Path tuple or encoded path string

    Returns:
        The value found, or None if any segment is missing. The empty
        path returns *tree* itself. Never creates nodes.
    """
    node: ConfigValue | None = tree
    for segment in as_path(path):
        node = _child(node, segment)
        if node is None:
            return None
    return node


def set_value(tree: ConfigValue, path: PathLike, value: ConfigValue) -> bool:
    """Store *value* at *path*, creating intermediate blocks as needed.

    Args:
        tree: The root value to update
        path: Path tuple or encoded path string
        value: The value to store

    Returns:
        Whether the value was stored. False signals a structural
        conflict: an intermediate segment is not a container, a segment
        does not fit its container (key into a collection, index into a
        block or out of range), or the path is empty.
    """
    segments = as_path(path)
    if not segments:
        return False

    node: ConfigValue = tree
    for segment in segments[:-1]:
        child = _child(node, segment)
        if child is None:
            if isinstance(node, Block) and isinstance(segment, str):
                child = Block()
                node.children[segment] = child
            else:
                return False
        node = child

    last = segments[-1]
    if isinstance(node, Block) and isinstance(last, str):
        node.children[last] = value
        return True
    if isinstance(node, Collection) and isinstance(last, int) and not isinstance(last, bool) and 0 <= last < len(node.items):
        node.items[last] = value
        return True
    return False
