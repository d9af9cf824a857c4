"""
Array promotion for repeated keys.

Every write made while building a tree goes through :func:`append_value`.
The first value stored under a key is kept as is; the second turns the
entry into a ``Collection`` holding both, and later values are appended.
"""

from __future__ import annotations

from .errors import StructuralConflictError
from .paths import PathLike, as_path, encode_path
from .tree import Block, Collection, ConfigValue, Scalar, VerbatimLines, get_value, set_value


def _kind(value: ConfigValue) -> type:
    """Return the element kind of a value (collections report their items' kind)."""
    if isinstance(value, Collection):
        return type(value.items[0]) if value.items else Collection
    return type(value)


_KIND_NAMES = {Scalar: "directive", Block: "block", VerbatimLines: "verbatim body"}


def _check_compatible(existing: ConfigValue, new_value: ConfigValue, path: PathLike) -> None:
    """Collections hold values of one kind only."""
    existing_kind = _kind(existing)
    new_kind = _kind(new_value)
    if existing_kind is not new_kind:
        raise StructuralConflictError(
            f"Key '{encode_path(as_path(path))}' is used both as a "
            f"{_KIND_NAMES.get(existing_kind, existing_kind.__name__)} and as a "
            f"{_KIND_NAMES.get(new_kind, new_kind.__name__)}"
        )


def append_value(tree: Block, path: PathLike, value: ConfigValue) -> bool:
    """Write *value* at *path*, promoting repeated keys to a collection.

    Args:
        tree: The root block being built
        path: Target path (tuple or encoded string)
        value: Value to store; a ``Collection`` arriving from an include
            merge is concatenated rather than nested

    Returns:
        True if the target now holds a collection that received the value,
        False if the value was stored directly.

    Raises:
        StructuralConflictError: If the value cannot be stored at *path*,
            or a directive and a block would share the key
    """
    path = as_path(path)
    existing = get_value(tree, path)

    if existing is None:
        if not set_value(tree, path, value):
            raise StructuralConflictError(f"Cannot store a value at '{encode_path(path)}': a parent is not a block")
        return False

    if isinstance(existing, VerbatimLines) and isinstance(value, VerbatimLines):
        existing.lines.extend(value.lines)
        return False

    _check_compatible(existing, value, path)

    new_items = value.items if isinstance(value, Collection) else [value]
    if isinstance(existing, Collection):
        existing.items.extend(new_items)
        return True

    if not set_value(tree, path, Collection([existing, *new_items])):
        raise StructuralConflictError(f"Cannot store a value at '{encode_path(path)}'")
    return True
