"""
Conversion between value trees and plain Python data.

The plain form is what ``json.dump`` writes: blocks become dicts,
collections become lists, directive arguments become strings and a
verbatim body becomes a list of lines under ``_raw``.
"""

from __future__ import annotations

from typing import Any

from .tree import RAW_KEY, Block, Collection, ConfigValue, Scalar, VerbatimLines


def to_python(value: ConfigValue) -> Any:
    """Convert a value tree to plain dicts, lists and strings."""
    if isinstance(value, Scalar):
        return value.text
    if isinstance(value, Block):
        return {key: to_python(child) for key, child in value.items()}
    if isinstance(value, Collection):
        return [to_python(item) for item in value.items]
    if isinstance(value, VerbatimLines):
        return list(value.lines)
    raise TypeError(f"Not a configuration value: {value!r}")


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "on" if value else "off"
    return str(value)


def from_python(data: Any, key: str | None = None) -> ConfigValue:
    """Convert plain data to a value tree.

    Args:
        data: A dict, list, string, number or boolean
        key: The key *data* is stored under (selects verbatim lines for ``_raw``)

    Returns:
        The equivalent configuration value

    Raises:
        ValueError: If a list is empty or contains nested lists
        TypeError: If a value has an unsupported type
    """
    if isinstance(data, dict):
        return Block({str(k): from_python(v, str(k)) for k, v in data.items()})

    if isinstance(data, (list, tuple)):
        if key == RAW_KEY:
            return VerbatimLines([_scalar_text(line) for line in data])
        if not data:
            raise ValueError(f"Empty list under '{key}' cannot be represented")
        items = []
        for item in data:
            if isinstance(item, (list, tuple)):
                raise ValueError(f"Nested list under '{key}' cannot be represented")
            items.append(from_python(item, key))
        if len(items) == 1:
            return items[0]
        if len({type(item) for item in items}) > 1:
            raise ValueError(f"List under '{key}' mixes directives and blocks")
        return Collection(items)

    if isinstance(data, (str, int, float)):
        return Scalar(_scalar_text(data))

    raise TypeError(f"Cannot convert {type(data).__name__} under '{key}' to a configuration value")
