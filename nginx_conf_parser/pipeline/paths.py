"""
Path addressing for the configuration tree.

A path is a tuple of segments: string keys into blocks and integer
indices into collections. Paths can be encoded into a single dotted
string for display and command-line use. Keys may contain any
character, so the encoding escapes the separator:

    ("server", 0, "location /a.b")  <->  "server.\\#0.location /a\\.b"

- ``\\`` is written as ``\\\\`` and ``.`` as ``\\.`` inside a key
- an integer index is written as ``\\#<digits>``
- the empty key is written as ``\\0``
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Union

SEPARATOR = "."
ESCAPE = "\\"
INDEX_MARKER = ESCAPE + "#"
EMPTY_KEY = ESCAPE + "0"

Segment = Union[str, int]
Path = tuple[Segment, ...]
PathLike = Union[Path, Sequence[Segment], str]


def encode_key(key: str) -> str:
    """Escape a single key so it can be joined with the separator."""
    if key == "":
        return EMPTY_KEY
    return key.replace(ESCAPE, ESCAPE + ESCAPE).replace(SEPARATOR, ESCAPE + SEPARATOR)


def encode_path(segments: Sequence[Segment]) -> str:
    """Encode a sequence of keys and indices into a path token.

    Args:
        segments: Keys (str) and collection indices (non-negative int)

    Returns:
        Encoded path string; the empty path encodes to ""

    Raises:
        ValueError: If an index is negative
        TypeError: If a segment is neither str nor int
    """
    parts: list[str] = []
    for segment in segments:
        if isinstance(segment, bool):
            raise TypeError(f"Invalid path segment: {segment!r}")
        if isinstance(segment, int):
            if segment < 0:
                raise ValueError(f"Collection index must be non-negative: {segment}")
            parts.append(f"{INDEX_MARKER}{segment}")
        elif isinstance(segment, str):
            parts.append(encode_key(segment))
        else:
            raise TypeError(f"Invalid path segment: {segment!r}")
    return SEPARATOR.join(parts)


def _split_raw(token: str) -> list[str]:
    """Split a token on separators that are not escaped."""
    raw_segments: list[str] = []
    current: list[str] = []
    i = 0
    while i < len(token):
        char = token[i]
        if char == ESCAPE:
            if i + 1 >= len(token):
                raise ValueError(f"Dangling escape at end of path: {token!r}")
            current.append(token[i : i + 2])
            i += 2
        elif char == SEPARATOR:
            raw_segments.append("".join(current))
            current = []
            i += 1
        else:
            current.append(char)
            i += 1
    raw_segments.append("".join(current))
    return raw_segments


def _decode_segment(raw: str, token: str) -> Segment:
    if raw == EMPTY_KEY:
        return ""
    if raw.startswith(INDEX_MARKER):
        digits = raw[len(INDEX_MARKER) :]
        if not digits.isdigit():
            raise ValueError(f"Invalid collection index {raw!r} in path {token!r}")
        return int(digits)
    if raw == "":
        raise ValueError(f"Empty segment in path {token!r}")

    chars: list[str] = []
    i = 0
    while i < len(raw):
        char = raw[i]
        if char == ESCAPE:
            escaped = raw[i + 1]
            if escaped not in (ESCAPE, SEPARATOR):
                raise ValueError(f"Unknown escape {ESCAPE}{escaped} in path {token!r}")
            chars.append(escaped)
            i += 2
        else:
            chars.append(char)
            i += 1
    return "".join(chars)


def decode_path(token: str) -> Path:
    """Decode a path token produced by :func:`encode_path`.

    Raises:
        ValueError: If the token is not a valid encoding
    """
    if token == "":
        return ()
    return tuple(_decode_segment(raw, token) for raw in _split_raw(token))


def as_path(path: PathLike) -> Path:
    """Normalize a path given either as a token or as a sequence of segments."""
    if isinstance(path, str):
        return decode_path(path)
    return tuple(path)
