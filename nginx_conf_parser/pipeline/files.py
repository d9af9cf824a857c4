"""
High-level entry points: parse and generate text, read and write files.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .config import ConverterConfig, OutputMode
from .convert import from_python
from .includes import GlobIncludeResolver, IncludeResolver
from .parser import ConfParser
from .serializer import ConfSerializer
from .tree import Block
from .writer import AtomicWriter

logger = logging.getLogger(__name__)


def loads(
    text: str | bytes,
    config: ConverterConfig | None = None,
    resolver: IncludeResolver | None = None,
    source: str | None = None,
    base: str = "",
) -> Block:
    """Parse configuration text into a tree.

    Include directives are only resolved when a *resolver* is given.
    """
    return ConfParser(config, resolver, base).parse(text, source=source)


def _as_block(tree: Block | dict) -> Block:
    if isinstance(tree, Block):
        return tree
    block = from_python(tree)
    if not isinstance(block, Block):
        raise TypeError("A configuration document must be a mapping")
    return block


def dumps(tree: Block | dict, config: ConverterConfig | None = None, header: str | None = None) -> str:
    """Generate configuration text from a tree or from plain dict data."""
    return ConfSerializer(config).serialize(_as_block(tree), header=header)


def convert(value: Any, config: ConverterConfig | None = None) -> Block | str:
    """Convert in whichever direction *value* calls for.

    Text (str or bytes) is parsed into a tree; a tree or dict is turned
    into configuration text.

    Raises:
        TypeError: If *value* is neither text nor a tree
    """
    if isinstance(value, (str, bytes)):
        return loads(value, config)
    if isinstance(value, (Block, dict)):
        return dumps(value, config)
    raise TypeError(f'Expected configuration text or a tree, but got "{type(value).__name__}"')


def read_config_file(path: str | Path, config: ConverterConfig | None = None) -> Block:
    """Read and parse a configuration file.

    Includes are resolved against ``config.includes_root`` or, when that is
    empty, the directory of *path*; nested includes use the same root.

    Raises:
        FileNotFoundError: If *path* is not a regular file
    """
    config = config or ConverterConfig()
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"File does not exist: {path}")

    resolver = GlobIncludeResolver() if config.parse_includes else None
    base = config.includes_root or str(path.parent)

    logger.debug("Reading %s (includes %s)", path, "resolved" if resolver else "kept")
    return loads(path.read_bytes(), config, resolver, source=str(path), base=base)


def write_config_file(
    path: str | Path,
    tree: Block | dict,
    overwrite: bool = False,
    config: ConverterConfig | None = None,
    header: str | None = None,
) -> None:
    """Generate configuration text and write it to *path*.

    Raises:
        FileExistsError: If the file exists and neither *overwrite* nor force mode is set
        MalformedInputError: If the generated text does not parse back
    """
    config = config or ConverterConfig()
    path = Path(path)
    content = dumps(tree, config, header=header)
    write_output(path, content, "conf", config, overwrite)


def write_output(path: Path, content: str, fmt: str, config: ConverterConfig, overwrite: bool = False) -> None:
    """Write generated output honoring the output configuration."""
    output = config.output
    force = overwrite or output.mode == OutputMode.FORCE

    if not force and path.exists():
        raise FileExistsError(f"File already exists: {path}. To overwrite, set overwrite=True or use force mode.")

    if output.atomic_write:
        AtomicWriter(config=config).write(path, content, fmt, validate=output.validate_before_write)
    else:
        if output.validate_before_write:
            AtomicWriter(config=config).validate(content, fmt)
        path.write_text(content, encoding="utf-8")
