"""
Pipeline - nginx configuration text to tree and back.

This module provides the conversion engine in separate phases:

1. Tokenizer: Split physical lines into logical statements
2. Parser: Place statements in a value tree, promoting repeated keys
3. Serializer: Convert the tree back to aligned configuration text
4. Writer: Optionally validate and write output atomically
"""

from __future__ import annotations

from .config import ConverterConfig, OutputConfig, OutputMode
from .convert import from_python, to_python
from .errors import MalformedInputError, NginxConfError, StructuralConflictError, UnresolvedIncludeError
from .files import convert, dumps, loads, read_config_file, write_config_file, write_output
from .includes import GlobIncludeResolver, IncludeResolver, MappingIncludeResolver
from .merge import append_value
from .parser import ConfParser
from .paths import decode_path, encode_path
from .serializer import ConfSerializer
from .tokenizer import CloseBlock, Directive, OpenBlock, Tokenizer
from .tree import RAW_KEY, Block, Collection, ConfigValue, Scalar, VerbatimLines, get_value, set_value
from .writer import AtomicWriter

__all__ = [
    "ConfParser",
    "ConfSerializer",
    "ConverterConfig",
    "OutputConfig",
    "OutputMode",
    "Tokenizer",
    "OpenBlock",
    "Directive",
    "CloseBlock",
    "Block",
    "Collection",
    "ConfigValue",
    "Scalar",
    "VerbatimLines",
    "RAW_KEY",
    "get_value",
    "set_value",
    "append_value",
    "encode_path",
    "decode_path",
    "to_python",
    "from_python",
    "loads",
    "dumps",
    "convert",
    "read_config_file",
    "write_config_file",
    "write_output",
    "IncludeResolver",
    "GlobIncludeResolver",
    "MappingIncludeResolver",
    "AtomicWriter",
    "NginxConfError",
    "StructuralConflictError",
    "UnresolvedIncludeError",
    "MalformedInputError",
]
