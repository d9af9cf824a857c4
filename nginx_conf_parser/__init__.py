"""nginx configuration to JSON and back

A Python package for converting nginx-style configuration text into an
order-preserving tree and generating configuration text from it.
Supports repeated directives and blocks, include resolution and
verbatim Lua blocks.
"""

__version__ = "0.1.0"

from .pipeline import (
    AtomicWriter,
    Block,
    Collection,
    ConfParser,
    ConfSerializer,
    ConverterConfig,
    MalformedInputError,
    NginxConfError,
    OutputConfig,
    OutputMode,
    Scalar,
    StructuralConflictError,
    UnresolvedIncludeError,
    VerbatimLines,
    convert,
    dumps,
    from_python,
    loads,
    read_config_file,
    to_python,
    write_config_file,
)

__all__ = [
    "ConfParser",
    "ConfSerializer",
    "ConverterConfig",
    "OutputConfig",
    "OutputMode",
    "Block",
    "Collection",
    "Scalar",
    "VerbatimLines",
    "loads",
    "dumps",
    "convert",
    "read_config_file",
    "write_config_file",
    "to_python",
    "from_python",
    "AtomicWriter",
    "NginxConfError",
    "StructuralConflictError",
    "UnresolvedIncludeError",
    "MalformedInputError",
]
