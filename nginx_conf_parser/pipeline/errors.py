"""
Error types raised by the conversion pipeline.

All errors are recoverable values for the caller; the pipeline never retries.
"""

from __future__ import annotations


class NginxConfError(Exception):
    """Base class for all conversion errors.

    Attributes:
        line: Physical line number (1-based) where the problem was detected
        source: Identifier of the text being parsed (usually a file path)
    """

    def __init__(self, message: str, line: int | None = None, source: str | None = None):
        self.message = message
        self.line = line
        self.source = source
        super().__init__(self._format())

    def locate(self, line: int | None, source: str | None) -> NginxConfError:
        """Fill in a missing location and refresh the message."""
        if self.line is None:
            self.line = line
        if self.source is None:
            self.source = source
        self.args = (self._format(),)
        return self

    def _format(self) -> str:
        location = ""
        if self.source:
            location = self.source
        if self.line is not None:
            location = f"{location}:{self.line}" if location else f"line {self.line}"
        return f"{location}: {self.message}" if location else self.message


class StructuralConflictError(NginxConfError):
    """Raised when a value cannot be stored at its path.

    This can happen when:
    - A prefix of the path already holds a directive value instead of a block
    - A directive and a block share the same key at the same nesting level
    """

    pass


class UnresolvedIncludeError(NginxConfError):
    """Raised when an include pattern matches no sources."""

    def __init__(self, pattern: str, searched_in: str = "", line: int | None = None, source: str | None = None):
        self.pattern = pattern
        self.searched_in = searched_in
        message = f'Unable to resolve include statement: "{pattern}"'
        if searched_in:
            message += f". Searched in {searched_in}"
        super().__init__(message, line=line, source=source)


class MalformedInputError(NginxConfError):
    """Raised when the input text cannot be turned into a tree.

    Covers unterminated statements, unterminated verbatim blocks,
    unexpected closing braces and blocks left open at end of input.
    """

    pass
