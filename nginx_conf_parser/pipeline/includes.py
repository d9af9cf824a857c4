"""
Include resolvers.

The parser hands every ``include`` directive to a resolver and merges the
returned fragments into the tree at the include's position. A resolver
returns ``(identifier, text)`` pairs in the order they should be merged;
an empty result means the pattern matched nothing.
"""

from __future__ import annotations

import glob
import logging
from abc import ABC, abstractmethod
from fnmatch import fnmatchcase
from pathlib import Path

logger = logging.getLogger(__name__)


def unquote(pattern: str) -> str:
    """Strip one pair of matching surrounding quotes."""
    pattern = pattern.strip()
    if len(pattern) >= 2 and pattern[0] == pattern[-1] and pattern[0] in ("'", '"'):
        return pattern[1:-1]
    return pattern


class IncludeResolver(ABC):
    """Abstract base class for include resolution."""

    @abstractmethod
    def resolve(self, pattern: str, base: str) -> list[tuple[str, str]]:
        """Resolve an include pattern.

        Args:
            pattern: The include directive's argument (may be quoted, may contain wildcards)
            base: Location relative patterns are resolved against

        Returns:
            Ordered list of (identifier, raw text) pairs; empty when nothing matched
        """
        pass


class GlobIncludeResolver(IncludeResolver):
    """Resolves include patterns against the filesystem with glob expansion."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        self._file_cache: dict[str, str] = {}

    def resolve(self, pattern: str, base: str) -> list[tuple[str, str]]:
        base_dir = Path(base) if base else Path.cwd()
        # An absolute pattern replaces the base when joined
        search = base_dir / unquote(pattern)

        matches = sorted(p for p in glob.glob(str(search)) if Path(p).is_file())
        logger.debug("Include %r matched %d file(s) in %s", pattern, len(matches), base_dir)

        fragments = []
        for match in matches:
            if match not in self._file_cache:
                with open(match, encoding=self.encoding) as f:
                    self._file_cache[match] = f.read()
            fragments.append((match, self._file_cache[match]))
        return fragments


class MappingIncludeResolver(IncludeResolver):
    """Resolves include patterns against an in-memory mapping of name to text.

    Patterns are matched with shell-style wildcards against the mapping
    keys; matches are returned in sorted key order. *base* is ignored.
    """

    def __init__(self, files: dict[str, str]):
        self.files = dict(files)

    def resolve(self, pattern: str, base: str) -> list[tuple[str, str]]:
        pattern = unquote(pattern)
        return [(name, self.files[name]) for name in sorted(self.files) if fnmatchcase(name, pattern)]
