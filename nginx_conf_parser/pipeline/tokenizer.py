"""
Line tokenizer for nginx-style configuration text.

Turns physical lines into logical statements:

1. Blank lines and comment lines are skipped; a trailing comment is cut
   at the first ``#`` on the line. A ``#`` inside a quoted argument is
   cut as well; quoting is not interpreted.
2. Several statements on one line are split apart: around a ``{`` that
   stands as its own word, around a ``}`` that follows a ``;`` or another
   ``}``, and after every ``;``. A quoted ``;`` splits the statement
   too.
3. Pieces that do not end with ``{``, ``;`` or ``}`` are joined with the
   next piece until the statement is complete. Whitespace is collapsed
   when the statement spans several physical lines.
4. The body of a block whose name ends with the verbatim suffix (such as
   ``content_by_lua_block``) is captured line by line without any of the
   above until its closing brace. Braces inside quoted strings and
   ``--`` comments do not count towards the nesting depth.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from .errors import MalformedInputError

COMMENT_MARKER = "#"
OPEN_MARKER = "{"
CLOSE_MARKER = "}"
TERMINATOR = ";"
DEFAULT_VERBATIM_SUFFIX = "by_lua_block"

# An opening brace is structural when it starts the line or follows
# whitespace, so regex quantifiers like {2} and variables like ${var} stay
# intact. A closing brace is structural only after a terminator or another
# closing brace; a quoted "{ ok }" argument is left alone.
_OPEN_RE = re.compile(r"(?:^|(?<=\s))\{")
_CLOSE_RE = re.compile(r"(?:^|(?<=;)|(?<=\}))\s*\}")
_TERMINATOR_RE = re.compile(r";")
_WHITESPACE_RE = re.compile(r"\s+")
# Quoted strings and "--" comments inside a verbatim body do not count
# towards its brace depth.
_QUOTED_RE = re.compile(r"'(?:\\.|[^'\\])*'" r'|"(?:\\.|[^"\\])*"')
_LINE_COMMENT = "--"


@dataclass
class OpenBlock:
    """Start of a named block: ``key {``."""

    key: str
    line: int = 0


@dataclass
class Directive:
    """A single statement: ``key args;``."""

    key: str
    args: str = ""
    line: int = 0


@dataclass
class CloseBlock:
    """End of the innermost block: ``}``.

    For a verbatim block, ``verbatim`` holds the captured body lines.
    """

    line: int = 0
    verbatim: list[str] | None = None


Statement = OpenBlock | Directive | CloseBlock


def split_statements(line: str) -> list[str]:
    """Split one comment-free line into pieces that each hold at most one statement."""
    line = _OPEN_RE.sub("\n{\n", line)
    line = _CLOSE_RE.sub("\n}\n", line)
    line = _TERMINATOR_RE.sub(";\n", line)
    return [piece.strip() for piece in line.split("\n") if piece.strip()]


def strip_comment(line: str) -> str:
    """Cut *line* at the first comment marker."""
    return line.split(COMMENT_MARKER, 1)[0].strip()


@dataclass
class Tokenizer:
    """Stateful tokenizer fed one physical line at a time.

    Usage::

        tokenizer = Tokenizer()
        for number, line in enumerate(text.split("\\n"), 1):
            for statement in tokenizer.feed(line, number):
                ...
        tokenizer.finish()
    """

    verbatim_suffix: str = DEFAULT_VERBATIM_SUFFIX
    source: str | None = None

    in_verbatim: bool = field(default=False, init=False)
    _pending: list[str] = field(default_factory=list, init=False)
    _pending_line: int = field(default=0, init=False)
    _pending_multiline: bool = field(default=False, init=False)
    _verbatim_lines: list[str] = field(default_factory=list, init=False)
    _verbatim_depth: int = field(default=0, init=False)

    def reset(self) -> None:
        self.in_verbatim = False
        self._pending = []
        self._pending_line = 0
        self._pending_multiline = False
        self._verbatim_lines = []
        self._verbatim_depth = 0

    def feed(self, raw_line: str, line_number: int = 0) -> Iterator[Statement]:
        """Consume one physical line and yield the statements it completes."""
        line = raw_line.strip()

        if self.in_verbatim:
            statement = self._feed_verbatim(line, line_number)
            if statement is not None:
                yield statement
            return

        if not line or line.startswith(COMMENT_MARKER):
            return

        pieces = split_statements(strip_comment(line))
        for index, piece in enumerate(pieces):
            if self.in_verbatim:
                # The rest of the line after a verbatim block opens is body text
                statement = self._feed_verbatim(" ".join(pieces[index:]), line_number)
                if statement is not None:
                    yield statement
                return
            statement = self._feed_piece(piece, line_number)
            if statement is not None:
                yield statement

    def finish(self) -> None:
        """Signal end of input.

        Raises:
            MalformedInputError: If a statement or verbatim block is unterminated
        """
        if self.in_verbatim:
            raise MalformedInputError("Unterminated verbatim block", line=self._pending_line, source=self.source)
        if self._pending:
            raise MalformedInputError(
                f"Unterminated statement: '{' '.join(self._pending)}'",
                line=self._pending_line,
                source=self.source,
            )

    def tokenize(self, lines: Iterable[str]) -> Iterator[Statement]:
        """Tokenize a whole document given as physical lines."""
        self.reset()
        for number, raw_line in enumerate(lines, 1):
            yield from self.feed(raw_line, number)
        self.finish()

    def _feed_piece(self, piece: str, line_number: int) -> Statement | None:
        if not self._pending:
            self._pending_line = line_number
            self._pending_multiline = False
        elif line_number != self._pending_line:
            self._pending_multiline = True
        self._pending.append(piece)

        # Spacing is only normalized for statements spanning several physical lines
        if self._pending_multiline:
            text = _WHITESPACE_RE.sub(" ", " ".join(self._pending))
        else:
            text = " ".join(self._pending)
        start_line = self._pending_line

        if text.endswith(OPEN_MARKER):
            self._pending = []
            key = text[: -len(OPEN_MARKER)].strip()
            if not key:
                raise MalformedInputError("Block opened without a name", line=start_line, source=self.source)
            if key.endswith(self.verbatim_suffix):
                self.in_verbatim = True
                self._verbatim_lines = []
                self._verbatim_depth = 0
            return OpenBlock(key=key, line=start_line)

        if text.endswith(TERMINATOR):
            self._pending = []
            body = text[: -len(TERMINATOR)].strip()
            parts = body.split(None, 1)
            if not parts:
                raise MalformedInputError("Empty statement", line=start_line, source=self.source)
            key = parts[0]
            args = parts[1].strip() if len(parts) > 1 else ""
            return Directive(key=key, args=args, line=start_line)

        if text == CLOSE_MARKER:
            self._pending = []
            return CloseBlock(line=line_number)

        if text.endswith(CLOSE_MARKER) and text[-2].isspace():
            self._pending = []
            raise MalformedInputError(
                f"Statement not terminated before '}}': '{text[:-1].strip()}'",
                line=start_line,
                source=self.source,
            )

        # Incomplete: wait for the next piece
        return None

    def _feed_verbatim(self, line: str, line_number: int) -> CloseBlock | None:
        if not line:
            return None

        code = _QUOTED_RE.sub("", line).split(_LINE_COMMENT, 1)[0]
        depth = self._verbatim_depth + code.count(OPEN_MARKER) - code.count(CLOSE_MARKER)
        if line.endswith(CLOSE_MARKER) and depth < 0:
            last = line[: -len(CLOSE_MARKER)].strip()
            if last:
                self._verbatim_lines.append(last)
            lines = self._verbatim_lines
            self.in_verbatim = False
            self._verbatim_lines = []
            self._verbatim_depth = 0
            return CloseBlock(line=line_number, verbatim=lines)

        self._verbatim_depth = depth
        self._verbatim_lines.append(line)
        return None
