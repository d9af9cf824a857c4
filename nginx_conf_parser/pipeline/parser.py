"""
Configuration parser that builds a value tree.

Drives the tokenizer over the input and places every statement at the
current nesting path. Repeated keys are promoted to collections by the
merge engine; when a block opens inside a collection, the element index
is pushed onto the path together with the key so that its children land
in the right element.
"""

from __future__ import annotations

import logging

from .config import ConverterConfig
from .errors import MalformedInputError, NginxConfError, StructuralConflictError, UnresolvedIncludeError
from .includes import IncludeResolver
from .merge import append_value
from .paths import Segment
from .tokenizer import CloseBlock, Directive, OpenBlock, Statement, Tokenizer
from .tree import RAW_KEY, Block, Scalar, VerbatimLines, get_value

logger = logging.getLogger(__name__)


class ConfParser:
    """Parses configuration text into a ``Block`` tree.

    A parser instance may be reused for several documents one after the
    other; all parse state is reset at the start of :meth:`parse`.
    """

    def __init__(
        self,
        config: ConverterConfig | None = None,
        resolver: IncludeResolver | None = None,
        base: str = "",
    ):
        """
        Initialize the parser.

        Args:
            config: Converter options (include keyword, verbatim suffix, include error policy)
            resolver: Include resolver; when None, include directives are kept as plain directives
            base: Location passed to the resolver for relative include patterns
        """
        self.config = config or ConverterConfig()
        self.resolver = resolver
        self.base = base
        self._tree = Block()
        self._path: list[Segment] = []
        # One flag per open block: whether an index was pushed for it
        self._indexed: list[bool] = []
        self._source: str | None = None
        self._tokenizer = Tokenizer(verbatim_suffix=self.config.verbatim_suffix)

    def parse(self, text: str | bytes, source: str | None = None) -> Block:
        """
        Parse configuration text.

        Args:
            text: The configuration text (bytes are decoded as UTF-8)
            source: Identifier used in error messages (e.g., a file path)

        Returns:
            The root Block of the parsed document

        Raises:
            MalformedInputError: If the text is not well formed
            StructuralConflictError: If a key is used incompatibly
            UnresolvedIncludeError: If an include matches nothing and errors are not ignored
        """
        if isinstance(text, bytes):
            text = text.decode("utf-8")

        self._tree = Block()
        self._path = []
        self._indexed = []
        self._source = source
        self._tokenizer.source = source

        for statement in self._tokenizer.tokenize(text.split("\n")):
            try:
                self._apply(statement)
            except NginxConfError as e:
                e.locate(statement.line, source)
                raise

        if self._path:
            raise MalformedInputError(
                f"Unexpected end of input: {len(self._indexed)} block(s) left open",
                line=len(text.split("\n")),
                source=source,
            )

        return self._tree

    def _apply(self, statement: Statement) -> None:
        if isinstance(statement, OpenBlock):
            self._open_block(statement)
        elif isinstance(statement, Directive):
            if statement.key == self.config.include_keyword and self.resolver is not None:
                self._include(statement)
            else:
                append_value(self._tree, (*self._path, statement.key), Scalar(statement.args))
        elif isinstance(statement, CloseBlock):
            self._close_block(statement)
        else:
            raise TypeError(f"Unknown statement: {statement!r}")

    def _open_block(self, statement: OpenBlock) -> None:
        path = (*self._path, statement.key)
        promoted = append_value(self._tree, path, Block())
        self._path.append(statement.key)
        if promoted:
            self._path.append(len(get_value(self._tree, path)) - 1)
        self._indexed.append(promoted)

    def _close_block(self, statement: CloseBlock) -> None:
        if not self._indexed:
            raise MalformedInputError("Unexpected '}'")

        if statement.verbatim is not None:
            append_value(self._tree, (*self._path, RAW_KEY), VerbatimLines(statement.verbatim))

        if self._indexed.pop():
            self._path.pop()
        self._path.pop()

    def _include(self, statement: Directive) -> None:
        pattern = statement.args
        logger.debug("Resolving include %r from %r", pattern, self.base)
        fragments = self.resolver.resolve(pattern, self.base)

        if not fragments:
            if not self.config.ignore_include_errors:
                raise UnresolvedIncludeError(pattern, searched_in=self.base)
            logger.warning("Include %r matched no files in %r; skipping", pattern, self.base or ".")
            return

        for identifier, text in fragments:
            logger.debug("Merging included file %s", identifier)
            sub_parser = ConfParser(self.config, self.resolver, self.base)
            fragment = sub_parser.parse(text, source=identifier)
            for key, value in fragment.items():
                try:
                    append_value(self._tree, (*self._path, key), value)
                except StructuralConflictError as e:
                    raise StructuralConflictError(f"{e.message} (included from {identifier})") from e
