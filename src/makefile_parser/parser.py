"""Makefile parser: line joining, classification and include resolution."""

import logging
import os
import re
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from .errors import (
    AmbiguousLineError,
    CollaboratorIOError,
    CyclicIncludeError,
    IncludeWithoutFilenameError,
    MakefileParseError,
    UnhandledLineError,
)
from .matchers import MATCHERS, find_matches
from .options import ParseOptions
from .tokens import Include, ParseResult, Token

logger = logging.getLogger(__name__)

Loader = Callable[[str], str]

_CONTINUATION_RE = re.compile(r"\\\n[^\S\n]*")


def read_file(path: str) -> str:
    """Default loader: read ``path`` as UTF-8 text."""
    return Path(path).read_text(encoding="utf-8")


def join_lines(text: str) -> List[str]:
    """Split Makefile text into logical lines.

    A backslash at the end of a physical line is removed together with the
    newline and the indentation of the next line, so ``foo\\`` followed by
    ``  bar`` gives ``foobar``.
    """
    text = text.replace("\r\n", "\n")
    return _CONTINUATION_RE.sub("", text).split("\n")


class ParseContext:
    """Mutable state of one parse pass over a single file or string."""

    def __init__(
        self,
        options: ParseOptions,
        loader: Loader,
        path: Optional[str] = None,
        chain: Tuple[str, ...] = (),
    ) -> None:
        self.ast: List[Token] = []
        self.phony: List[str] = []
        self.unhandled: List[str] = []
        self.options = options
        self.loader = loader
        self.path = path
        # Absolute paths of the files currently being parsed, outermost first.
        self.chain = chain
        # Tokens before this index came from an include and cannot be extended.
        self.boundary = 0

    @property
    def last(self) -> Optional[Token]:
        if len(self.ast) <= self.boundary:
            return None
        return self.ast[-1]

    def feed(self, line: str) -> None:
        """Classify one logical line and run its handler."""
        found = find_matches(self, line, MATCHERS)
        if not found:
            self._skip(f"UNHANDLED: '{line}'", UnhandledLineError(line, self.path))
        elif len(found) > 1:
            names = [matcher.name for matcher, _ in found]
            self._skip(
                f"AMBIGUOUS: ({', '.join(names)}) '{line}'",
                AmbiguousLineError(line, names, self.path),
            )
        else:
            matcher, match = found[0]
            matcher.handler(self, match)

    def _skip(self, message: str, error: MakefileParseError) -> None:
        if self.options.strict:
            raise error
        if self.path:
            message = f"{self.path}: {message}"
        if self.options.unhandled:
            self.unhandled.append(message)
        else:
            logger.warning(message)

    def resolve_include(self, token: Include) -> None:
        """Parse the file named by ``token`` and splice it in after the token."""
        if self.options.ignore_includes:
            return
        if self.path is None:
            raise IncludeWithoutFilenameError(token.path)
        include_path = os.path.join(os.path.dirname(self.path), token.path)
        logger.debug("including %s from %s", include_path, self.path)
        child = _parse_file(include_path, self.options, self.loader, self.chain)
        self.ast.extend(child.ast)
        self.phony.extend(child.phony)
        self.unhandled.extend(child.unhandled)
        self.boundary = len(self.ast)

    def result(self) -> ParseResult:
        return ParseResult(ast=self.ast, phony=self.phony, unhandled=self.unhandled)


def _parse_text(
    text: str,
    options: ParseOptions,
    loader: Loader,
    path: Optional[str],
    chain: Tuple[str, ...],
) -> ParseResult:
    ctx = ParseContext(options, loader, path=path, chain=chain)
    for line in join_lines(text):
        ctx.feed(line)
    return ctx.result()


def _parse_file(
    path: str,
    options: ParseOptions,
    loader: Loader,
    chain: Tuple[str, ...],
) -> ParseResult:
    key = os.path.abspath(path)
    if key in chain:
        raise CyclicIncludeError([*chain, key])
    try:
        text = loader(path)
    except OSError as e:
        raise CollaboratorIOError(path, e.strerror or str(e)) from e
    except UnicodeDecodeError as e:
        raise CollaboratorIOError(path, str(e)) from e
    return _parse_text(text, options, loader, path, (*chain, key))


def parse_makefile(
    source: Union[str, "os.PathLike[str]"],
    options: Optional[ParseOptions] = None,
    loader: Optional[Loader] = None,
    **overrides: bool,
) -> ParseResult:
    """Parse a Makefile into tokens and phony names.

    Args:
        source: Makefile text, or a path when ``options.isfilename`` is set.
            Path objects are always read as files.
        options: Parser options; keyword ``overrides`` (e.g. ``strict=True``)
            are applied on top of them.
        loader: Callable returning the text of a path. Used for the source
            file and for every included file. Defaults to :func:`read_file`.

    Returns:
        ParseResult with the ordered tokens, the phony names and, when the
        ``unhandled`` option is on, the diagnostics for skipped lines.

    Raises:
        UnhandledLineError: strict mode, a line matched no matcher.
        AmbiguousLineError: strict mode, a line matched several matchers.
        IncludeWithoutFilenameError: an include was found in plain text.
        CyclicIncludeError: a file ended up including itself.
        CollaboratorIOError: the loader could not read a file.
    """
    if options is None:
        options = ParseOptions(**overrides)
    elif overrides:
        options = ParseOptions.model_validate({**options.model_dump(), **overrides})
    if isinstance(source, os.PathLike):
        source = os.fspath(source)
        options = options.model_copy(update={"isfilename": True})
    loader = loader or read_file

    if options.isfilename:
        return _parse_file(source, options, loader, ())
    return _parse_text(source, options, loader, None, ())
