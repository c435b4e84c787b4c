"""Exceptions raised by the Makefile parser."""

from typing import Optional, Sequence


class MakefileParseError(Exception):
    """Base class for every error raised while parsing a Makefile."""


class UnhandledLineError(MakefileParseError):
    """No matcher recognized a line."""

    def __init__(self, line: str, path: Optional[str] = None) -> None:
        self.line = line
        self.path = path
        where = f"{path}: " if path else ""
        super().__init__(f"{where}unhandled line: {line!r}")


class AmbiguousLineError(MakefileParseError):
    """More than one matcher recognized a line."""

    def __init__(self, line: str, matchers: Sequence[str], path: Optional[str] = None) -> None:
        self.line = line
        self.matchers = list(matchers)
        self.path = path
        where = f"{path}: " if path else ""
        super().__init__(
            f"{where}ambiguous line ({', '.join(self.matchers)}): {line!r}"
        )


class IncludeWithoutFilenameError(MakefileParseError):
    """An include was found while parsing text that has no source file."""

    def __init__(self, include_path: str) -> None:
        self.include_path = include_path
        super().__init__(
            f"cannot resolve 'include {include_path}' without a source filename "
            "(parse a file, or set ignore_includes)"
        )


class CyclicIncludeError(MakefileParseError):
    """A file includes itself, directly or through other files."""

    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = list(chain)
        super().__init__(f"cyclic include: {' -> '.join(self.chain)}")


class CollaboratorIOError(MakefileParseError):
    """The loader failed to read a Makefile."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"cannot read {path}: {reason}")
