"""Token types produced by the Makefile parser."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class EmptyLine:
    """A blank line, or a ``#`` line without any text."""

    def to_dict(self) -> Dict[str, Any]:
        return {"emptyLine": True}


@dataclass
class Comment:
    """A block of consecutive ``# text`` lines not attached to anything."""

    lines: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"comment": list(self.lines)}


@dataclass
class Target:
    """A rule header with its dependencies and recipe lines."""

    name: str
    deps: List[str] = field(default_factory=list)
    recipe: List[str] = field(default_factory=list)
    comment: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "target": self.name,
            "deps": list(self.deps),
            "recipe": list(self.recipe),
        }
        if self.comment is not None:
            data["comment"] = list(self.comment)
        return data


@dataclass
class Variable:
    """A variable assignment.

    ``operator`` keeps the assignment operator as written (``=``, ``:=``,
    ``?=`` or ``+=``). The parser does not give it any meaning.
    """

    name: str
    value: str
    comment: Optional[List[str]] = None
    operator: str = "="

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "variable": self.name,
            "value": self.value,
            "operator": self.operator,
        }
        if self.comment is not None:
            data["comment"] = list(self.comment)
        return data


@dataclass
class Export:
    """An ``export`` directive.

    A bare ``export`` has no name and exports every variable.
    """

    name: Optional[str] = None
    value: Optional[str] = None

    @property
    def is_global(self) -> bool:
        return self.name is None

    def to_dict(self) -> Dict[str, Any]:
        if self.is_global:
            return {"export": {"global": True}}
        return {"export": {"variable": self.name, "value": self.value}}


@dataclass
class Include:
    """An ``include`` directive. The included tokens follow it in the AST."""

    path: str
    comment: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"include": self.path}
        if self.comment is not None:
            data["comment"] = list(self.comment)
        return data


Token = Union[EmptyLine, Comment, Target, Variable, Export, Include]


@dataclass
class ParseResult:
    """Output of a parse: the token list, phony names and diagnostics.

    ``phony`` keeps duplicates and source order. ``unhandled`` is only
    filled when the parser runs with the ``unhandled`` option.
    """

    ast: List[Token] = field(default_factory=list)
    phony: List[str] = field(default_factory=list)
    unhandled: List[str] = field(default_factory=list)

    @property
    def targets(self) -> List[Target]:
        return [t for t in self.ast if isinstance(t, Target)]

    @property
    def variables(self) -> List[Variable]:
        return [t for t in self.ast if isinstance(t, Variable)]

    @property
    def includes(self) -> List[Include]:
        return [t for t in self.ast if isinstance(t, Include)]

    def find_target(self, name: str) -> Optional[Target]:
        """Return the last target called ``name``, or None."""
        for token in reversed(self.ast):
            if isinstance(token, Target) and token.name == name:
                return token
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "PHONY": list(self.phony),
            "ast": [token.to_dict() for token in self.ast],
            "unhandled": list(self.unhandled),
        }
