"""Line matchers used to classify logical Makefile lines.

Each matcher pairs a compiled pattern (and, for recipes, a guard on the
parse context) with a handler that mutates the context. The registry is
ordered, but the classifier evaluates every matcher for every line and
only runs a handler when exactly one of them recognized the line.
"""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

from .tokens import Comment, EmptyLine, Export, Include, Target, Token, Variable

if TYPE_CHECKING:
    from .parser import ParseContext

Handler = Callable[["ParseContext", "re.Match[str]"], None]
Guard = Callable[["ParseContext"], bool]

EMPTY_LINE_RE = re.compile(r"^(?:(?:[^\S\t]\s*)?|#\S*)$")
EXPORT_RE = re.compile(r"^export(?:\s+([^=\s]+?)(?:\s*([:?+]?=)\s*(.*))?)?\s*$")
RECIPE_RE = re.compile(r"^\t+(.*)$")
COMMENT_RE = re.compile(r"^# (.*)$")
INCLUDE_RE = re.compile(r"^include\s+(\S.*?)\s*$")
TARGET_RE = re.compile(r"^(\S+)\s*:(?!=)(.*)$")
VARIABLE_RE = re.compile(r"^([^=\s]+?)\s*([:?+]?=)\s*(.*)$")

# A dependency is a run of non-blank characters, where "\ " stays inside it.
_DEPENDENCY_RE = re.compile(r"(?:[^\\\s]|\\ ?)+")


@dataclass(frozen=True)
class Matcher:
    """A named line pattern with the handler that consumes matching lines."""

    name: str
    pattern: "re.Pattern[str]"
    handler: Handler
    guard: Optional[Guard] = None

    def match(self, ctx: "ParseContext", line: str) -> Optional["re.Match[str]"]:
        found = self.pattern.match(line)
        if found is None:
            return None
        if self.guard is not None and not self.guard(ctx):
            return None
        return found


def take_trailing_bare_comment(ast: List[Token], start: int = 0) -> Optional[List[str]]:
    """Pop the bare comment block at the end of ``ast`` and return its lines.

    Returns None, leaving ``ast`` untouched, when the last token is not a
    standalone :class:`Comment` or sits before index ``start``.
    """
    if len(ast) > start and isinstance(ast[-1], Comment):
        return ast.pop().lines
    return None


def split_dependencies(clause: str) -> List[str]:
    """Split a dependency clause on whitespace, keeping escaped spaces."""
    deps = (dep.strip() for dep in _DEPENDENCY_RE.findall(clause.strip()))
    return [dep for dep in deps if dep]


def _last_is_target(ctx: "ParseContext") -> bool:
    return isinstance(ctx.last, Target)


def _handle_empty_line(ctx: "ParseContext", match: "re.Match[str]") -> None:
    ctx.ast.append(EmptyLine())


def _handle_export(ctx: "ParseContext", match: "re.Match[str]") -> None:
    name, operator, value = match.groups()
    if operator is None:
        value = None
    ctx.ast.append(Export(name=name, value=value))


def _handle_recipe(ctx: "ParseContext", match: "re.Match[str]") -> None:
    ctx.ast[-1].recipe.append(match.group(1))


def _handle_comment(ctx: "ParseContext", match: "re.Match[str]") -> None:
    text = match.group(1)
    last = ctx.last
    if isinstance(last, Comment):
        last.lines.append(text)
    else:
        ctx.ast.append(Comment(lines=[text]))


def _handle_include(ctx: "ParseContext", match: "re.Match[str]") -> None:
    comment = take_trailing_bare_comment(ctx.ast, ctx.boundary)
    token = Include(path=match.group(1), comment=comment)
    ctx.ast.append(token)
    ctx.resolve_include(token)


def _handle_target(ctx: "ParseContext", match: "re.Match[str]") -> None:
    name, clause = match.groups()
    deps = split_dependencies(clause)
    if name == ".PHONY":
        ctx.phony.extend(deps)
        return
    comment = take_trailing_bare_comment(ctx.ast, ctx.boundary)
    ctx.ast.append(Target(name=name, deps=deps, recipe=[], comment=comment))


def _handle_variable(ctx: "ParseContext", match: "re.Match[str]") -> None:
    name, operator, value = match.groups()
    comment = take_trailing_bare_comment(ctx.ast, ctx.boundary)
    ctx.ast.append(Variable(name=name, value=value, comment=comment, operator=operator))


MATCHERS: Tuple[Matcher, ...] = (
    Matcher("empty-line", EMPTY_LINE_RE, _handle_empty_line),
    Matcher("export", EXPORT_RE, _handle_export),
    Matcher("recipe", RECIPE_RE, _handle_recipe, guard=_last_is_target),
    Matcher("comment", COMMENT_RE, _handle_comment),
    Matcher("include", INCLUDE_RE, _handle_include),
    Matcher("target", TARGET_RE, _handle_target),
    Matcher("variable", VARIABLE_RE, _handle_variable),
)


def find_matches(
    ctx: "ParseContext", line: str, matchers: Tuple[Matcher, ...] = MATCHERS
) -> List[Tuple[Matcher, "re.Match[str]"]]:
    """Return every matcher that recognizes ``line``, in registry order."""
    found = []
    for matcher in matchers:
        match = matcher.match(ctx, line)
        if match is not None:
            found.append((matcher, match))
    return found
