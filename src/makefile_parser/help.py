"""Render the documented targets and variables of a Makefile as help text."""

from typing import List, Sequence, Union

from .tokens import ParseResult, Target, Variable


def _section(title: str, tokens: Sequence[Union[Target, Variable]], indent: str) -> List[str]:
    lines = ["", f"  {title}", ""]
    documented = [t for t in tokens if t.comment]
    if not documented:
        return lines
    width = max(len(t.name) for t in documented) + 2
    for token in documented:
        lines.append(f"{indent * 2}{token.name.ljust(width)}{token.comment[0]}")
        for extra in token.comment[1:]:
            lines.append(f"{indent * 2}{' ' * width}{extra}")
    return lines


def _echo(line: str) -> str:
    escaped = line.replace("$", "$$").replace('"', '\\"')
    return f'\t@echo "{escaped}"'


def render_help(result: ParseResult, indent: str = "  ", make_help: bool = False) -> str:
    """Build help text from the comments attached to targets and variables.

    Args:
        result: Parse result to document
        indent: Indentation unit; entries are indented by two of them
        make_help: Wrap the text in a ``help:`` rule that echoes each line

    Returns:
        The help text, without a trailing newline
    """
    lines = _section("Targets", result.targets, indent)
    lines += _section("Variables", result.variables, indent)
    if make_help:
        lines = ["", "help:"] + [_echo(line) for line in lines]
    return "\n".join(lines)
