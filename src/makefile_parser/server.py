"""FastMCP server that exposes a parsed Makefile as tools and resources."""

from pathlib import Path
from typing import Any

from fastmcp import FastMCP
from fastmcp.exceptions import ResourceError, ToolError

from .errors import MakefileParseError
from .help import render_help
from .options import ParseOptions
from .parser import parse_makefile
from .tokens import ParseResult


def create_server(
    makefile: str = "Makefile",
    strict: bool = False,
    ignore_includes: bool = False,
) -> FastMCP:
    """Create a FastMCP server for one Makefile.

    The Makefile is parsed again on every request, so edits are picked up
    without restarting the server.

    Args:
        makefile: Path to Makefile
        strict: Fail requests on unhandled or ambiguous lines
        ignore_includes: Do not load included files

    Returns:
        Configured FastMCP server
    """
    makefile_path = Path(makefile).resolve()
    if not makefile_path.exists():
        raise FileNotFoundError(f"Makefile not found: {makefile_path}")

    options = ParseOptions(
        strict=strict,
        unhandled=True,
        ignore_includes=ignore_includes,
    )

    def load(error: type[Exception] = ToolError) -> ParseResult:
        try:
            return parse_makefile(makefile_path, options)
        except MakefileParseError as e:
            raise error(str(e)) from e

    server = FastMCP(
        name="makefile-parser",
        instructions=f"Structure of {makefile_path.name}: targets, variables, "
        f"includes and phony names. "
        f"Use the makefile:// resources to read the Makefile and its help text.",
    )

    # =========================================================================
    # Resources
    # =========================================================================

    @server.resource(f"makefile://{makefile_path.name}")
    def get_makefile_contents() -> str:
        """Get the full contents of the Makefile."""
        return makefile_path.read_text()

    @server.resource("makefile://help")
    def get_help() -> str:
        """Get help text built from the comments above targets and variables."""
        return render_help(load(ResourceError))

    # =========================================================================
    # Tools
    # =========================================================================

    @server.tool(
        name="parse_makefile",
        description=f"Parse {makefile_path.name} into tokens and phony names",
    )
    def parse_configured() -> dict[str, Any]:
        return load().to_dict()

    @server.tool(
        name="parse_makefile_text",
        description="Parse Makefile text given inline (include directives are not followed)",
    )
    def parse_text(text: str, strict: bool = False) -> dict[str, Any]:
        try:
            result = parse_makefile(
                text,
                ParseOptions(strict=strict, unhandled=True, ignore_includes=True),
            )
        except MakefileParseError as e:
            raise ToolError(str(e)) from e
        return result.to_dict()

    @server.tool(
        name="describe_target",
        description="Show the dependencies, recipe and comment of one target",
    )
    def describe_target(name: str) -> dict[str, Any]:
        result = load()
        target = result.find_target(name)
        if target is None:
            raise ToolError(f"Unknown target: {name}")
        return {**target.to_dict(), "phony": name in result.phony}

    @server.tool(
        name="list_variables",
        description=f"List the variable assignments in {makefile_path.name}",
    )
    def list_variables() -> list[dict[str, Any]]:
        return [v.to_dict() for v in load().variables]

    return server
