"""makefile-parser: Tokenize Makefiles into targets, variables and comments."""

from .errors import (
    AmbiguousLineError,
    CollaboratorIOError,
    CyclicIncludeError,
    IncludeWithoutFilenameError,
    MakefileParseError,
    UnhandledLineError,
)
from .help import render_help
from .options import ParseOptions
from .parser import join_lines, parse_makefile
from .tokens import (
    Comment,
    EmptyLine,
    Export,
    Include,
    ParseResult,
    Target,
    Token,
    Variable,
)

__version__ = "0.1.0"
__all__ = [
    "__version__",
    "create_server",
    "AmbiguousLineError",
    "CollaboratorIOError",
    "Comment",
    "CyclicIncludeError",
    "EmptyLine",
    "Export",
    "Include",
    "IncludeWithoutFilenameError",
    "MakefileParseError",
    "ParseOptions",
    "ParseResult",
    "Target",
    "Token",
    "UnhandledLineError",
    "Variable",
    "join_lines",
    "parse_makefile",
    "render_help",
]


def __getattr__(name: str):
    # The server pulls in fastmcp, so it is only imported on first use.
    if name == "create_server":
        from .server import create_server

        return create_server
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def main() -> None:
    """CLI entry point."""
    import argparse
    import json
    import logging
    import os
    import sys

    parser = argparse.ArgumentParser(
        prog="makefile-parser",
        description="Parse a Makefile and print its documented targets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  makefile-parser                       # Help text for ./Makefile
  makefile-parser --dump build.mk       # Dump tokens as JSON
  makefile-parser --make-help >> Makefile  # Append a "help" target
  makefile-parser --serve               # Run as an MCP server

Environment Variables:
  MAKEFILE_PARSER_LOG_LEVEL            # Logging level (default: WARNING)
""",
    )
    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "makefile",
        nargs="?",
        default="Makefile",
        metavar="PATH",
        help="Path to Makefile (default: ./Makefile)",
    )
    parser.add_argument(
        "-d", "--dump",
        action="store_true",
        help="Dump the parse result as JSON",
    )
    parser.add_argument(
        "--make-help",
        action="store_true",
        help='Generate a "help" target instead of plain help text',
    )
    parser.add_argument(
        "--indent",
        default="  ",
        metavar="TEXT",
        help="Indentation unit for help text (default: two spaces)",
    )
    parser.add_argument(
        "-s", "--strict",
        action="store_true",
        help="Fail on unhandled or ambiguous lines",
    )
    parser.add_argument(
        "--ignore-includes",
        action="store_true",
        help="Do not load included files",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run an MCP server for the Makefile",
    )

    args = parser.parse_args()

    logging.basicConfig(
        format="%(name)s: %(levelname)s: %(message)s",
        level=os.environ.get("MAKEFILE_PARSER_LOG_LEVEL", "WARNING").upper(),
    )

    if args.serve:
        from .server import create_server

        try:
            server = create_server(
                makefile=args.makefile,
                strict=args.strict,
                ignore_includes=args.ignore_includes,
            )
        except FileNotFoundError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        server.run()
        return

    options = ParseOptions(
        isfilename=True,
        strict=args.strict,
        ignore_includes=args.ignore_includes,
    )
    try:
        result = parse_makefile(args.makefile, options)
    except MakefileParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.dump:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(render_help(result, indent=args.indent, make_help=args.make_help))


if __name__ == "__main__":
    main()
