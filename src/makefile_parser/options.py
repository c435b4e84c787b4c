"""Parser configuration."""

from pydantic import BaseModel, ConfigDict, Field


class ParseOptions(BaseModel):
    """Options accepted by :func:`makefile_parser.parse_makefile`."""

    model_config = ConfigDict(extra="forbid")

    strict: bool = Field(
        default=False,
        description="Raise on unhandled or ambiguous lines instead of skipping them",
    )
    unhandled: bool = Field(
        default=False,
        description="Collect skipped lines in the result instead of logging them",
    )
    isfilename: bool = Field(
        default=False,
        description="Treat the source as a path to read rather than Makefile text",
    )
    ignore_includes: bool = Field(
        default=False,
        description="Record include directives without loading the included files",
    )
