"""Tests for include resolution."""

import os
from pathlib import Path

import pytest

from makefile_parser import (
    CollaboratorIOError,
    Comment,
    CyclicIncludeError,
    EmptyLine,
    Include,
    IncludeWithoutFilenameError,
    ParseOptions,
    Target,
    UnhandledLineError,
    Variable,
    parse_makefile,
)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Create a Makefile that includes a shared rules file."""
    (tmp_path / "common.mk").write_text(
        "# Build it\n"
        "build:\n"
        "\tcc -o app main.c\n"
        ".PHONY: build\n"
    )
    makefile = tmp_path / "Makefile"
    makefile.write_text(
        "# Shared rules\n"
        "include common.mk\n"
        "all: build\n"
    )
    return makefile


class TestIncludeResolution:
    """Tests for splicing included files into the parent."""

    def test_splices_included_tokens(self, project: Path) -> None:
        """Should insert the included tokens right after the Include token."""
        result = parse_makefile(project)
        assert result.ast == [
            Include(path="common.mk", comment=["Shared rules"]),
            Target(name="build", recipe=["cc -o app main.c"], comment=["Build it"]),
            EmptyLine(),
            Target(name="all", deps=["build"]),
            EmptyLine(),
        ]

    def test_merges_phony_names(self, project: Path) -> None:
        """Should merge phony names declared in included files."""
        assert parse_makefile(project).phony == ["build"]

    def test_isfilename_with_string_path(self, project: Path) -> None:
        """Should read a string source when isfilename is set."""
        result = parse_makefile(str(project), isfilename=True)
        assert [t.name for t in result.targets] == ["build", "all"]

    def test_relative_to_including_file(self, tmp_path: Path) -> None:
        """Should resolve nested includes against each file's own directory."""
        sub = tmp_path / "sub"
        sub.mkdir()
        (sub / "a.mk").write_text("include b.mk\nA = 1")
        (sub / "b.mk").write_text("B = 2")
        makefile = tmp_path / "Makefile"
        makefile.write_text("include sub/a.mk")

        result = parse_makefile(makefile, strict=True)
        assert result.ast == [
            Include(path="sub/a.mk"),
            Include(path="b.mk"),
            Variable(name="B", value="2"),
            Variable(name="A", value="1"),
        ]

    def test_diamond_includes_are_allowed(self, tmp_path: Path) -> None:
        """Should include the same file twice through different parents."""
        (tmp_path / "z.mk").write_text("Z = 1")
        (tmp_path / "x.mk").write_text("include z.mk")
        (tmp_path / "y.mk").write_text("include z.mk")
        makefile = tmp_path / "Makefile"
        makefile.write_text("include x.mk\ninclude y.mk")

        result = parse_makefile(makefile, strict=True)
        assert [v.name for v in result.variables] == ["Z", "Z"]

    def test_custom_loader(self) -> None:
        """Should read every file through the given loader."""
        files = {
            "/mk/Makefile": "include rules.mk\nall: lib",
            "/mk/rules.mk": "lib:\n\tar rcs lib.a *.o",
        }

        def loader(path: str) -> str:
            try:
                return files[path]
            except KeyError:
                raise FileNotFoundError(path) from None

        result = parse_makefile("/mk/Makefile", ParseOptions(isfilename=True), loader=loader)
        assert [t.name for t in result.targets] == ["lib", "all"]
        assert result.targets[0].recipe == ["ar rcs lib.a *.o"]

    def test_ignore_includes(self, project: Path) -> None:
        """Should keep the Include token without reading the file."""
        result = parse_makefile(project, ignore_includes=True)
        assert result.includes == [Include(path="common.mk", comment=["Shared rules"])]
        assert [t.name for t in result.targets] == ["all"]

    def test_diagnostics_name_the_included_file(self, tmp_path: Path) -> None:
        """Should prefix diagnostics with the file they come from."""
        (tmp_path / "bad.mk").write_text("\torphan")
        makefile = tmp_path / "Makefile"
        makefile.write_text("include bad.mk")

        result = parse_makefile(makefile, unhandled=True)
        bad = os.path.join(str(tmp_path), "bad.mk")
        assert result.unhandled == [f"{bad}: UNHANDLED: '\torphan'"]

    def test_strict_applies_to_included_files(self, tmp_path: Path) -> None:
        """Should raise for an unhandled line inside an included file."""
        (tmp_path / "bad.mk").write_text("\torphan")
        makefile = tmp_path / "Makefile"
        makefile.write_text("include bad.mk")

        with pytest.raises(UnhandledLineError) as exc_info:
            parse_makefile(makefile, strict=True)
        assert exc_info.value.path.endswith("bad.mk")


class TestIncludeErrors:
    """Tests for include errors that are always raised."""

    def test_include_in_text(self) -> None:
        """Should refuse to resolve includes without a source file."""
        with pytest.raises(IncludeWithoutFilenameError) as exc_info:
            parse_makefile("include common.mk")
        assert exc_info.value.include_path == "common.mk"

    def test_ignore_includes_in_text(self) -> None:
        """Should record the include when includes are ignored."""
        result = parse_makefile("include common.mk", ignore_includes=True)
        assert result.ast == [Include(path="common.mk")]

    def test_missing_included_file(self, tmp_path: Path) -> None:
        """Should wrap the loader error."""
        makefile = tmp_path / "Makefile"
        makefile.write_text("include missing.mk")

        with pytest.raises(CollaboratorIOError) as exc_info:
            parse_makefile(makefile)
        assert exc_info.value.path.endswith("missing.mk")
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_missing_makefile(self, tmp_path: Path) -> None:
        """Should raise for a missing top-level Makefile."""
        with pytest.raises(CollaboratorIOError):
            parse_makefile(tmp_path / "nonexistent")

    def test_self_include(self, tmp_path: Path) -> None:
        """Should detect a file including itself."""
        makefile = tmp_path / "Makefile"
        makefile.write_text("include Makefile")

        with pytest.raises(CyclicIncludeError) as exc_info:
            parse_makefile(makefile)
        assert len(exc_info.value.chain) == 2

    def test_include_cycle(self, tmp_path: Path) -> None:
        """Should detect a cycle through several files."""
        (tmp_path / "a.mk").write_text("include b.mk")
        (tmp_path / "b.mk").write_text("include a.mk")

        with pytest.raises(CyclicIncludeError) as exc_info:
            parse_makefile(tmp_path / "a.mk")
        names = [os.path.basename(p) for p in exc_info.value.chain]
        assert names == ["a.mk", "b.mk", "a.mk"]

    def test_undecodable_makefile(self, tmp_path: Path) -> None:
        """Should wrap a decoding failure of the default loader."""
        makefile = tmp_path / "Makefile"
        makefile.write_bytes("# caf\xe9\n".encode("latin-1"))

        with pytest.raises(CollaboratorIOError) as exc_info:
            parse_makefile(makefile)
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)

    def test_undecodable_included_file(self, tmp_path: Path) -> None:
        """Should wrap a decoding failure inside an included file."""
        (tmp_path / "latin.mk").write_bytes("# caf\xe9\n".encode("latin-1"))
        makefile = tmp_path / "Makefile"
        makefile.write_text("include latin.mk\n")

        with pytest.raises(CollaboratorIOError) as exc_info:
            parse_makefile(makefile)
        assert exc_info.value.path.endswith("latin.mk")


class TestIncludeBoundary:
    """Tests for the rule context ending at an included file."""

    def test_recipe_does_not_extend_included_target(self, tmp_path: Path) -> None:
        """Should not attach a parent recipe line to the included target."""
        (tmp_path / "r.mk").write_text("lib:")
        makefile = tmp_path / "Makefile"
        makefile.write_text("include r.mk\n\techo parent")

        result = parse_makefile(makefile, unhandled=True)
        assert result.ast == [Include(path="r.mk"), Target(name="lib")]
        assert len(result.unhandled) == 1
        assert "UNHANDLED: '\techo parent'" in result.unhandled[0]

    def test_recipe_after_include_is_strict_error(self, tmp_path: Path) -> None:
        """Should raise in strict mode for a recipe line after an include."""
        (tmp_path / "r.mk").write_text("lib:")
        makefile = tmp_path / "Makefile"
        makefile.write_text("include r.mk\n\techo parent")

        with pytest.raises(UnhandledLineError):
            parse_makefile(makefile, strict=True)

    def test_trailing_comment_stays_in_included_file(self, tmp_path: Path) -> None:
        """Should keep a trailing comment of an included file standalone."""
        (tmp_path / "r.mk").write_text("# trailing")
        makefile = tmp_path / "Makefile"
        makefile.write_text("include r.mk\nall:")

        result = parse_makefile(makefile, strict=True)
        assert result.ast == [
            Include(path="r.mk"),
            Comment(lines=["trailing"]),
            Target(name="all"),
        ]

    def test_parent_comments_continue_after_include(self, tmp_path: Path) -> None:
        """Should still attach parent comments written after the include."""
        (tmp_path / "r.mk").write_text("# trailing")
        makefile = tmp_path / "Makefile"
        makefile.write_text("include r.mk\n# Build all\n# of it\nall:")

        result = parse_makefile(makefile, strict=True)
        assert result.ast[-1] == Target(name="all", comment=["Build all", "of it"])
        assert result.ast[1] == Comment(lines=["trailing"])
