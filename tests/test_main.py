"""Tests for the command line interface."""

import json
from datetime import date

import pytest

from mdkanban.document import parse_markdown
from mdkanban.main import _parse_date, build_parser, format_board_summary, main

BOARD = (
    "---\nkanban-plugin: board\n---\n\n"
    "# Home\n\n"
    "## To Do\n"
    "- [x] Buy milk\n"
    "  Get 2% milk\n"
    "- [ ] Call Bob @bob\n\n\n"
    "## Bob #row2 #row2 #gather_bob\n"
)

CANONICAL = (
    "---\nkanban-plugin: board\n---\n\n"
    "# Home\n\n"
    "## To Do\n"
    "- [ ] Buy milk\n"
    "  Get 2% milk\n"
    "- [ ] Call Bob @bob\n\n"
    "## Bob #row2 #row2 #gather_bob\n"
)


@pytest.fixture
def board_file(tmp_path):
    """A board document on disk."""
    path = tmp_path / "board.md"
    path.write_text(BOARD, encoding="utf-8")
    return path


class TestShow:
    """Test the show command."""

    def test_summary(self, board_file, capsys):
        """Test the human-readable overview."""
        assert main(["show", str(board_file)]) == 0
        out = capsys.readouterr().out
        assert "Home" in out
        assert "To Do" in out
        assert "Buy milk" in out
        assert "row 2" in out
        assert "#row2" not in out
        assert "#gather_bob" not in out

    def test_json(self, board_file, capsys):
        """Test the JSON model output."""
        assert main(["show", str(board_file), "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["board"]["valid"] is True
        assert [c["title"] for c in data["board"]["columns"]] == [
            "To Do",
            "Bob #row2 #row2 #gather_bob",
        ]

    def test_summary_groups_rows(self):
        """Test that columns are listed by row."""
        text = (
            "---\nkanban-plugin: board\n---\n"
            "## Later #row2\n## Now\n## Deck !!!columninclude(d.md)!!!\n"
        )
        summary = format_board_summary(parse_markdown(text, read_file=lambda p: None))
        assert summary.index("Now") < summary.index("Deck") < summary.index("Later")
        assert "[include]" in summary


class TestRewriteCommands:
    """Test commands that regenerate the document."""

    def test_format_stdout(self, board_file, capsys):
        """Test printing the canonical document."""
        assert main(["format", str(board_file)]) == 0
        assert capsys.readouterr().out == CANONICAL
        assert board_file.read_text(encoding="utf-8") == BOARD

    def test_format_write(self, board_file):
        """Test writing the canonical document back."""
        assert main(["format", str(board_file), "--write"]) == 0
        assert board_file.read_text(encoding="utf-8") == CANONICAL

    def test_autosort(self, board_file, capsys):
        """Test filing cards with a fixed reference date."""
        assert main(["autosort", str(board_file), "--today", "2026-10-18"]) == 0
        captured = capsys.readouterr()
        assert captured.out.endswith(
            "## Bob #row2 #row2 #gather_bob\n- [ ] Call Bob @bob\n"
        )
        assert "Moved 1 card(s)" in captured.err

    def test_cleanup_rows(self, board_file):
        """Test collapsing duplicate row tags in place."""
        assert main(["cleanup-rows", str(board_file), "--write"]) == 0
        text = board_file.read_text(encoding="utf-8")
        assert "## Bob #gather_bob #row2\n" in text

    def test_cleanup_rows_nothing_to_do(self, tmp_path, capsys):
        """Test a board without duplicate row tags."""
        path = tmp_path / "clean.md"
        path.write_text("---\nkanban-plugin: board\n---\n\n## A #row2\n")
        assert main(["cleanup-rows", str(path)]) == 0
        captured = capsys.readouterr()
        assert "No duplicate row tags found" in captured.err
        assert captured.out.endswith("## A #row2\n")


class TestSlides:
    """Test the slides command."""

    def test_lists_slides(self, tmp_path, capsys):
        """Test listing the cards of a slide deck."""
        path = tmp_path / "deck.md"
        path.write_text("# Intro\ntext\n---\nno heading\n---\n\n")
        assert main(["slides", str(path)]) == 0
        out = capsys.readouterr().out
        assert "1. Intro" in out
        assert "2. no heading" in out


class TestErrors:
    """Test error exits."""

    def test_not_a_board(self, tmp_path, capsys):
        """Test a document without the board marker."""
        path = tmp_path / "notes.md"
        path.write_text("# Notes\n- [ ] x\n")
        assert main(["format", str(path)]) == 1
        assert "is not a kanban board" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        """Test a path that does not exist."""
        assert main(["show", str(tmp_path / "missing.md")]) == 1
        assert "Cannot read" in capsys.readouterr().err

    def test_no_command(self, capsys):
        """Test running without a command."""
        assert main([]) == 1

    def test_bad_date(self):
        """Test the --today argument type."""
        assert _parse_date("2026-10-18") == date(2026, 10, 18)
        with pytest.raises(SystemExit):
            build_parser().parse_args(["autosort", "b.md", "--today", "tomorrow"])
