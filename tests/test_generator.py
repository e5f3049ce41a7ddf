"""Tests for the markdown generator."""

from mdkanban.document import generate_markdown, generate_slides, parse_markdown
from mdkanban.models import Board, Column, Task

HEADER = "---\nkanban-plugin: board\n---"


def _board(*columns: Column, **kwargs) -> Board:
    return Board(valid=True, yaml_header=HEADER, columns=list(columns), **kwargs)


class TestGenerateMarkdown:
    """Test board serialization."""

    def test_concrete_scenario(self):
        """Test the reference to-do column output."""
        board = _board(
            Column(
                id="c1",
                title="To Do",
                tasks=[
                    Task(id="t1", title="Buy milk", description="Get 2% milk"),
                    Task(id="t2", title="Call Bob"),
                ],
            )
        )
        assert generate_markdown(board) == (
            "---\nkanban-plugin: board\n---\n\n"
            "## To Do\n"
            "- [ ] Buy milk\n"
            "  Get 2% milk\n"
            "- [ ] Call Bob\n"
        )

    def test_board_title(self):
        """Test that the board title follows the header."""
        board = _board(Column(id="c1", title="A"), title="Sprint")
        assert generate_markdown(board) == (
            "---\nkanban-plugin: board\n---\n\n# Sprint\n\n## A\n"
        )

    def test_empty_columns_separated(self):
        """Test blank lines between columns."""
        board = _board(Column(id="c1", title="A"), Column(id="c2", title="B"))
        assert generate_markdown(board).endswith("## A\n\n## B\n")

    def test_multiline_description(self):
        """Test that each description line is indented and blanks stay blank."""
        board = _board(
            Column(
                id="c1",
                title="A",
                tasks=[Task(id="t1", title="T", description="one\n\n  two")],
            )
        )
        assert "- [ ] T\n  one\n\n    two\n" in generate_markdown(board)

    def test_blank_description_omitted(self):
        """Test that whitespace-only descriptions are not written."""
        board = _board(
            Column(id="c1", title="A", tasks=[Task(id="t1", title="T", description="  ")])
        )
        assert generate_markdown(board).endswith("## A\n- [ ] T\n")

    def test_footer_single_blank_line(self):
        """Test exactly one blank line before the footer."""
        board = _board(
            Column(id="c1", title="A", tasks=[Task(id="t1", title="a")]),
            kanban_footer="%% kanban:settings\n\n\n",
        )
        assert generate_markdown(board).endswith(
            "## A\n- [ ] a\n\n%% kanban:settings\n"
        )

    def test_include_column_tasks_not_written(self):
        """Test that include-mode columns only write their heading."""
        board = _board(
            Column(
                id="c1",
                title="Deck !!!columninclude(deck.md)!!!",
                include_mode=True,
                include_files=["deck.md"],
                tasks=[Task(id="t1", title="Slide")],
            ),
            Column(id="c2", title="B"),
        )
        output = generate_markdown(board)
        assert "## Deck !!!columninclude(deck.md)!!!\n\n## B\n" in output
        assert "Slide" not in output


class TestRoundTrip:
    """Test parse and generate agreement."""

    DOCUMENT = (
        "---\nkanban-plugin: board\n---\n\n"
        "# Release\n\n"
        "## Backlog #row2\n"
        "- [ ] Write docs @alice\n"
        "  Cover the CLI\n"
        "\n"
        "  - install\n"
        "  - usage\n"
        "- [ ] Ship @2026-11-01\n\n"
        "## Done #gather_done #sort-byname\n"
        "- [ ] Setup\n\n"
        "%% kanban:settings\n```\n{}\n```\n%%\n"
    )

    def test_canonical_document_unchanged(self):
        """Test that a canonical document survives a round trip byte for byte."""
        board = parse_markdown(self.DOCUMENT).board
        assert generate_markdown(board) == self.DOCUMENT

    def test_structure_preserved(self, shape):
        """Test that regenerating and reparsing keeps the structure."""
        board = parse_markdown(self.DOCUMENT).board
        reparsed = parse_markdown(generate_markdown(board)).board
        assert shape(reparsed) == shape(board)

    def test_normalization_idempotent(self):
        """Test that a second round trip changes nothing."""
        messy = (
            "\n---\r\nkanban-plugin: board\r\n---\r\n"
            "## A\r\n- [x] done\r\n\r\n\r\n- x\r\n   indented\r\n"
            "## B\n%% footer\n\n\n"
        )
        once = generate_markdown(parse_markdown(messy).board)
        twice = generate_markdown(parse_markdown(once).board)
        assert once == twice

    def test_include_column_round_trip(self):
        """Test that an include column keeps its directive and nothing else."""
        document = (
            "---\nkanban-plugin: board\n---\n\n"
            "## Deck !!!columninclude(deck.md)!!!\n\n"
            "## Notes\n- [ ] n\n"
        )

        def reader(path):
            return "# One\n---\n# Two"

        result = parse_markdown(document, "/boards", read_file=reader)
        assert len(result.board.columns[0].tasks) == 2
        assert generate_markdown(result.board) == document


class TestGenerateSlides:
    """Test include column serialization."""

    def test_slides_from_column(self):
        """Test writing an include column's tasks as a slide document."""
        column = Column(
            id="c1",
            title="Deck !!!columninclude(deck.md)!!!",
            include_mode=True,
            tasks=[
                Task(id="t1", title="One", description="Body"),
                Task(id="t2", title="Two"),
            ],
        )
        assert generate_slides(column) == "# One\n\nBody\n\n---\n\n# Two\n"
