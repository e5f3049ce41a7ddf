"""Pydantic models for the kanban board document."""

from pydantic import BaseModel, Field

from mdkanban.titles import get_column_row


class Task(BaseModel):
    """A single card within a column."""

    id: str
    title: str = ""
    description: str | None = None

    @property
    def text(self) -> str:
        """Title and description joined, used for tag extraction."""
        return f"{self.title} {self.description or ''}"


class Column(BaseModel):
    """A column of the board, rendered as a ``## `` heading."""

    id: str
    title: str = ""
    tasks: list[Task] = Field(default_factory=list)

    # Include-mode bookkeeping (tasks come from slide documents)
    include_mode: bool = False
    include_files: list[str] | None = None
    original_title: str | None = None
    display_title: str | None = None

    @property
    def row(self) -> int:
        """Effective row (1-4) from the title's row tag."""
        return get_column_row(self.title)

    def find_task(self, task_id: str) -> Task | None:
        """Get a task by ID."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def task_index(self, task_id: str) -> int:
        """Get the position of a task, or -1 if absent."""
        for index, task in enumerate(self.tasks):
            if task.id == task_id:
                return index
        return -1


class Board(BaseModel):
    """The full parsed kanban document."""

    valid: bool = False
    title: str = ""
    columns: list[Column] = Field(default_factory=list)
    yaml_header: str | None = None
    kanban_footer: str | None = None

    def find_column(self, column_id: str) -> Column | None:
        """Get a column by ID."""
        for column in self.columns:
            if column.id == column_id:
                return column
        return None

    def column_index(self, column_id: str) -> int:
        """Get the position of a column, or -1 if absent."""
        for index, column in enumerate(self.columns):
            if column.id == column_id:
                return index
        return -1


class ParseResult(BaseModel):
    """Output of the markdown parser."""

    board: Board
    included_files: list[str] = Field(default_factory=list)
    column_include_files: list[str] = Field(default_factory=list)
