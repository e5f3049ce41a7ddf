"""In-place board mutations.

Every operation returns ``True`` when it changed the board and ``False``
when a referenced column or task does not exist (or the move is a no-op).
A failed operation leaves the board untouched.
"""

from collections.abc import Mapping
from typing import Any, Literal

import structlog

from mdkanban.ids import IdGenerator, short_id
from mdkanban.models import Board, Column, Task
from mdkanban.titles import (
    ColumnTitle,
    display_title,
    get_column_row,
)

log = structlog.get_logger()

SortMode = Literal["title", "unsorted"]


def title_sort_key(task: Task) -> tuple[str, str]:
    """Sort key ordering titles case-insensitively, then by case."""
    title = task.title or ""
    return title.casefold(), title


def _clean_description(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


class BoardOperations:
    """Catalog of board mutations.

    Holds the task order captured at load time so a column can be
    restored after sorting.
    """

    def __init__(self, ids: IdGenerator | None = None):
        """Initialize operations.

        Args:
            ids: Identifier generator for new columns and tasks.
        """
        self._ids = ids or IdGenerator()
        self._original_task_order: dict[str, list[str]] = {}

    @property
    def original_task_order(self) -> dict[str, list[str]]:
        """Captured column ID -> task ID order (copy)."""
        return {k: list(v) for k, v in self._original_task_order.items()}

    def set_original_task_order(self, board: Board) -> None:
        """Capture the current task order of every column."""
        self._original_task_order = {
            column.id: [task.id for task in column.tasks] for column in board.columns
        }

    # ═══════════════════════════════════════════════════════════════
    # Lookup helpers
    # ═══════════════════════════════════════════════════════════════

    @staticmethod
    def _column(board: Board, column_id: str) -> Column | None:
        if not board.valid:
            return None
        return board.find_column(column_id)

    def _editable_column(self, board: Board, column_id: str) -> Column | None:
        """Get a column whose tasks may be authored."""
        column = self._column(board, column_id)
        if column is None:
            return None
        if column.include_mode:
            log.debug("include_column_read_only", column=short_id(column_id))
            return None
        return column

    def _new_task(self, data: Mapping[str, Any] | None = None) -> Task:
        data = data or {}
        return Task(
            id=self._ids.new_task_id(),
            title=str(data.get("title") or ""),
            description=_clean_description(data.get("description")),
        )

    def _new_column(self, title: str) -> Column:
        column = Column(id=self._ids.new_column_id(), title=title)
        self._original_task_order[column.id] = []
        return column

    # ═══════════════════════════════════════════════════════════════
    # Task operations
    # ═══════════════════════════════════════════════════════════════

    def move_task(
        self,
        board: Board,
        task_id: str,
        from_column_id: str,
        to_column_id: str,
        new_index: int,
    ) -> bool:
        """Move a task to a position in another (or the same) column."""
        from_column = self._editable_column(board, from_column_id)
        to_column = self._editable_column(board, to_column_id)
        if not from_column or not to_column:
            return False

        index = from_column.task_index(task_id)
        if index == -1:
            return False

        task = from_column.tasks.pop(index)
        new_index = min(max(new_index, 0), len(to_column.tasks))
        to_column.tasks.insert(new_index, task)
        return True

    def move_task_to_column(
        self,
        board: Board,
        task_id: str,
        from_column_id: str,
        to_column_id: str,
    ) -> bool:
        """Move a task to the end of another column."""
        from_column = self._editable_column(board, from_column_id)
        to_column = self._editable_column(board, to_column_id)
        if not from_column or not to_column:
            return False

        index = from_column.task_index(task_id)
        if index == -1:
            return False

        to_column.tasks.append(from_column.tasks.pop(index))
        return True

    def add_task(
        self, board: Board, column_id: str, data: Mapping[str, Any] | None = None
    ) -> bool:
        """Append a new task to a column.

        Args:
            board: Board to modify.
            column_id: Target column.
            data: Optional ``title`` and ``description``.

        Returns:
            True if the task was added.
        """
        column = self._editable_column(board, column_id)
        if not column:
            return False

        column.tasks.append(self._new_task(data))
        return True

    def add_task_at_position(
        self,
        board: Board,
        column_id: str,
        data: Mapping[str, Any] | None,
        insertion_index: int,
    ) -> bool:
        """Insert a new task at a position; out-of-range indices append."""
        column = self._editable_column(board, column_id)
        if not column:
            return False

        task = self._new_task(data)
        if 0 <= insertion_index <= len(column.tasks):
            column.tasks.insert(insertion_index, task)
        else:
            column.tasks.append(task)
        return True

    def delete_task(self, board: Board, task_id: str, column_id: str) -> bool:
        """Remove a task from its column."""
        column = self._editable_column(board, column_id)
        if not column:
            return False

        index = column.task_index(task_id)
        if index == -1:
            return False

        del column.tasks[index]
        return True

    def edit_task(
        self,
        board: Board,
        task_id: str,
        column_id: str,
        data: Mapping[str, Any],
    ) -> bool:
        """Update the fields present in ``data`` (``title``, ``description``)."""
        column = self._editable_column(board, column_id)
        if not column:
            return False

        task = column.find_task(task_id)
        if not task:
            return False

        if "title" in data and data["title"] is not None:
            task.title = str(data["title"])
        if "description" in data:
            task.description = _clean_description(data["description"])
        return True

    def duplicate_task(self, board: Board, task_id: str, column_id: str) -> bool:
        """Insert a copy of a task directly after it."""
        column = self._editable_column(board, column_id)
        if not column:
            return False

        index = column.task_index(task_id)
        if index == -1:
            return False

        source = column.tasks[index]
        copy = Task(
            id=self._ids.new_task_id(),
            title=source.title,
            description=source.description,
        )
        column.tasks.insert(index + 1, copy)
        return True

    def insert_task_before(self, board: Board, task_id: str, column_id: str) -> bool:
        """Insert an empty task before the given task."""
        return self._insert_empty_task(board, task_id, column_id, offset=0)

    def insert_task_after(self, board: Board, task_id: str, column_id: str) -> bool:
        """Insert an empty task after the given task."""
        return self._insert_empty_task(board, task_id, column_id, offset=1)

    def _insert_empty_task(
        self, board: Board, task_id: str, column_id: str, offset: int
    ) -> bool:
        column = self._editable_column(board, column_id)
        if not column:
            return False

        index = column.task_index(task_id)
        if index == -1:
            return False

        column.tasks.insert(index + offset, self._new_task())
        return True

    def move_task_to_top(self, board: Board, task_id: str, column_id: str) -> bool:
        """Move a task to the first position."""
        column = self._column(board, column_id)
        if not column:
            return False

        index = column.task_index(task_id)
        if index <= 0:
            return False

        column.tasks.insert(0, column.tasks.pop(index))
        return True

    def move_task_up(self, board: Board, task_id: str, column_id: str) -> bool:
        """Swap a task with the one above it."""
        column = self._column(board, column_id)
        if not column:
            return False

        index = column.task_index(task_id)
        if index <= 0:
            return False

        tasks = column.tasks
        tasks[index - 1], tasks[index] = tasks[index], tasks[index - 1]
        return True

    def move_task_down(self, board: Board, task_id: str, column_id: str) -> bool:
        """Swap a task with the one below it."""
        column = self._column(board, column_id)
        if not column:
            return False

        index = column.task_index(task_id)
        if index == -1 or index == len(column.tasks) - 1:
            return False

        tasks = column.tasks
        tasks[index], tasks[index + 1] = tasks[index + 1], tasks[index]
        return True

    def move_task_to_bottom(self, board: Board, task_id: str, column_id: str) -> bool:
        """Move a task to the last position."""
        column = self._column(board, column_id)
        if not column:
            return False

        index = column.task_index(task_id)
        if index == -1 or index == len(column.tasks) - 1:
            return False

        column.tasks.append(column.tasks.pop(index))
        return True

    # ═══════════════════════════════════════════════════════════════
    # Column operations
    # ═══════════════════════════════════════════════════════════════

    def add_column(self, board: Board, title: str) -> bool:
        """Append a new empty column."""
        if not board.valid:
            return False

        board.columns.append(self._new_column(title))
        return True

    def insert_column_before(self, board: Board, column_id: str, title: str) -> bool:
        """Insert a new column before the given column."""
        return self._insert_column(board, column_id, title, offset=0)

    def insert_column_after(self, board: Board, column_id: str, title: str) -> bool:
        """Insert a new column after the given column."""
        return self._insert_column(board, column_id, title, offset=1)

    def _insert_column(
        self, board: Board, column_id: str, title: str, offset: int
    ) -> bool:
        if not board.valid:
            return False

        index = board.column_index(column_id)
        if index == -1:
            return False

        board.columns.insert(index + offset, self._new_column(title))
        return True

    def delete_column(self, board: Board, column_id: str) -> bool:
        """Remove a column and its captured task order."""
        if not board.valid:
            return False

        index = board.column_index(column_id)
        if index == -1:
            return False

        del board.columns[index]
        self._original_task_order.pop(column_id, None)
        return True

    def move_column(self, board: Board, from_index: int, to_index: int) -> bool:
        """Move a column from one position to another."""
        if not board.valid or from_index == to_index:
            return False

        count = len(board.columns)
        if not (0 <= from_index < count and 0 <= to_index < count):
            return False

        board.columns.insert(to_index, board.columns.pop(from_index))
        return True

    def move_column_with_row_update(
        self,
        board: Board,
        column_id: str,
        new_position: int,
        new_row: int,
    ) -> bool:
        """Move a column and assign it to a row.

        Args:
            board: Board to modify.
            column_id: Column to move.
            new_position: Index in the column list after the move.
            new_row: Target row (1 leaves the title untagged).

        Returns:
            True if the column was found.
        """
        column = self._column(board, column_id)
        if not column:
            return False

        column.title = ColumnTitle.parse(column.title).with_row(new_row)

        board.columns.remove(column)
        new_position = min(max(new_position, 0), len(board.columns))
        board.columns.insert(new_position, column)
        return True

    def reorder_columns(
        self,
        board: Board,
        new_order: list[str],
        moved_column_id: str,
        target_row: int,
    ) -> bool:
        """Rebuild the column list from an explicit ID order.

        The moved column's row tag is rewritten to ``target_row``. Unknown
        IDs in ``new_order`` are dropped and columns missing from it are
        omitted from the board.
        """
        moved = self._column(board, moved_column_id)
        if not moved:
            return False

        moved.title = ColumnTitle.parse(moved.title).with_row(target_row)

        by_id = {column.id: column for column in board.columns}
        board.columns = [by_id[cid] for cid in new_order if cid in by_id]
        return True

    def edit_column_title(self, board: Board, column_id: str, title: str) -> bool:
        """Replace a column title, toggling include mode to match it."""
        column = self._column(board, column_id)
        if not column:
            return False

        column.title = title
        parsed = ColumnTitle.parse(title)

        if parsed.is_include:
            include_files = list(parsed.include_files)
            column.include_mode = True
            column.include_files = include_files
            column.original_title = title
            column.display_title = display_title(title, include_files)
            log.info(
                "include_mode_enabled",
                column=short_id(column_id),
                files=include_files,
            )
        elif column.include_mode:
            column.include_mode = False
            column.include_files = None
            column.original_title = None
            column.display_title = None
            log.info("include_mode_disabled", column=short_id(column_id))

        return True

    def sort_column(self, board: Board, column_id: str, mode: SortMode) -> bool:
        """Sort a column's tasks.

        Args:
            board: Board to modify.
            column_id: Column to sort.
            mode: ``title`` for a stable sort by title, ``unsorted`` to
                restore the captured original order.

        Returns:
            True if the column exists and the mode is known.
        """
        column = self._column(board, column_id)
        if not column:
            return False

        if mode == "title":
            column.tasks.sort(key=title_sort_key)
            return True

        if mode == "unsorted":
            original = self._original_task_order.get(column_id)
            if original is None:
                return True
            remaining = {task.id: task for task in column.tasks}
            restored = [remaining.pop(tid) for tid in original if tid in remaining]
            column.tasks = restored + list(remaining.values())
            return True

        return False

    def cleanup_row_tags(self, board: Board) -> bool:
        """Collapse duplicate row tags, keeping the last one.

        Returns:
            True if any column title changed.
        """
        if not board.valid:
            return False

        modified = False
        for column in board.columns:
            cleaned = ColumnTitle.parse(column.title).collapse_row_tags()
            if cleaned != column.title:
                log.debug(
                    "row_tags_collapsed",
                    column=short_id(column.id),
                    before=column.title,
                    after=cleaned,
                )
                column.title = cleaned
                modified = True
        return modified

    @staticmethod
    def get_column_row(column: Column) -> int:
        """Get the row (1-4) a column belongs to."""
        return get_column_row(column.title)
