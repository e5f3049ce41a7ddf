"""Markdown kanban parser.

The document format::

    ---
    kanban-plugin: board
    ---

    # Board title

    ## To Do #row2
    - [ ] Buy milk
      Get 2% milk

    ## Slides !!!columninclude(deck.md)!!!

    %% kanban:settings
    ...

The parser is a single forward scan over the lines. It never raises for
malformed content: a missing validity marker yields ``board.valid = False``
and unreadable include files are logged and skipped.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from pathlib import Path
from urllib.parse import unquote

import structlog

from mdkanban import slides
from mdkanban.config import DEFAULT_SETTINGS, Settings
from mdkanban.ids import IdGenerator, short_id
from mdkanban.models import Board, Column, ParseResult, Task
from mdkanban.titles import ColumnTitle, display_title

log = structlog.get_logger()

YAML_DELIMITER = "---"
FOOTER_MARKER = "%%"
BOARD_TITLE_MARKER = "# "
COLUMN_MARKER = "## "
TASK_MARKER = "- "
DESCRIPTION_INDENT = "  "
CHECKBOXES = ("[ ]", "[x]", "[X]")

INCLUDE_PATTERN = re.compile(r"!!!include\(([^)]+)\)!!!", re.IGNORECASE)

ReadFile = Callable[[Path], str | None]


class ParserState(Enum):
    """Scanner states."""

    BEFORE_YAML = "before_yaml"
    IN_YAML = "in_yaml"
    BODY = "body"
    IN_FOOTER = "in_footer"


@dataclass
class _Scan:
    """Mutable state of one parse."""

    board: Board
    column: Column | None = None
    task: Task | None = None
    description: list[str] = field(default_factory=list)

    def finalize_task(self) -> None:
        if self.task is None or self.column is None:
            self.task = None
            return
        text = "\n".join(self.description).rstrip()
        self.task.description = text or None
        self.column.tasks.append(self.task)
        self.task = None
        self.description = []

    def push_column(self) -> None:
        self.finalize_task()
        if self.column is not None:
            self.board.columns.append(self.column)
        self.column = None


def read_text_file(path: Path, encoding: str = "utf-8") -> str | None:
    """Read a file, returning None if it cannot be read."""
    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError):
        return None


def resolve_include_path(path: str, base_path: Path | str | None) -> Path | None:
    """Resolve an include reference against the document's directory.

    Args:
        path: Path as written in the directive (may be URL-encoded).
        base_path: Directory of the board document.

    Returns:
        Resolved path, or None if a relative path has no base to resolve
        against.
    """
    candidate = Path(unquote(path.strip()))
    if candidate.is_absolute():
        return candidate
    if base_path is None:
        return None
    return Path(base_path) / candidate


def find_included_files(text: str) -> list[str]:
    """Collect distinct ``!!!include(<path>)!!!`` references.

    Args:
        text: Full document text.

    Returns:
        Paths in order of first appearance.
    """
    seen: dict[str, None] = {}
    for match in INCLUDE_PATTERN.findall(text):
        seen.setdefault(match.strip(), None)
    return list(seen)


def _strip_checkbox(title: str) -> str:
    for box in CHECKBOXES:
        if title == box:
            return ""
        if title.startswith(box + " "):
            return title[len(box) + 1 :].strip()
    return title


def _load_include_tasks(
    include_files: list[str],
    base_path: Path | str | None,
    read_file: ReadFile,
    ids: IdGenerator,
    settings: Settings,
) -> list[Task]:
    tasks: list[Task] = []
    for include in include_files:
        resolved = resolve_include_path(include, base_path)
        if resolved is None:
            log.warning("include_file_unresolved", path=include)
            continue

        content = read_file(resolved)
        if content is None:
            log.warning("include_file_unreadable", path=str(resolved))
            continue

        tasks.extend(
            slides.to_tasks(content, ids, scan_lines=settings.slide_title_scan_lines)
        )
    return tasks


def _new_column(
    title: str,
    base_path: Path | str | None,
    read_file: ReadFile,
    ids: IdGenerator,
    settings: Settings,
) -> Column:
    column = Column(id=ids.new_column_id(), title=title)
    parsed = ColumnTitle.parse(title)
    if not parsed.is_include:
        return column

    include_files = list(parsed.include_files)
    column.include_mode = True
    column.include_files = include_files
    column.original_title = title
    column.display_title = display_title(title, include_files)
    column.tasks = _load_include_tasks(
        include_files, base_path, read_file, ids, settings
    )
    log.debug(
        "include_column_loaded",
        column=short_id(column.id),
        files=include_files,
        tasks=len(column.tasks),
    )
    return column


def parse_markdown(
    text: str,
    base_path: Path | str | None = None,
    *,
    settings: Settings | None = None,
    read_file: ReadFile | None = None,
    ids: IdGenerator | None = None,
) -> ParseResult:
    """Parse a kanban markdown document.

    Args:
        text: Document content.
        base_path: Directory used to resolve relative include paths.
        settings: Format settings (validity marker, include encoding).
        read_file: Reader for include files; returns None when unreadable.
        ids: Identifier generator for columns and tasks.

    Returns:
        ParseResult with the board and the referenced include files.
    """
    settings = settings or DEFAULT_SETTINGS
    ids = ids or IdGenerator()
    reader = read_file or partial(read_text_file, encoding=settings.include_encoding)

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    included_files = find_included_files(text)
    board = Board()
    scan = _Scan(board=board)
    state = ParserState.BEFORE_YAML
    yaml_lines: list[str] = []
    footer_lines: list[str] = []

    for line in text.split("\n"):
        if state is ParserState.BEFORE_YAML:
            if not line.strip():
                continue
            if line.rstrip() != YAML_DELIMITER:
                log.debug("front_matter_missing")
                return ParseResult(board=board, included_files=included_files)
            yaml_lines.append(line)
            state = ParserState.IN_YAML
            continue

        if state is ParserState.IN_YAML:
            yaml_lines.append(line)
            if line.rstrip() == YAML_DELIMITER:
                board.yaml_header = "\n".join(yaml_lines)
                board.valid = settings.board_marker in board.yaml_header
                if not board.valid:
                    log.debug("board_marker_missing", marker=settings.board_marker)
                    return ParseResult(board=board, included_files=included_files)
                state = ParserState.BODY
            continue

        if state is ParserState.IN_FOOTER:
            footer_lines.append(line)
            continue

        if line.startswith(FOOTER_MARKER):
            scan.finalize_task()
            footer_lines.append(line)
            state = ParserState.IN_FOOTER
            continue

        if (
            line.startswith(BOARD_TITLE_MARKER)
            and not board.title
            and scan.column is None
        ):
            board.title = line[len(BOARD_TITLE_MARKER) :].strip()
            continue

        if line.startswith(COLUMN_MARKER):
            scan.push_column()
            scan.column = _new_column(
                line[len(COLUMN_MARKER) :].strip(),
                base_path,
                reader,
                ids,
                settings,
            )
            continue

        if line.startswith(TASK_MARKER):
            scan.finalize_task()
            if scan.column is not None and not scan.column.include_mode:
                title = _strip_checkbox(line[len(TASK_MARKER) :].strip())
                scan.task = Task(id=ids.new_task_id(), title=title)
            continue

        if scan.task is not None:
            if line.startswith(DESCRIPTION_INDENT):
                line = line[len(DESCRIPTION_INDENT) :]
            scan.description.append(line)
            continue

        # Blank or stray lines outside a task carry no structure

    if state is ParserState.IN_YAML:
        log.debug("front_matter_unterminated")
        return ParseResult(board=Board(), included_files=included_files)

    scan.push_column()

    if footer_lines:
        board.kanban_footer = "\n".join(footer_lines).rstrip("\n")

    column_include_files: dict[str, None] = {}
    for column in board.columns:
        for path in column.include_files or []:
            column_include_files.setdefault(path, None)

    log.debug(
        "board_parsed",
        columns=len(board.columns),
        tasks=sum(len(c.tasks) for c in board.columns),
    )
    return ParseResult(
        board=board,
        included_files=included_files,
        column_include_files=list(column_include_files),
    )
