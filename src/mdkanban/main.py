"""mdkanban CLI entry point."""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

import structlog
from dotenv import load_dotenv

from mdkanban import __version__
from mdkanban.autosort import perform_automatic_sort
from mdkanban.config import Settings, load_settings
from mdkanban.document import generate_markdown, parse_markdown
from mdkanban.models import Board, ParseResult
from mdkanban.operations import BoardOperations
from mdkanban.slides import to_tasks
from mdkanban.titles import ColumnTitle, sort_columns_by_row

# ANSI color codes
RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
CYAN = "\033[36m"
YELLOW = "\033[33m"


def configure_logging(level: str) -> None:
    """Configure structlog for the application."""
    # Configure stdlib logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _read_board(path: Path, settings: Settings) -> ParseResult | None:
    """Read and parse a board file, reporting problems on stderr."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        print(f"Cannot read {path}: {e}", file=sys.stderr)
        return None

    result = parse_markdown(text, path.parent, settings=settings)
    if not result.board.valid:
        print(
            f"{path} is not a kanban board (front matter must contain "
            f"'{settings.board_marker}')",
            file=sys.stderr,
        )
        return None
    return result


def _emit(board: Board, path: Path, write: bool) -> None:
    """Print the regenerated document or write it back."""
    markdown = generate_markdown(board)
    if write:
        path.write_text(markdown, encoding="utf-8")
        print(f"Wrote {path}")
    else:
        sys.stdout.write(markdown)


def format_board_summary(result: ParseResult) -> str:
    """Format a human-readable board overview.

    Args:
        result: Parsed document.

    Returns:
        Multi-line summary, columns grouped by row.
    """
    board = result.board
    lines = [f"{BOLD}{board.title or '(untitled board)'}{RESET}"]

    current_row = 0
    for column in sort_columns_by_row(board.columns):
        if column.row != current_row:
            current_row = column.row
            lines.append(f"{DIM}row {current_row}{RESET}")
        parsed = ColumnTitle.parse(column.title)
        title = parsed.text or column.display_title or column.title
        suffix = f" {YELLOW}[include]{RESET}" if column.include_mode else ""
        lines.append(f"  {CYAN}{title}{RESET} ({len(column.tasks)}){suffix}")
        for task in column.tasks:
            lines.append(f"    - {task.title}")

    if result.included_files:
        lines.append(f"{DIM}includes: {', '.join(result.included_files)}{RESET}")
    return "\n".join(lines)


def cmd_show(path: Path, settings: Settings, as_json: bool) -> int:
    """Print a board summary or its JSON model."""
    result = _read_board(path, settings)
    if result is None:
        return 1
    if as_json:
        print(result.model_dump_json(indent=2))
    else:
        print(format_board_summary(result))
    return 0


def cmd_format(path: Path, settings: Settings, write: bool) -> int:
    """Regenerate a board document in canonical form."""
    result = _read_board(path, settings)
    if result is None:
        return 1
    _emit(result.board, path, write)
    return 0


def cmd_autosort(path: Path, settings: Settings, write: bool, today: date | None) -> int:
    """Run the gather rules over a board."""
    result = _read_board(path, settings)
    if result is None:
        return 1
    report = perform_automatic_sort(result.board, today=today)
    print(
        f"Moved {len(report.moves)} card(s), sorted "
        f"{len(report.sorted_column_ids)} column(s)",
        file=sys.stderr,
    )
    _emit(result.board, path, write)
    return 0


def cmd_cleanup_rows(path: Path, settings: Settings, write: bool) -> int:
    """Collapse duplicate row tags in column titles."""
    result = _read_board(path, settings)
    if result is None:
        return 1
    if not BoardOperations().cleanup_row_tags(result.board):
        print("No duplicate row tags found", file=sys.stderr)
    _emit(result.board, path, write)
    return 0


def cmd_slides(path: Path, settings: Settings) -> int:
    """List the tasks a slide document produces."""
    try:
        text = path.read_text(encoding=settings.include_encoding)
    except OSError as e:
        print(f"Cannot read {path}: {e}", file=sys.stderr)
        return 1

    tasks = to_tasks(text, scan_lines=settings.slide_title_scan_lines)
    for number, task in enumerate(tasks, start=1):
        print(f"{number:3d}. {task.title or '(untitled)'}")
    return 0


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{value}'") from None


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="mdkanban",
        description="Edit kanban boards stored as markdown",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # show command
    show_parser = subparsers.add_parser("show", help="Show a board overview")
    show_parser.add_argument("file", type=Path, help="Board markdown file")
    show_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the parsed board as JSON",
    )

    # format command
    format_parser = subparsers.add_parser(
        "format",
        help="Rewrite a board in canonical form",
    )
    format_parser.add_argument("file", type=Path, help="Board markdown file")
    format_parser.add_argument(
        "--write",
        action="store_true",
        help="Write the result back instead of printing it",
    )

    # autosort command
    autosort_parser = subparsers.add_parser(
        "autosort",
        help="File cards using #gather_ and #ungathered rules",
    )
    autosort_parser.add_argument("file", type=Path, help="Board markdown file")
    autosort_parser.add_argument(
        "--write",
        action="store_true",
        help="Write the result back instead of printing it",
    )
    autosort_parser.add_argument(
        "--today",
        type=_parse_date,
        default=None,
        help="Reference date YYYY-MM-DD (default: today)",
    )

    # cleanup-rows command
    cleanup_parser = subparsers.add_parser(
        "cleanup-rows",
        help="Collapse duplicate #row tags",
    )
    cleanup_parser.add_argument("file", type=Path, help="Board markdown file")
    cleanup_parser.add_argument(
        "--write",
        action="store_true",
        help="Write the result back instead of printing it",
    )

    # slides command
    slides_parser = subparsers.add_parser(
        "slides",
        help="List the cards a slide document produces",
    )
    slides_parser.add_argument("file", type=Path, help="Slide markdown file")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    root = args.file.expanduser().resolve().parent
    env_file = root / ".env"
    load_dotenv(env_file if env_file.exists() else None)

    settings = load_settings(root)
    configure_logging(settings.log_level)

    path = args.file.expanduser()
    if args.command == "show":
        return cmd_show(path, settings, args.json)
    if args.command == "format":
        return cmd_format(path, settings, args.write)
    if args.command == "autosort":
        return cmd_autosort(path, settings, args.write, args.today)
    if args.command == "cleanup-rows":
        return cmd_cleanup_rows(path, settings, args.write)
    if args.command == "slides":
        return cmd_slides(path, settings)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
