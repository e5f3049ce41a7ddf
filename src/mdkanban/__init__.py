"""mdkanban: Markdown kanban document engine."""

from mdkanban.autosort import AutoSortReport, perform_automatic_sort
from mdkanban.document import generate_markdown, parse_markdown
from mdkanban.ids import IdGenerator
from mdkanban.models import Board, Column, ParseResult, Task
from mdkanban.operations import BoardOperations

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "AutoSortReport",
    "Board",
    "BoardOperations",
    "Column",
    "IdGenerator",
    "ParseResult",
    "Task",
    "generate_markdown",
    "parse_markdown",
    "perform_automatic_sort",
]
