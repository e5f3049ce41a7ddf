"""Rule-based automatic filing of cards into columns."""

from dataclasses import dataclass, field
from datetime import date

import structlog

from mdkanban.autosort.expressions import Node, compile_expression, evaluate
from mdkanban.autosort.metadata import CardMetadata
from mdkanban.ids import short_id
from mdkanban.models import Board, Column, Task
from mdkanban.operations import title_sort_key
from mdkanban.titles import ColumnTitle

log = structlog.get_logger()

SORT_BY_DATE = "bydate"
SORT_BY_NAME = "byname"


@dataclass(frozen=True)
class GatherRule:
    """A compiled ``#gather_<expr>`` tag of one column."""

    column: Column
    expression: str
    node: Node


@dataclass(frozen=True)
class CardMove:
    """One card relocated by the automatic sort."""

    task_id: str
    from_column_id: str
    to_column_id: str


@dataclass
class AutoSortReport:
    """Outcome of an automatic sort run."""

    success: bool = True
    moves: list[CardMove] = field(default_factory=list)
    sorted_column_ids: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.success


def collect_rules(board: Board) -> tuple[list[GatherRule], list[Column]]:
    """Collect gather rules and ungathered columns in document order.

    Include-mode columns are skipped: their tasks come from slide files.

    Returns:
        Tuple of (gather rules, ungathered columns).
    """
    rules: list[GatherRule] = []
    ungathered: list[Column] = []

    for column in board.columns:
        if column.include_mode:
            continue
        parsed = ColumnTitle.parse(column.title)
        for expression in parsed.gather_expressions:
            rules.append(GatherRule(column, expression, compile_expression(expression)))
        if parsed.ungathered:
            ungathered.append(column)

    return rules, ungathered


def sort_tasks_by_date(column: Column) -> None:
    """Order tasks by due date ascending; undated tasks go last."""

    def key(task: Task) -> tuple[bool, str]:
        due = CardMetadata.from_task(task).date
        return due is None, due or ""

    column.tasks.sort(key=key)


def sort_tasks_by_name(column: Column) -> None:
    """Order tasks by title."""
    column.tasks.sort(key=title_sort_key)


def perform_automatic_sort(board: Board, today: date | None = None) -> AutoSortReport:
    """File cards into columns according to their gather rules.

    Cards are tested in document order against every gather rule in
    document order; the first matching rule wins. Tagged cards that no rule
    claims go to the first ``#ungathered`` column. ``@sticky`` cards never
    move. Columns tagged ``#sort-bydate`` or ``#sort-byname`` are sorted
    afterwards.

    Args:
        board: Board to modify in place.
        today: Reference date for day offsets (defaults to today).

    Returns:
        Report of the moves and sorted columns.
    """
    if not board.valid:
        return AutoSortReport(success=False)

    today = today or date.today()
    rules, ungathered = collect_rules(board)

    # Destinations keyed by task identity, in the order they were decided
    destinations: dict[int, tuple[Task, Column, Column]] = {}
    unmatched: list[tuple[Task, Column, CardMetadata]] = []

    for column in board.columns:
        if column.include_mode:
            continue
        for task in column.tasks:
            meta = CardMetadata.from_task(task)
            if meta.sticky:
                continue

            for rule in rules:
                if evaluate(rule.node, meta, today):
                    destinations[id(task)] = (task, column, rule.column)
                    break
            else:
                unmatched.append((task, column, meta))

    if ungathered:
        target = ungathered[0]
        for task, column, meta in unmatched:
            if meta.has_tags:
                destinations[id(task)] = (task, column, target)

    report = AutoSortReport()
    for task, source, target in destinations.values():
        if source is target:
            continue
        index = next(i for i, t in enumerate(source.tasks) if t is task)
        target.tasks.append(source.tasks.pop(index))
        report.moves.append(CardMove(task.id, source.id, target.id))

    for column in board.columns:
        modes = ColumnTitle.parse(column.title).sort_modes
        for mode in modes:
            if mode == SORT_BY_DATE:
                sort_tasks_by_date(column)
            elif mode == SORT_BY_NAME:
                sort_tasks_by_name(column)
            else:
                continue
            if column.id not in report.sorted_column_ids:
                report.sorted_column_ids.append(column.id)

    log.info(
        "autosort_complete",
        rules=len(rules),
        moved=len(report.moves),
        sorted_columns=[short_id(cid) for cid in report.sorted_column_ids],
    )
    return report
