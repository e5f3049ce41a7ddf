"""Tag-driven automatic sorting of cards."""

from mdkanban.autosort.engine import (
    AutoSortReport,
    CardMove,
    GatherRule,
    collect_rules,
    perform_automatic_sort,
    sort_tasks_by_date,
    sort_tasks_by_name,
)
from mdkanban.autosort.expressions import (
    And,
    Compare,
    Invalid,
    Node,
    Not,
    Or,
    PersonTest,
    compile_expression,
    evaluate,
    parse_expression,
)
from mdkanban.autosort.metadata import (
    CardMetadata,
    extract_date,
    extract_person_names,
    has_sticky,
    has_typed_date,
)

__all__ = [
    # Engine
    "AutoSortReport",
    "CardMove",
    "GatherRule",
    "collect_rules",
    "perform_automatic_sort",
    "sort_tasks_by_date",
    "sort_tasks_by_name",
    # Expressions
    "And",
    "Compare",
    "Invalid",
    "Node",
    "Not",
    "Or",
    "PersonTest",
    "compile_expression",
    "evaluate",
    "parse_expression",
    # Metadata
    "CardMetadata",
    "extract_date",
    "extract_person_names",
    "has_sticky",
    "has_typed_date",
]
