"""Gather rule expressions.

A column claims cards with ``#gather_<expr>`` tags. The grammar, loosest
binding first::

    expr    := and ("|" and)*
    and     := unary ("&" unary)*
    unary   := "!" unary | "(" expr ")" | atom
    atom    := N ("<" | ">") property        e.g. 0<day
             | property "!=" value           e.g. weekday!=sat
             | property ("<" | ">" | "=") value
             | name                          person tag, e.g. alice

Date properties are ``dayoffset``/``day``, ``weekday``/``weekdaynum`` and
``month``/``monthnum``. Any other property tests a person tag. Expressions
that cannot be parsed become ``Invalid`` and never match.
"""

import re
from dataclasses import dataclass
from datetime import date

from mdkanban.autosort.metadata import CardMetadata

WEEKDAYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")
MONTHS = (
    "jan",
    "feb",
    "mar",
    "apr",
    "may",
    "jun",
    "jul",
    "aug",
    "sep",
    "oct",
    "nov",
    "dec",
)

DAY_PROPERTIES = frozenset({"dayoffset", "day"})
WEEKDAY_PROPERTIES = frozenset({"weekday", "weekdaynum"})
MONTH_PROPERTIES = frozenset({"month", "monthnum"})
DATE_PROPERTIES = DAY_PROPERTIES | WEEKDAY_PROPERTIES | MONTH_PROPERTIES

TRUE_VALUES = frozenset({"1", "true"})

COMPARISON = re.compile(r"^([a-zA-Z0-9_-]+)([<>=])(.+)$")
REVERSED_RANGE = re.compile(r"^(-?\d+)([<>])([a-zA-Z]+)$")
FLIPPED = {"<": ">", ">": "<"}


# ═══════════════════════════════════════════════════════════════
# Expression tree
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Or:
    children: tuple["Node", ...]


@dataclass(frozen=True)
class And:
    children: tuple["Node", ...]


@dataclass(frozen=True)
class Not:
    inner: "Node"


@dataclass(frozen=True)
class Compare:
    """``<property><op><value>`` with op in ``<``, ``>``, ``=``, ``!=``."""

    property: str
    op: str
    value: str


@dataclass(frozen=True)
class PersonTest:
    name: str


@dataclass(frozen=True)
class Invalid:
    """An expression that could not be parsed; never matches."""

    source: str


Node = Or | And | Not | Compare | PersonTest | Invalid


# ═══════════════════════════════════════════════════════════════
# Parsing
# ═══════════════════════════════════════════════════════════════


def split_top_level(expr: str, operator: str) -> list[str] | None:
    """Split on ``operator`` outside parentheses.

    Args:
        expr: Expression text.
        operator: Single-character operator.

    Returns:
        Non-empty trimmed parts, or None if parentheses are unbalanced.
    """
    parts: list[str] = []
    current: list[str] = []
    depth = 0

    for char in expr:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return None
        elif char == operator and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)

    if depth != 0:
        return None
    parts.append("".join(current).strip())
    return [part for part in parts if part]


def _is_wrapped(expr: str) -> bool:
    """Whether the outer parentheses enclose the whole expression."""
    if not (expr.startswith("(") and expr.endswith(")")):
        return False
    depth = 0
    for index, char in enumerate(expr):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0 and index < len(expr) - 1:
                return False
    return depth == 0


def _parse_atom(expr: str) -> Node:
    if "!=" in expr:
        parts = expr.split("!=")
        if len(parts) == 2 and parts[0].strip() and parts[1].strip():
            return Compare(parts[0].strip().lower(), "!=", parts[1].strip())
        return Invalid(expr)

    reversed_range = REVERSED_RANGE.match(expr)
    if reversed_range:
        value, op, prop = reversed_range.groups()
        return Compare(prop.lower(), FLIPPED[op], value)

    comparison = COMPARISON.match(expr)
    if comparison:
        prop, op, value = comparison.groups()
        return Compare(prop.strip().lower(), op, value.strip())

    if any(char in expr for char in "()<>=!&|"):
        return Invalid(expr)
    return PersonTest(expr)


def _parse(expr: str) -> Node:
    expr = (expr or "").strip()
    if not expr:
        return Invalid(expr)

    for operator, node_type in (("|", Or), ("&", And)):
        parts = split_top_level(expr, operator)
        if parts is None:
            return Invalid(expr)
        if len(parts) > 1:
            return node_type(tuple(_parse(part) for part in parts))
        if not parts:
            return Invalid(expr)
        if parts[0] != expr:
            # Dangling operator such as "alice|"
            return _parse(parts[0])

    if expr.startswith("!") and not expr.startswith("!="):
        return Not(_parse(expr[1:]))

    if _is_wrapped(expr):
        return _parse(expr[1:-1])

    return _parse_atom(expr)


def _has_invalid(node: Node) -> bool:
    if isinstance(node, Invalid):
        return True
    if isinstance(node, (Or, And)):
        return any(_has_invalid(child) for child in node.children)
    if isinstance(node, Not):
        return _has_invalid(node.inner)
    return False


def parse_expression(expr: str) -> Node:
    """Parse a gather expression into a tree.

    Args:
        expr: Expression text after ``#gather_``.

    Returns:
        Root node. Malformed input anywhere in the expression yields a
        single ``Invalid`` node so the whole rule never matches.
    """
    node = _parse(expr)
    if _has_invalid(node):
        return Invalid(expr)
    return node


compile_expression = parse_expression


# ═══════════════════════════════════════════════════════════════
# Evaluation
# ═══════════════════════════════════════════════════════════════


def _to_int(value: str, names: tuple[str, ...] = ()) -> int | None:
    lowered = value.lower()
    if lowered in names:
        return names.index(lowered) + 1
    try:
        return int(value)
    except ValueError:
        return None


def _compare_numbers(actual: int, op: str, expected: int) -> bool:
    if op == "=":
        return actual == expected
    if op == "!=":
        return actual != expected
    if op == "<":
        return actual < expected
    if op == ">":
        return actual > expected
    return False


def _card_date(meta: CardMetadata) -> date | None:
    if meta.date is None:
        return None
    try:
        return date.fromisoformat(meta.date)
    except ValueError:
        return None


def _evaluate_date(node: Compare, meta: CardMetadata, today: date) -> bool:
    card_date = _card_date(meta)
    if card_date is None:
        return False

    if node.property in DAY_PROPERTIES:
        actual = (card_date - today).days
        expected = _to_int(node.value)
    elif node.property in WEEKDAY_PROPERTIES:
        actual = card_date.isoweekday()
        expected = _to_int(node.value, WEEKDAYS)
    else:
        actual = card_date.month
        expected = _to_int(node.value, MONTHS)

    if expected is None:
        return False
    return _compare_numbers(actual, node.op, expected)


def _evaluate_person(node: Compare, meta: CardMetadata) -> bool:
    present = meta.has_person(node.property)
    wants_tag = node.value.lower() in TRUE_VALUES
    if node.op == "=":
        return present if wants_tag else not present
    if node.op == "!=":
        return not present if wants_tag else present
    return present


def evaluate(node: Node, meta: CardMetadata, today: date) -> bool:
    """Evaluate an expression tree against a card.

    Args:
        node: Parsed expression.
        meta: Tags extracted from the card.
        today: Reference date for day offsets.

    Returns:
        True if the card matches.
    """
    if isinstance(node, Or):
        return any(evaluate(child, meta, today) for child in node.children)
    if isinstance(node, And):
        return all(evaluate(child, meta, today) for child in node.children)
    if isinstance(node, Not):
        return not evaluate(node.inner, meta, today)
    if isinstance(node, Compare):
        if node.property in DATE_PROPERTIES:
            return _evaluate_date(node, meta, today)
        return _evaluate_person(node, meta)
    if isinstance(node, PersonTest):
        return meta.has_person(node.name)
    return False
