"""Tag model for column titles.

A column title is free text that also carries layout and automation
directives::

    ## Today #row2 #gather_day=0 #sort-bydate
    ## Slides !!!columninclude(deck.md)!!!

``ColumnTitle.parse`` reads all of them in one pass. The raw title stays
the persisted form; helpers here rewrite it only where a tag changes.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Protocol, TypeVar

MIN_ROW = 1
MAX_ROW = 4

ROW_TAG = re.compile(r"#row(\d+)\b", re.IGNORECASE)
GATHER_TAG = re.compile(r"#(gather_[a-zA-Z0-9_&|=><!()\-]+|ungathered\b)")
SORT_TAG = re.compile(r"#sort-([a-zA-Z]+)")
COLUMN_INCLUDE = re.compile(r"!!!columninclude\(([^)]+)\)!!!", re.IGNORECASE)

_MULTI_SPACE = re.compile(r"\s{2,}")

DEFAULT_INCLUDE_TITLE = "Included Column"


class _Titled(Protocol):
    title: str


T = TypeVar("T", bound=_Titled)


def _squash(text: str) -> str:
    return _MULTI_SPACE.sub(" ", text).strip()


@dataclass(frozen=True)
class ColumnTitle:
    """Structured view of a column title."""

    raw: str
    text: str
    row: int = MIN_ROW
    row_tags: tuple[str, ...] = ()
    gather_expressions: tuple[str, ...] = ()
    ungathered: bool = False
    sort_modes: tuple[str, ...] = ()
    include_files: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def parse(cls, raw: str) -> "ColumnTitle":
        """Parse a raw title into its display text and tags."""
        raw = raw or ""
        expressions: list[str] = []
        ungathered = False
        for tag in gather_tags(raw):
            if tag == "ungathered":
                ungathered = True
            else:
                expressions.append(tag[len("gather_") :])

        text = raw
        for pattern in (COLUMN_INCLUDE, ROW_TAG, GATHER_TAG, SORT_TAG):
            text = pattern.sub("", text)

        return cls(
            raw=raw,
            text=_squash(text),
            row=get_column_row(raw),
            row_tags=tuple(m.group(0) for m in ROW_TAG.finditer(raw)),
            gather_expressions=tuple(expressions),
            ungathered=ungathered,
            sort_modes=tuple(sort_tags(raw)),
            include_files=tuple(include_directives(raw)),
        )

    @property
    def is_include(self) -> bool:
        """Whether the title carries a column include directive."""
        return bool(self.include_files)

    def with_row(self, row: int) -> str:
        """Rewrite the raw title so it carries exactly one tag for ``row``.

        Row 1 is implicit, so no tag is appended for it.
        """
        clean = strip_row_tags(self.raw)
        if row > MIN_ROW:
            return f"{clean} #row{row}".strip()
        return clean

    def collapse_row_tags(self) -> str:
        """Keep only the last of several row tags.

        Titles with zero or one row tag are returned unchanged.
        """
        if len(self.row_tags) <= 1:
            return self.raw
        return f"{strip_row_tags(self.raw)} {self.row_tags[-1]}".strip()


# Row tags


def get_column_row(title: str) -> int:
    """Get the row a column belongs to.

    Args:
        title: Column title, possibly containing ``#row<N>``.

    Returns:
        Row number clamped to 1-4; 1 when no row tag is present.
    """
    if not title:
        return MIN_ROW
    match = ROW_TAG.search(title)
    if not match:
        return MIN_ROW
    return min(max(int(match.group(1)), MIN_ROW), MAX_ROW)


def strip_row_tags(title: str) -> str:
    """Remove every row tag and normalize spacing."""
    return _squash(ROW_TAG.sub("", title or ""))


def sort_columns_by_row(columns: Sequence[T]) -> list[T]:
    """Order columns by row, keeping document order within a row."""
    return sorted(columns, key=lambda column: get_column_row(column.title))


# Automation tags


def gather_tags(title: str) -> list[str]:
    """Get gather tags in declaration order (``gather_<expr>`` or ``ungathered``)."""
    return GATHER_TAG.findall(title or "")


def sort_tags(title: str) -> list[str]:
    """Get ``#sort-<mode>`` modes in declaration order, lowercased."""
    return [mode.lower() for mode in SORT_TAG.findall(title or "")]


# Column includes


def include_directives(title: str) -> list[str]:
    """Get file paths from ``!!!columninclude(<path>)!!!`` directives."""
    return [path.strip() for path in COLUMN_INCLUDE.findall(title or "")]


def display_title(title: str, include_files: Iterable[str] = ()) -> str:
    """Build a presentation title for an include-mode column.

    Args:
        title: Raw column title with include directives.
        include_files: Paths referenced by the directives.

    Returns:
        Title without directives, else the first file's stem, else a
        generic label.
    """
    text = _squash(COLUMN_INCLUDE.sub("", title or ""))
    if text:
        return text
    for path in include_files:
        stem = PurePosixPath(path.replace("\\", "/")).stem
        if stem:
            return stem
    return DEFAULT_INCLUDE_TITLE
