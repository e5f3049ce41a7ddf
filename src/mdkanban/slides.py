"""Slide deck conversion for include-mode columns.

A slide document is Markdown with slides separated by ``---`` lines::

    # First slide
    Notes for the first slide

    ---

    # Second slide

Each slide becomes one task: its heading is the title and the rest of the
slide is the description.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import yaml

from mdkanban.ids import IdGenerator
from mdkanban.models import Task

SLIDE_SEPARATOR = re.compile(r"^---[ \t]*$", re.MULTILINE)
HEADING = re.compile(r"^#{1,6}\s+(.*)$")

DEFAULT_TITLE_SCAN_LINES = 3


@dataclass
class Slide:
    """One slide of a presentation document."""

    title: str | None
    content: str
    slide_number: int


def split_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Separate a leading YAML front matter block from a slide document.

    Args:
        text: Slide document content.

    Returns:
        Tuple of (front matter dict, remaining content). Content without a
        front matter mapping is returned unchanged with an empty dict.
    """
    lines = text.split("\n")
    if not lines or lines[0].rstrip() != "---":
        return {}, text

    for index in range(1, len(lines)):
        if lines[index].rstrip() == "---":
            try:
                data = yaml.safe_load("\n".join(lines[1:index]))
            except yaml.YAMLError:
                return {}, text  # Not YAML, first chunk is a slide
            if not isinstance(data, dict):
                return {}, text
            return data, "\n".join(lines[index + 1 :])

    return {}, text


def _extract_title(lines: list[str], scan_lines: int) -> tuple[str | None, int]:
    """Find the title line of a slide.

    Returns:
        Tuple of (title, line index), or (None, -1) for a blank slide.
    """
    non_empty = [i for i, line in enumerate(lines) if line.strip()]
    if not non_empty:
        return None, -1

    for index in non_empty[:scan_lines]:
        match = HEADING.match(lines[index].strip())
        if match:
            return match.group(1).strip(), index

    first = non_empty[0]
    return lines[first].strip(), first


def parse_slides(
    text: str, scan_lines: int = DEFAULT_TITLE_SCAN_LINES
) -> list[Slide]:
    """Split a slide document into slides.

    Args:
        text: Slide document content.
        scan_lines: How many non-empty lines to search for a heading.

    Returns:
        Non-empty slides in document order.
    """
    if not text or not text.strip():
        return []

    _, body = split_front_matter(text.replace("\r\n", "\n").replace("\r", "\n"))
    slides: list[Slide] = []

    for number, chunk in enumerate(SLIDE_SEPARATOR.split(body), start=1):
        if not chunk.strip():
            continue

        lines = chunk.strip("\n").split("\n")
        title, title_index = _extract_title(lines, scan_lines)
        if title_index >= 0:
            lines = lines[:title_index] + lines[title_index + 1 :]

        slides.append(
            Slide(title=title, content="\n".join(lines).strip(), slide_number=number)
        )

    return slides


def slides_to_tasks(
    slides: Iterable[Slide], ids: IdGenerator | None = None
) -> list[Task]:
    """Convert slides to kanban tasks."""
    ids = ids or IdGenerator()
    return [
        Task(
            id=ids.new_task_id(),
            title=slide.title or "",
            description=slide.content or None,
        )
        for slide in slides
    ]


def to_tasks(
    text: str,
    ids: IdGenerator | None = None,
    scan_lines: int = DEFAULT_TITLE_SCAN_LINES,
) -> list[Task]:
    """Convert a slide document to tasks."""
    return slides_to_tasks(parse_slides(text, scan_lines), ids)


def to_text(tasks: Iterable[Task]) -> str:
    """Convert tasks back to a slide document.

    Args:
        tasks: Tasks in slide order.

    Returns:
        Slide markdown ending in a single newline, or "" for no slides.
    """
    slides: list[str] = []
    for task in tasks:
        parts: list[str] = []
        if task.title:
            parts.append(f"# {task.title}")
        if task.description and task.description.strip():
            parts.append(task.description.strip())
        if parts:
            slides.append("\n\n".join(parts))

    if not slides:
        return ""
    return "\n\n---\n\n".join(slides) + "\n"
