"""Markdown parsing and generation for kanban documents."""

from mdkanban.document.generator import generate_markdown, generate_slides
from mdkanban.document.parser import (
    ParserState,
    find_included_files,
    parse_markdown,
    resolve_include_path,
)

__all__ = [
    "ParserState",
    "find_included_files",
    "generate_markdown",
    "generate_slides",
    "parse_markdown",
    "resolve_include_path",
]
