"""Markdown kanban generator, the inverse of the parser."""

from mdkanban import slides
from mdkanban.models import Board, Column


def generate_markdown(board: Board) -> str:
    """Serialize a board to markdown.

    Header and footer are written verbatim. Include-mode columns keep
    their directive in the heading and never write their tasks, which
    belong to the included slide documents.

    Args:
        board: Board to serialize.

    Returns:
        Markdown text ending with a single newline.
    """
    parts: list[str] = []

    if board.yaml_header:
        parts.append(f"{board.yaml_header}\n\n")

    if board.title:
        parts.append(f"# {board.title}\n\n")

    for column in board.columns:
        parts.append(f"## {column.title}\n")

        if not column.include_mode:
            for task in column.tasks:
                parts.append(f"- [ ] {task.title}\n")
                if task.description and task.description.strip():
                    for line in task.description.split("\n"):
                        parts.append(f"  {line}\n" if line else "\n")

        parts.append("\n")

    markdown = "".join(parts)

    if board.kanban_footer:
        markdown = markdown.rstrip("\n")
        if markdown:
            markdown += "\n\n"
        return markdown + board.kanban_footer.rstrip("\n") + "\n"

    return markdown.rstrip() + "\n"


def generate_slides(column: Column) -> str:
    """Serialize an include-mode column's tasks as a slide document."""
    return slides.to_text(column.tasks)
