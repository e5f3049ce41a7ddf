"""Shared fixtures for mdkanban tests."""

import pytest

from mdkanban.ids import SequentialIdGenerator
from mdkanban.models import Board


def board_shape(board: Board) -> dict:
    """Board content without identifiers, for structural comparison."""
    return {
        "valid": board.valid,
        "title": board.title,
        "yaml_header": board.yaml_header,
        "kanban_footer": board.kanban_footer,
        "columns": [
            {
                "title": column.title,
                "include_mode": column.include_mode,
                "tasks": [(task.title, task.description) for task in column.tasks],
            }
            for column in board.columns
        ],
    }


@pytest.fixture
def ids() -> SequentialIdGenerator:
    """Deterministic identifier generator."""
    return SequentialIdGenerator()


@pytest.fixture
def shape():
    """Helper turning a board into an id-free comparable structure."""
    return board_shape
