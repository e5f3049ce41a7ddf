"""Identifier generation for columns and tasks.

Identifiers are opaque and ephemeral: they are issued on every parse and
mutation, never derived from content and never written to the document.
"""

import re
import uuid

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

COLUMN_PREFIX = "col-"
TASK_PREFIX = "task-"


def new_column_id() -> str:
    """Generate a column ID (``col-<uuid4>``)."""
    return f"{COLUMN_PREFIX}{uuid.uuid4()}"


def new_task_id() -> str:
    """Generate a task ID (``task-<uuid4>``)."""
    return f"{TASK_PREFIX}{uuid.uuid4()}"


def is_valid_uuid(value: str) -> bool:
    """Check whether a string is a canonical UUID."""
    return bool(_UUID_RE.match(value))


def short_id(value: str) -> str:
    """Get a short display form of an ID for log output.

    Args:
        value: A prefixed column or task ID.

    Returns:
        First 8 characters of the embedded UUID, or of the raw value.
    """
    _, _, rest = value.partition("-")
    if is_valid_uuid(rest):
        return rest[:8]
    return value[:8]


class IdGenerator:
    """Issues identifiers for one or more boards.

    Pass an instance (or a subclass) to the parser and to
    ``BoardOperations`` to control how identifiers are produced.
    """

    def new_column_id(self) -> str:
        """Generate a column ID."""
        return new_column_id()

    def new_task_id(self) -> str:
        """Generate a task ID."""
        return new_task_id()


class SequentialIdGenerator(IdGenerator):
    """Deterministic generator producing ``col-1``, ``task-1``, ...

    Useful for tests and for reproducible debug output.
    """

    def __init__(self) -> None:
        self._columns = 0
        self._tasks = 0

    def new_column_id(self) -> str:
        self._columns += 1
        return f"{COLUMN_PREFIX}{self._columns}"

    def new_task_id(self) -> str:
        self._tasks += 1
        return f"{TASK_PREFIX}{self._tasks}"
