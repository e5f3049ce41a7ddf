"""Card tag extraction.

Cards carry ``@`` tags in their title or description:

- ``@2025-03-27`` / ``@27-03-2025``: due date shorthand
- ``@due:2025-03-27``, ``@done:27-03-2025``: typed dates
- ``@sticky``: never moved by the automatic sort
- ``@alice``: any other tag names a person
"""

import re
from dataclasses import dataclass, field

from mdkanban.models import Task

_DATE = r"\d{4}-\d{2}-\d{2}|\d{2}-\d{2}-\d{4}"

SHORTHAND_DATE = re.compile(rf"@({_DATE})(?:\s|$)")
TYPED_DATE = re.compile(rf"@[a-zA-Z]+:({_DATE})(?:\s|$)")
STICKY = re.compile(r"@sticky(?:\s|$)")
PERSON_TAG = re.compile(r"@([a-zA-Z0-9_&-]+)(?![a-zA-Z0-9_&:-])")
ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
DMY_DATE = re.compile(r"^\d{2}-\d{2}-\d{4}$")

DEFAULT_DATE_TYPE = "due"


def normalize_date(value: str) -> str:
    """Convert ``DD-MM-YYYY`` to ``YYYY-MM-DD``; other forms pass through."""
    if DMY_DATE.match(value):
        day, month, year = value.split("-")
        return f"{year}-{month}-{day}"
    return value


def extract_date(text: str, date_type: str = DEFAULT_DATE_TYPE) -> str | None:
    """Extract a date tag from card text.

    Args:
        text: Card title and description.
        date_type: Tag type to look for; bare dates count as ``due``.

    Returns:
        Date as ``YYYY-MM-DD``, or None if the card has no such tag.
    """
    if not text:
        return None

    if date_type == DEFAULT_DATE_TYPE:
        match = SHORTHAND_DATE.search(text)
        if match:
            return normalize_date(match.group(1))

    typed = re.search(rf"@{re.escape(date_type)}:({_DATE})(?:\s|$)", text)
    if typed:
        return normalize_date(typed.group(1))

    return None


def has_typed_date(text: str) -> bool:
    """Check for a ``@<type>:<date>`` tag of any type."""
    return bool(text) and bool(TYPED_DATE.search(text))


def has_sticky(text: str) -> bool:
    """Check for a standalone ``@sticky`` tag."""
    return bool(text) and bool(STICKY.search(text))


def extract_person_names(text: str) -> list[str]:
    """Extract person tags, skipping dates and typed date prefixes."""
    if not text:
        return []
    return [
        name
        for name in PERSON_TAG.findall(text)
        if not ISO_DATE.match(name) and not DMY_DATE.match(name)
    ]


@dataclass(frozen=True)
class CardMetadata:
    """Tags extracted from one card."""

    date: str | None = None
    sticky: bool = False
    persons: tuple[str, ...] = field(default_factory=tuple)
    typed_date: bool = False

    @classmethod
    def from_text(cls, text: str) -> "CardMetadata":
        """Extract metadata from card text."""
        return cls(
            date=extract_date(text),
            sticky=has_sticky(text),
            persons=tuple(extract_person_names(text)),
            typed_date=has_typed_date(text),
        )

    @classmethod
    def from_task(cls, task: Task) -> "CardMetadata":
        """Extract metadata from a task's title and description."""
        return cls.from_text(task.text)

    @property
    def has_tags(self) -> bool:
        """Whether the card carries a date (of any type) or person tag."""
        return self.date is not None or self.typed_date or bool(self.persons)

    def has_person(self, name: str) -> bool:
        """Case-insensitive person tag membership."""
        wanted = name.lower()
        return any(person.lower() == wanted for person in self.persons)
