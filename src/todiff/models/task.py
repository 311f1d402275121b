"""Data models for todo.txt tasks."""

import re
from datetime import date
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

_RECURRENCE_RE = re.compile(r"^(\+)?(\d+)([dwmy])$")
_WHITESPACE_RE = re.compile(r"\s+")


class RecurrenceUnit(str, Enum):
    """Calendar unit of a recurrence interval."""

    DAY = "d"
    WEEK = "w"
    MONTH = "m"
    YEAR = "y"


class RecurrenceSpec(BaseModel):
    """Parsed value of a `rec:` tag, e.g. `1w` or `+1m`."""

    model_config = ConfigDict(frozen=True)

    strict: bool = Field(False, description="Recur from the due date rather than the completion date")
    amount: int = Field(..., gt=0, description="Number of units between occurrences")
    unit: RecurrenceUnit = Field(..., description="Unit of the interval")

    @classmethod
    def parse(cls, token: str) -> Optional["RecurrenceSpec"]:
        """Parse a recurrence token.

        Args:
            token: Value of the `rec:` tag

        Returns:
            RecurrenceSpec, or None if the token is malformed
        """
        match = _RECURRENCE_RE.match(token)
        if not match:
            return None
        amount = int(match.group(2))
        if amount <= 0:
            return None
        return cls(strict=bool(match.group(1)), amount=amount, unit=RecurrenceUnit(match.group(3)))

    def __str__(self) -> str:
        return f"{'+' if self.strict else ''}{self.amount}{self.unit.value}"


def normalize_text(text: str) -> str:
    """Collapse whitespace and lowercase free text for matching."""
    return _WHITESPACE_RE.sub(" ", text).strip().lower()


class Task(BaseModel):
    """A single todo.txt line, parsed into structured fields.

    Tasks are immutable once parsed. A line that could not be parsed at all
    keeps only `raw` and has `unparsed` set; such tasks are compared by raw
    text only.
    """

    model_config = ConfigDict(frozen=True)

    raw: str = Field(..., description="Original line")
    completed: bool = Field(False, description="Whether the line starts with the `x ` marker")
    completion_date: Optional[date] = Field(None, description="Date the task was completed")
    creation_date: Optional[date] = Field(None, description="Date the task was created")
    priority: Optional[str] = Field(None, description="Priority letter A-Z")
    description: str = Field("", description="Free text without project, context and tag tokens")
    projects: Tuple[str, ...] = Field(default_factory=tuple, description="`+project` tokens, in order")
    contexts: Tuple[str, ...] = Field(default_factory=tuple, description="`@context` tokens, in order")
    due: Optional[date] = Field(None, description="`due:` date")
    threshold: Optional[date] = Field(None, description="`t:` date")
    recurrence: Optional[RecurrenceSpec] = Field(None, description="`rec:` interval")
    extra_tags: Dict[str, str] = Field(default_factory=dict, description="Other `key:value` tags, in order")
    unparsed: bool = Field(False, description="Line could not be parsed at all")

    @property
    def key(self) -> Tuple[bool, str]:
        """Matching key: normalized description, namespaced by parse state."""
        if self.unparsed:
            return (True, normalize_text(self.raw))
        return (False, normalize_text(self.description))

    def render(self) -> str:
        """Serialize the task back to a todo.txt line in canonical order."""
        if self.unparsed:
            return self.raw

        parts = []
        if self.completed:
            parts.append("x")
            if self.completion_date:
                parts.append(self.completion_date.isoformat())
        elif self.priority:
            parts.append(f"({self.priority})")
        if self.creation_date:
            parts.append(self.creation_date.isoformat())
        if self.description:
            parts.append(self.description)
        parts.extend(f"+{p}" for p in self.projects)
        parts.extend(f"@{c}" for c in self.contexts)
        if self.due:
            parts.append(f"due:{self.due.isoformat()}")
        if self.threshold:
            parts.append(f"t:{self.threshold.isoformat()}")
        if self.recurrence:
            parts.append(f"rec:{self.recurrence}")
        parts.extend(f"{k}:{v}" for k, v in self.extra_tags.items())
        return " ".join(parts)

    def __str__(self) -> str:
        return self.raw
