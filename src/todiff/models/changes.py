"""Semantic change descriptors emitted for a matched pair of tasks."""

from datetime import date
from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class _Change(BaseModel):
    model_config = ConfigDict(frozen=True)


class Completed(_Change):
    """The task was marked done."""

    kind: Literal["completed"] = "completed"
    on: Optional[date] = Field(None, description="Completion date, if recorded")


class Uncompleted(_Change):
    """The task was marked as not done again."""

    kind: Literal["uncompleted"] = "uncompleted"


class CompletionDateChanged(_Change):
    kind: Literal["completion_date_changed"] = "completion_date_changed"
    before: Optional[date] = None
    after: Optional[date] = None


class Recurred(_Change):
    """A recurrence child was created when the task was completed."""

    kind: Literal["recurred"] = "recurred"
    strict: bool = Field(..., description="Recurrence computed from the due date")
    from_date: date = Field(..., description="Base date the new occurrence was computed from")


class Postponed(_Change):
    """The due date moved by a number of days."""

    kind: Literal["postponed"] = "postponed"
    strict: Optional[bool] = Field(None, description="Strictness of the task's recurrence, None if it has none")
    delta_days: int = Field(..., description="Signed number of days the due date moved")


class DueChanged(_Change):
    """The due date was added or removed."""

    kind: Literal["due_changed"] = "due_changed"
    before: Optional[date] = None
    after: Optional[date] = None


class PriorityAdded(_Change):
    kind: Literal["priority_added"] = "priority_added"
    after: str


class PriorityRemoved(_Change):
    kind: Literal["priority_removed"] = "priority_removed"
    before: str


class PriorityChanged(_Change):
    kind: Literal["priority_changed"] = "priority_changed"
    before: str
    after: str


class ThresholdChanged(_Change):
    kind: Literal["threshold_changed"] = "threshold_changed"
    before: Optional[date] = None
    after: Optional[date] = None


class CreationDateChanged(_Change):
    kind: Literal["creation_date_changed"] = "creation_date_changed"
    before: Optional[date] = None
    after: Optional[date] = None


class DescriptionChanged(_Change):
    kind: Literal["description_changed"] = "description_changed"
    before: str
    after: str


class ProjectsChanged(_Change):
    kind: Literal["projects_changed"] = "projects_changed"
    added: Tuple[str, ...] = ()
    removed: Tuple[str, ...] = ()


class ContextsChanged(_Change):
    kind: Literal["contexts_changed"] = "contexts_changed"
    added: Tuple[str, ...] = ()
    removed: Tuple[str, ...] = ()


class RecurrenceChanged(_Change):
    """The `rec:` interval itself was edited."""

    kind: Literal["recurrence_changed"] = "recurrence_changed"
    before: Optional[str] = None
    after: Optional[str] = None


class TagChanged(_Change):
    """An opaque `key:value` tag was added, removed or edited."""

    kind: Literal["tag_changed"] = "tag_changed"
    key: str
    before: Optional[str] = None
    after: Optional[str] = None


class Unparsed(_Change):
    """Fallback for lines that could not be parsed: raw text differs."""

    kind: Literal["unparsed"] = "unparsed"
    before: str
    after: str


ChangeDescriptor = Union[
    Completed,
    Uncompleted,
    CompletionDateChanged,
    Recurred,
    Postponed,
    DueChanged,
    PriorityAdded,
    PriorityRemoved,
    PriorityChanged,
    ThresholdChanged,
    CreationDateChanged,
    DescriptionChanged,
    ProjectsChanged,
    ContextsChanged,
    RecurrenceChanged,
    TagChanged,
    Unparsed,
]

COMPLETION_KINDS = frozenset({"completed"})
RECURRENCE_KINDS = frozenset({"recurred"})
POSTPONEMENT_KINDS = frozenset({"postponed"})

# Discriminated form, for models that hold and serialize lists of changes.
AnyChange = Annotated[ChangeDescriptor, Field(discriminator="kind")]
