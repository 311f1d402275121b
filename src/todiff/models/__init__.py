"""Data models for todo.txt diffing."""

from todiff.models.changes import (
    AnyChange,
    ChangeDescriptor,
    Completed,
    CompletionDateChanged,
    ContextsChanged,
    CreationDateChanged,
    DescriptionChanged,
    DueChanged,
    Postponed,
    PriorityAdded,
    PriorityChanged,
    PriorityRemoved,
    ProjectsChanged,
    RecurrenceChanged,
    Recurred,
    TagChanged,
    ThresholdChanged,
    Uncompleted,
    Unparsed,
)
from todiff.models.config import DiffOptions
from todiff.models.task import RecurrenceSpec, RecurrenceUnit, Task

__all__ = [
    "Task",
    "RecurrenceSpec",
    "RecurrenceUnit",
    "DiffOptions",
    "ChangeDescriptor",
    "AnyChange",
    "Completed",
    "Uncompleted",
    "CompletionDateChanged",
    "Recurred",
    "Postponed",
    "DueChanged",
    "PriorityAdded",
    "PriorityRemoved",
    "PriorityChanged",
    "ThresholdChanged",
    "CreationDateChanged",
    "DescriptionChanged",
    "ProjectsChanged",
    "ContextsChanged",
    "RecurrenceChanged",
    "TagChanged",
    "Unparsed",
]
