"""Grouping of diff results into report sections."""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from todiff.engine.differ import DiffResult, TaskChange
from todiff.models.changes import COMPLETION_KINDS, POSTPONEMENT_KINDS, RECURRENCE_KINDS, AnyChange
from todiff.models.task import Task


class SectionKind(str, Enum):
    NEW = "new"
    CHANGED = "changed"
    REMOVED = "removed"


SECTION_TITLES = {
    SectionKind.NEW: "New tasks",
    SectionKind.CHANGED: "Changed tasks",
    SectionKind.REMOVED: "Removed tasks",
}


class ReportEntry(BaseModel):
    """One task in a report section."""

    line: str = Field(..., description="Original line of the task")
    changes: List[AnyChange] = Field(default_factory=list, description="Ordered changes, for changed tasks")
    follow_up: Optional[str] = Field(None, description="Line of the recurrence child, if any")


class ReportSection(BaseModel):
    kind: SectionKind
    title: str
    entries: List[ReportEntry] = Field(default_factory=list)


class Report(BaseModel):
    """Sections in display order; empty sections are left out."""

    sections: List[ReportSection] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.sections

    def section(self, kind: SectionKind) -> Optional[ReportSection]:
        for section in self.sections:
            if section.kind == kind:
                return section
        return None


def _change_rank(change: TaskChange) -> int:
    kinds = {c.kind for c in change.changes}
    if kinds & RECURRENCE_KINDS:
        return 0
    if kinds & COMPLETION_KINDS:
        return 1
    if kinds & POSTPONEMENT_KINDS:
        return 2
    return 3


def _creation_order(task: Task) -> tuple:
    # Undated tasks first.
    return (task.creation_date is not None, task.creation_date or date.min)


def build_report(result: DiffResult, show_removed: bool = True) -> Report:
    """Group a diff result into New, Changed and (optionally) Removed sections.

    Changed tasks are listed recurred first, then completed, then postponed,
    then everything else; new tasks by creation date. Ties keep snapshot order.

    Args:
        result: Output of the semantic differ
        show_removed: Whether to include the Removed tasks section

    Returns:
        Report
    """
    sections = [
        ReportSection(
            kind=SectionKind.NEW,
            title=SECTION_TITLES[SectionKind.NEW],
            entries=[ReportEntry(line=task.raw) for task in sorted(result.new, key=_creation_order)],
        ),
        ReportSection(
            kind=SectionKind.CHANGED,
            title=SECTION_TITLES[SectionKind.CHANGED],
            entries=[
                ReportEntry(
                    line=change.before.raw,
                    changes=change.changes,
                    follow_up=change.recurrence_child.raw if change.recurrence_child else None,
                )
                for change in sorted(result.changed, key=_change_rank)
            ],
        ),
    ]
    if show_removed:
        sections.append(
            ReportSection(
                kind=SectionKind.REMOVED,
                title=SECTION_TITLES[SectionKind.REMOVED],
                entries=[ReportEntry(line=task.raw) for task in result.removed],
            )
        )
    return Report(sections=[s for s in sections if s.entries])
