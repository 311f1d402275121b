"""Classification of matched task pairs into semantic changes."""

from typing import Dict, List, Optional, Tuple

import structlog

from todiff.engine.matcher import TaskPair
from todiff.engine.recurrence import next_due, recurrence_base
from todiff.models.changes import (
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
from todiff.models.task import Task

logger = structlog.get_logger(__name__)


def _added(before: tuple, after: tuple) -> tuple:
    return tuple(item for item in after if item not in before)


def classify_pair(before: Task, after: Task, recurred: Optional[Recurred] = None) -> List[ChangeDescriptor]:
    """List the differences between two versions of a task.

    Changes come out in a fixed order: completion, recurrence, postponement,
    priority, threshold, creation date, description, projects, contexts,
    recurrence interval, extra tags. Equal fields produce nothing.

    Args:
        before: Task as it was in the older snapshot
        after: Task as it is in the newer snapshot
        recurred: Recurrence attributed to this pair, if a child was found

    Returns:
        Ordered list of change descriptors, empty if the tasks are equivalent
    """
    if before.unparsed or after.unparsed:
        if before.raw != after.raw:
            return [Unparsed(before=before.raw, after=after.raw)]
        return []

    changes: List[ChangeDescriptor] = []
    completing = after.completed and not before.completed

    if completing:
        changes.append(Completed(on=after.completion_date))
    elif before.completed and not after.completed:
        changes.append(Uncompleted())
    elif before.completion_date != after.completion_date:
        changes.append(CompletionDateChanged(before=before.completion_date, after=after.completion_date))

    if recurred is not None:
        changes.append(recurred)

    # A due date moved along with a recurrence belongs to the Recurred change.
    threshold_absorbed = False
    if recurred is None and before.due != after.due:
        if before.due is not None and after.due is not None:
            delta = (after.due - before.due).days
            spec = after.recurrence or before.recurrence
            changes.append(Postponed(strict=spec.strict if spec else None, delta_days=delta))
            if (
                before.threshold is not None
                and after.threshold is not None
                and (after.threshold - before.threshold).days == delta
            ):
                threshold_absorbed = True
        else:
            changes.append(DueChanged(before=before.due, after=after.due))

    if before.priority != after.priority:
        if before.priority is None:
            changes.append(PriorityAdded(after=after.priority))
        elif after.priority is None:
            if not completing:
                changes.append(PriorityRemoved(before=before.priority))
        else:
            changes.append(PriorityChanged(before=before.priority, after=after.priority))

    if before.threshold != after.threshold and not threshold_absorbed:
        changes.append(ThresholdChanged(before=before.threshold, after=after.threshold))

    if before.creation_date != after.creation_date:
        changes.append(CreationDateChanged(before=before.creation_date, after=after.creation_date))

    if before.description != after.description:
        changes.append(DescriptionChanged(before=before.description, after=after.description))

    if set(before.projects) != set(after.projects):
        changes.append(
            ProjectsChanged(
                added=_added(before.projects, after.projects),
                removed=_added(after.projects, before.projects),
            )
        )

    if set(before.contexts) != set(after.contexts):
        changes.append(
            ContextsChanged(
                added=_added(before.contexts, after.contexts),
                removed=_added(after.contexts, before.contexts),
            )
        )

    if before.recurrence != after.recurrence:
        changes.append(
            RecurrenceChanged(
                before=str(before.recurrence) if before.recurrence else None,
                after=str(after.recurrence) if after.recurrence else None,
            )
        )

    keys = list(before.extra_tags) + [k for k in after.extra_tags if k not in before.extra_tags]
    for key in keys:
        old, new = before.extra_tags.get(key), after.extra_tags.get(key)
        if old != new:
            changes.append(TagChanged(key=key, before=old, after=new))

    return changes


def recurrence_for_child(pair: TaskPair, child: Task) -> Optional[Recurred]:
    """Check whether `child` is the next occurrence of the task in `pair`.

    The pair's after-task must be completed and recurring, the child must
    share the before-task's normalized description, and the child's due date
    must be exactly what the recurrence yields.

    Returns:
        The Recurred change to attach to the pair, or None
    """
    parent = pair.after
    if child.unparsed or parent.unparsed or not parent.completed:
        return None
    spec = parent.recurrence or pair.before.recurrence
    if spec is None or child.due is None:
        return None
    if child.key != pair.before.key:
        return None

    expected = next_due(spec, pair.before.due, parent.completion_date)
    if expected is None or expected != child.due:
        return None
    return Recurred(
        strict=spec.strict,
        from_date=recurrence_base(spec, pair.before.due, parent.completion_date),
    )


class RecurrenceAttributor:
    """Splits unmatched after-tasks into recurrence children and new tasks.

    Each pair can claim at most one child; candidates are considered in
    after-snapshot order and the first one that validates wins.
    """

    def __init__(self, pairs: List[TaskPair]) -> None:
        self.pairs = pairs
        self.claimed: Dict[int, Tuple[int, Task, Recurred]] = {}

    def attribute(self, child_index: int, child: Task) -> bool:
        """Try to attribute one unmatched after-task to a completed recurring pair.

        Returns:
            True if the task was claimed as a recurrence child
        """
        for pair in self.pairs:
            if pair.before_index in self.claimed:
                continue
            recurred = recurrence_for_child(pair, child)
            if recurred is None:
                continue
            self.claimed[pair.before_index] = (child_index, child, recurred)
            logger.debug(
                "recurrence_child_attributed",
                before_index=pair.before_index,
                after_index=child_index,
                strict=recurred.strict,
            )
            return True
        return False
