"""Three-way merge of todo.txt snapshots built on the semantic differ."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

import structlog

from todiff.engine.differ import DiffResult, SemanticDiffer
from todiff.models.config import DiffOptions
from todiff.models.task import Task

logger = structlog.get_logger(__name__)

CONFLICT_START = "<<<<<"
CONFLICT_BASE = "|||||"
CONFLICT_SEPARATOR = "====="
CONFLICT_END = ">>>>>"


@dataclass
class Conflict:
    """An ancestor task that both sides changed in different ways."""

    ancestor: Task
    current: List[Task]
    other: List[Task]

    def to_lines(self) -> List[str]:
        return (
            [CONFLICT_START]
            + [t.raw for t in self.current]
            + [CONFLICT_BASE, self.ancestor.raw, CONFLICT_SEPARATOR]
            + [t.raw for t in self.other]
            + [CONFLICT_END]
        )


@dataclass
class MergeResult:
    """Merged snapshot: tasks in ancestor order with conflicts inline, then new tasks."""

    chunks: List[Union[Task, Conflict]] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return any(isinstance(chunk, Conflict) for chunk in self.chunks)

    @property
    def tasks(self) -> Optional[List[Task]]:
        """Merged tasks, or None if the merge has conflicts."""
        if self.has_conflicts:
            return None
        return [chunk for chunk in self.chunks if isinstance(chunk, Task)]

    def to_text(self) -> str:
        lines: List[str] = []
        for chunk in self.chunks:
            if isinstance(chunk, Conflict):
                lines.extend(chunk.to_lines())
            else:
                lines.append(chunk.raw)
        return "\n".join(lines)


def _outcomes(result: DiffResult) -> Dict[int, Optional[List[Task]]]:
    """Map ancestor index to its outcome on one side.

    None means unchanged; a list holds what the task became (empty when it
    was deleted, two tasks when it recurred).
    """
    outcomes: Dict[int, Optional[List[Task]]] = {}
    for pair in result.pairs:
        if pair.is_identical:
            outcomes[pair.before_index] = None
        else:
            outcomes[pair.before_index] = [pair.after] + (
                [pair.recurrence_child] if pair.recurrence_child else []
            )
    return outcomes


def _same(left: List[Task], right: List[Task]) -> bool:
    return [t.render() for t in left] == [t.render() for t in right]


class ThreeWayMerger:
    """Merges two descendants of a common todo.txt ancestor."""

    def __init__(self, options: Optional[DiffOptions] = None) -> None:
        self.differ = SemanticDiffer(options)

    def merge(self, ancestor: Sequence[Task], current: Sequence[Task], other: Sequence[Task]) -> MergeResult:
        """Merge `current` and `other`, both derived from `ancestor`.

        A task left alone on one side takes the other side's outcome. Equal
        outcomes on both sides merge cleanly; anything else is a conflict.

        Args:
            ancestor: Tasks of the common ancestor
            current: Tasks of our version
            other: Tasks of their version

        Returns:
            MergeResult
        """
        left = self.differ.diff(ancestor, current)
        right = self.differ.diff(ancestor, other)
        left_outcomes = _outcomes(left)
        right_outcomes = _outcomes(right)

        result = MergeResult()
        for index, task in enumerate(ancestor):
            # Missing from the outcome map means the task was deleted on that side.
            left_tasks = left_outcomes.get(index, [])
            right_tasks = right_outcomes.get(index, [])

            if left_tasks is None and right_tasks is None:
                result.chunks.append(task)
            elif left_tasks is None:
                result.chunks.extend(right_tasks)
            elif right_tasks is None:
                result.chunks.extend(left_tasks)
            elif _same(left_tasks, right_tasks):
                result.chunks.extend(left_tasks)
            else:
                result.chunks.append(Conflict(ancestor=task, current=left_tasks, other=right_tasks))

        remaining = [t.render() for t in left.new]
        result.chunks.extend(left.new)
        for task in right.new:
            rendered = task.render()
            if rendered in remaining:
                remaining.remove(rendered)
            else:
                result.chunks.append(task)

        logger.info(
            "merged_snapshots",
            tasks=len(result.chunks),
            conflicts=sum(isinstance(c, Conflict) for c in result.chunks),
        )
        return result
