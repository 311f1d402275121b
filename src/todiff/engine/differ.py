"""Semantic diff of two todo.txt snapshots."""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

import structlog

from todiff.engine.classifier import RecurrenceAttributor, classify_pair
from todiff.engine.matcher import TaskMatcher
from todiff.models.changes import ChangeDescriptor
from todiff.models.config import DiffOptions
from todiff.models.task import Task
from todiff.parsing import parse_lines

logger = structlog.get_logger(__name__)


@dataclass
class TaskChange:
    """A matched task together with what changed about it."""

    before_index: int
    before: Task
    after: Task
    changes: List[ChangeDescriptor] = field(default_factory=list)
    recurrence_child: Optional[Task] = None

    @property
    def is_identical(self) -> bool:
        return not self.changes and self.recurrence_child is None


@dataclass
class DiffResult:
    """Everything that happened between two snapshots.

    `pairs` holds every matched task, changed or not, in before order.
    """

    pairs: List[TaskChange] = field(default_factory=list)
    new: List[Task] = field(default_factory=list)
    removed: List[Task] = field(default_factory=list)

    @property
    def changed(self) -> List[TaskChange]:
        return [pair for pair in self.pairs if not pair.is_identical]

    @property
    def is_empty(self) -> bool:
        return not self.new and not self.removed and not self.changed


class SemanticDiffer:
    """Computes task-level differences between two snapshots.

    Each call is a pure function of its inputs; nothing is kept between runs.
    """

    def __init__(self, options: Optional[DiffOptions] = None) -> None:
        """Initialize the differ.

        Args:
            options: Matching and parsing options. Defaults disable fuzzy matching.
        """
        self.options = options or DiffOptions()
        self.matcher = TaskMatcher(fuzzy_threshold=self.options.fuzzy_threshold)

    def diff(self, before: Sequence[Task], after: Sequence[Task]) -> DiffResult:
        """Diff two parsed snapshots.

        Args:
            before: Tasks of the older snapshot, in file order
            after: Tasks of the newer snapshot, in file order

        Returns:
            DiffResult
        """
        match = self.matcher.match(before, after)

        attributor = RecurrenceAttributor(match.pairs)
        new_tasks = [
            after[index]
            for index in match.unmatched_after
            if not attributor.attribute(index, after[index])
        ]

        pairs = []
        for pair in match.pairs:
            claim = attributor.claimed.get(pair.before_index)
            child, recurred = (claim[1], claim[2]) if claim else (None, None)
            pairs.append(
                TaskChange(
                    before_index=pair.before_index,
                    before=pair.before,
                    after=pair.after,
                    changes=classify_pair(pair.before, pair.after, recurred),
                    recurrence_child=child,
                )
            )

        result = DiffResult(
            pairs=pairs,
            new=new_tasks,
            removed=[before[index] for index in match.unmatched_before],
        )
        logger.info(
            "computed_diff",
            changed=len(result.changed),
            new=len(result.new),
            removed=len(result.removed),
            recurred=len(attributor.claimed),
        )
        return result

    def diff_lines(self, before_lines: Iterable[str], after_lines: Iterable[str]) -> DiffResult:
        """Parse two snapshots from decoded lines and diff them."""
        workers = self.options.workers
        return self.diff(parse_lines(before_lines, workers), parse_lines(after_lines, workers))
