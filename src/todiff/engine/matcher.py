"""Pairing of tasks between a before and an after snapshot.

todo.txt has no stable task identifier, so pairing is heuristic:

1. Tasks are grouped by their normalized description (the matching key).
2. Groups with the same number of tasks on both sides pair up in snapshot
   order.
3. Groups with differing counts are resolved by greedy maximum-similarity
   assignment, highest score first, ties broken by snapshot order.
4. Optionally, tasks whose key exists on only one side are paired by
   description similarity, which catches edited descriptions.

Whatever remains unmatched is a removal (before side) or a candidate new
task (after side).
"""

from dataclasses import dataclass, field
from datetime import date
from difflib import SequenceMatcher
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

import structlog

from todiff.models.task import Task

logger = structlog.get_logger(__name__)

DUE_WEIGHT = 3.0
COMPLETION_PENALTY = 1.0


def date_proximity(a: Optional[date], b: Optional[date]) -> float:
    """Score in [0, 1]: 1 for equal (or both missing) dates, decaying with distance."""
    if a is None and b is None:
        return 1.0
    if a is None or b is None:
        return 0.0
    return 1.0 / (1 + abs((a - b).days))


def set_overlap(a: Sequence[str], b: Sequence[str]) -> float:
    """Jaccard overlap of two token collections; 1 when both are empty."""
    left, right = set(a), set(b)
    if not left and not right:
        return 1.0
    return len(left & right) / len(left | right)


def similarity_score(before: Task, after: Task) -> float:
    """Weighted field-by-field similarity of two tasks sharing a key."""
    score = 0.0
    if before.priority == after.priority:
        score += 1.0
    score += DUE_WEIGHT * date_proximity(before.due, after.due)
    score += date_proximity(before.threshold, after.threshold)
    score += set_overlap(before.projects, after.projects)
    score += set_overlap(before.contexts, after.contexts)
    if before.completed != after.completed:
        score -= COMPLETION_PENALTY
    return score


@dataclass(frozen=True)
class TaskPair:
    """A before-task and the after-task it became."""

    before_index: int
    after_index: int
    before: Task
    after: Task


@dataclass
class MatchResult:
    """Outcome of matching two snapshots.

    Every before index appears exactly once in `pairs` or `unmatched_before`,
    and every after index exactly once in `pairs` or `unmatched_after`.
    """

    pairs: List[TaskPair] = field(default_factory=list)
    unmatched_before: List[int] = field(default_factory=list)
    unmatched_after: List[int] = field(default_factory=list)


def _group_by_key(tasks: Sequence[Task]) -> Dict[Hashable, List[int]]:
    groups: Dict[Hashable, List[int]] = {}
    for index, task in enumerate(tasks):
        groups.setdefault(task.key, []).append(index)
    return groups


def _greedy(candidates: List[Tuple[float, int, int]]) -> List[Tuple[int, int]]:
    """Assign highest-scoring (before, after) candidates first."""
    candidates.sort(key=lambda c: (-c[0], c[1], c[2]))
    used_before = set()
    used_after = set()
    assigned = []
    for _, b, a in candidates:
        if b in used_before or a in used_after:
            continue
        used_before.add(b)
        used_after.add(a)
        assigned.append((b, a))
    return assigned


class TaskMatcher:
    """Produces a deterministic 1:1 pairing between two task sequences."""

    def __init__(self, fuzzy_threshold: Optional[float] = None) -> None:
        """Initialize the matcher.

        Args:
            fuzzy_threshold: Minimum description similarity ratio (0-1) for
                pairing tasks across different keys. None disables it.
        """
        self.fuzzy_threshold = fuzzy_threshold

    def match(self, before: Sequence[Task], after: Sequence[Task]) -> MatchResult:
        """Match tasks of two snapshots.

        Args:
            before: Tasks of the older snapshot, in file order
            after: Tasks of the newer snapshot, in file order

        Returns:
            MatchResult with pairs sorted by before index
        """
        before_groups = _group_by_key(before)
        after_groups = _group_by_key(after)

        matched: List[Tuple[int, int]] = []
        one_sided_before: List[int] = []
        one_sided_after: List[int] = []

        for key, b_indices in before_groups.items():
            a_indices = after_groups.get(key)
            if not a_indices:
                one_sided_before.extend(b_indices)
                continue

            if len(b_indices) == len(a_indices):
                matched.extend(zip(b_indices, a_indices))
                continue

            candidates = [
                (similarity_score(before[b], after[a]), b, a)
                for b in b_indices
                for a in a_indices
            ]
            assigned = _greedy(candidates)
            matched.extend(assigned)
            logger.debug(
                "matched_key_group",
                key=key[1][:40],
                before=len(b_indices),
                after=len(a_indices),
                paired=len(assigned),
            )

        for key, a_indices in after_groups.items():
            if key not in before_groups:
                one_sided_after.extend(a_indices)

        if self.fuzzy_threshold is not None and one_sided_before and one_sided_after:
            fuzzy = self._match_fuzzy(before, after, one_sided_before, one_sided_after)
            matched.extend(fuzzy)

        matched_before = {b for b, _ in matched}
        matched_after = {a for _, a in matched}

        result = MatchResult(
            pairs=[
                TaskPair(before_index=b, after_index=a, before=before[b], after=after[a])
                for b, a in sorted(matched)
            ],
            unmatched_before=[i for i in range(len(before)) if i not in matched_before],
            unmatched_after=[i for i in range(len(after)) if i not in matched_after],
        )
        logger.debug(
            "matched_snapshots",
            pairs=len(result.pairs),
            unmatched_before=len(result.unmatched_before),
            unmatched_after=len(result.unmatched_after),
        )
        return result

    def _match_fuzzy(
        self,
        before: Sequence[Task],
        after: Sequence[Task],
        before_indices: List[int],
        after_indices: List[int],
    ) -> List[Tuple[int, int]]:
        """Pair leftover tasks whose descriptions are similar enough."""
        candidates = []
        for b in before_indices:
            for a in after_indices:
                if before[b].unparsed != after[a].unparsed:
                    continue
                ratio = SequenceMatcher(None, before[b].key[1], after[a].key[1]).ratio()
                if ratio >= self.fuzzy_threshold:
                    candidates.append((ratio, b, a))

        assigned = _greedy(candidates)
        if assigned:
            logger.debug("fuzzy_matched", pairs=len(assigned), threshold=self.fuzzy_threshold)
        return assigned
