"""Semantic diff engine: matching, classification and merging of tasks."""

from todiff.engine.classifier import RecurrenceAttributor, classify_pair, recurrence_for_child
from todiff.engine.differ import DiffResult, SemanticDiffer, TaskChange
from todiff.engine.matcher import MatchResult, TaskMatcher, TaskPair
from todiff.engine.merge import MergeResult, ThreeWayMerger
from todiff.engine.recurrence import add_interval, next_due

__all__ = [
    "SemanticDiffer",
    "DiffResult",
    "TaskChange",
    "TaskMatcher",
    "TaskPair",
    "MatchResult",
    "classify_pair",
    "recurrence_for_child",
    "RecurrenceAttributor",
    "ThreeWayMerger",
    "MergeResult",
    "add_interval",
    "next_due",
]
