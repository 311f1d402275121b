"""Snapshot extraction from version control."""

from todiff.extraction.git_history import TodoHistory, TodoRevision

__all__ = ["TodoHistory", "TodoRevision"]
