"""todiff: semantic diffs of todo.txt files."""

__version__ = "0.5.0"
