"""Parsing of todo.txt lines into Task records."""

import re
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Dict, Iterable, List, Optional

import structlog

from todiff.models.task import RecurrenceSpec, Task

logger = structlog.get_logger(__name__)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_PRIORITY_RE = re.compile(r"^\(([A-Z])\)$")
_TAG_RE = re.compile(r"^([A-Za-z0-9_-]+):(\S+)$")


def parse_date(token: str) -> Optional[date]:
    """Parse a `YYYY-MM-DD` token, returning None if it is not a valid date."""
    if not _DATE_RE.match(token):
        return None
    try:
        return date.fromisoformat(token)
    except ValueError:
        return None


def _is_garbage(line: str) -> bool:
    # Control characters (other than TAB) and undecodable bytes mean this is not text.
    if "\ufffd" in line:
        return True
    return any(ord(ch) < 32 and ch != "\t" for ch in line)


def parse_line(line: str) -> Task:
    """Parse one todo.txt line.

    Never raises on content: malformed dates and recurrence tokens stay in the
    description as literal text, and lines that are not text at all become
    opaque tasks with only `raw` set.

    Args:
        line: A single line, without its trailing newline

    Returns:
        Parsed Task
    """
    raw = line.rstrip("\r\n")
    if _is_garbage(raw):
        logger.debug("unparsable_line", line=raw[:60])
        return Task(raw=raw, unparsed=True)

    tokens = raw.split()
    pos = 0

    completed = False
    completion_date = None
    creation_date = None
    priority = None

    if tokens and tokens[0] == "x":
        completed = True
        pos = 1
        if pos < len(tokens):
            completion_date = parse_date(tokens[pos])
            if completion_date:
                pos += 1
                if pos < len(tokens):
                    creation_date = parse_date(tokens[pos])
                    if creation_date:
                        pos += 1
    else:
        if pos < len(tokens):
            match = _PRIORITY_RE.match(tokens[pos])
            if match:
                priority = match.group(1)
                pos += 1
        if pos < len(tokens):
            creation_date = parse_date(tokens[pos])
            if creation_date:
                pos += 1

    words: List[str] = []
    projects: List[str] = []
    contexts: List[str] = []
    extra_tags: Dict[str, str] = {}
    due = None
    threshold = None
    recurrence = None

    for token in tokens[pos:]:
        if len(token) > 1 and token[0] == "+":
            if token[1:] not in projects:
                projects.append(token[1:])
            continue
        if len(token) > 1 and token[0] == "@":
            if token[1:] not in contexts:
                contexts.append(token[1:])
            continue

        match = _TAG_RE.match(token)
        if not match or match.group(2).startswith("//"):
            words.append(token)
            continue

        key, value = match.group(1), match.group(2)
        if key == "due":
            parsed = parse_date(value)
            if parsed is None:
                words.append(token)
            else:
                due = parsed
        elif key == "t":
            parsed = parse_date(value)
            if parsed is None:
                words.append(token)
            else:
                threshold = parsed
        elif key == "rec":
            spec = RecurrenceSpec.parse(value)
            if spec is None:
                words.append(token)
            else:
                recurrence = spec
        else:
            extra_tags[key] = value

    return Task(
        raw=raw,
        completed=completed,
        completion_date=completion_date,
        creation_date=creation_date,
        priority=priority,
        description=" ".join(words),
        projects=tuple(projects),
        contexts=tuple(contexts),
        due=due,
        threshold=threshold,
        recurrence=recurrence,
        extra_tags=extra_tags,
    )


def parse_lines(lines: Iterable[str], workers: int = 1) -> List[Task]:
    """Parse a snapshot into tasks, preserving line order.

    Blank lines are skipped.

    Args:
        lines: Decoded lines of a todo.txt snapshot
        workers: Number of threads to parse with (1 parses inline)

    Returns:
        Tasks in the order their lines appear
    """
    content = [line for line in lines if line.strip()]

    if workers > 1 and len(content) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            tasks = list(executor.map(parse_line, content))
    else:
        tasks = [parse_line(line) for line in content]

    logger.debug("parsed_snapshot", lines=len(content), unparsed=sum(t.unparsed for t in tasks))
    return tasks
