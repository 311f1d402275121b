"""Terminal rendering of diff reports."""

from difflib import SequenceMatcher
from typing import List, Optional, Sequence, TextIO

from rich.console import Console
from rich.text import Text

from todiff.models.changes import (
    COMPLETION_KINDS,
    POSTPONEMENT_KINDS,
    RECURRENCE_KINDS,
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
from todiff.report.builder import Report, ReportEntry, SectionKind

SECTION_STYLES = {
    SectionKind.NEW: "green",
    SectionKind.REMOVED: "red",
}


def make_console(color: str = "auto", file: Optional[TextIO] = None) -> Console:
    """Create a console honoring the `--color` mode.

    `auto` lets rich decide from the terminal (no color when piped or when
    TERM is dumb); `always` forces basic ANSI colors even then.
    """
    kwargs = {"file": file, "highlight": False, "soft_wrap": True}
    if color == "always":
        return Console(force_terminal=True, color_system="standard", **kwargs)
    if color == "never":
        return Console(color_system=None, **kwargs)
    return Console(**kwargs)


def join_words(items: Sequence[str]) -> str:
    """Join as `a`, `a and b`, `a, b and c`."""
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    return ", ".join(items[:-1]) + " and " + items[-1]


def _days(n: int) -> str:
    return f"{n} day" if abs(n) == 1 else f"{n} days"


def _date_change(label: str, before, after) -> str:
    if after is None:
        return f"removed {label}"
    if before is None:
        return f"added {label} {after}"
    return f"set {label} to {after}"


def _token_change(noun: str, sigil: str, added: Sequence[str], removed: Sequence[str]) -> str:
    parts = []
    if added:
        parts.append(f"added {noun}{'s' if len(added) > 1 else ''} " + join_words([sigil + a for a in added]))
    if removed:
        parts.append(
            f"removed {noun}{'s' if len(removed) > 1 else ''} " + join_words([sigil + r for r in removed])
        )
    return " and ".join(parts)


def describe(change: ChangeDescriptor) -> str:
    """Plain-text wording of a change, lowercase first letter."""
    if isinstance(change, Completed):
        return f"completed on {change.on}" if change.on else "completed"
    if isinstance(change, Uncompleted):
        return "uncompleted"
    if isinstance(change, CompletionDateChanged):
        return _date_change("completion date", change.before, change.after)
    if isinstance(change, Recurred):
        if change.strict:
            return f"recurred (strict, from {change.from_date})"
        return f"recurred (from {change.from_date})"
    if isinstance(change, Postponed):
        mode = ""
        if change.strict is True:
            mode = " (strict)"
        elif change.strict is False:
            mode = " (non-strict)"
        if change.delta_days < 0:
            return f"brought forward{mode} by {_days(-change.delta_days)}"
        return f"postponed{mode} by {_days(change.delta_days)}"
    if isinstance(change, DueChanged):
        return _date_change("due date", change.before, change.after)
    if isinstance(change, PriorityAdded):
        return f"added priority ({change.after})"
    if isinstance(change, PriorityRemoved):
        return "removed priority"
    if isinstance(change, PriorityChanged):
        return f"set priority to ({change.after})"
    if isinstance(change, ThresholdChanged):
        return _date_change("threshold date", change.before, change.after)
    if isinstance(change, CreationDateChanged):
        return _date_change("creation date", change.before, change.after)
    if isinstance(change, DescriptionChanged):
        return f"set subject to ‘{change.after}’"
    if isinstance(change, ProjectsChanged):
        return _token_change("project", "+", change.added, change.removed)
    if isinstance(change, ContextsChanged):
        return _token_change("context", "@", change.added, change.removed)
    if isinstance(change, RecurrenceChanged):
        if change.after is None:
            return "removed recurrence"
        if change.before is None:
            return f"added recurrence {change.after}"
        return f"set recurrence to {change.after}"
    if isinstance(change, TagChanged):
        if change.after is None:
            return f"removed tag {change.key}:{change.before}"
        if change.before is None:
            return f"added tag {change.key}:{change.after}"
        return f"set tag {change.key} to {change.after}"
    if isinstance(change, Unparsed):
        return f"changed line to ‘{change.after}’"
    raise ValueError(f"Unknown change kind: {change!r}")


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def subject_diff(before: str, after: str) -> Text:
    """Character-level diff of two descriptions, removed text on red, added on green."""
    text = Text("Changed subject ‘")
    for op, i1, i2, j1, j2 in SequenceMatcher(None, before, after).get_opcodes():
        if op == "equal":
            text.append(before[i1:i2])
            continue
        if op in ("replace", "delete"):
            text.append(before[i1:i2], style="on red")
        if op in ("replace", "insert"):
            text.append(after[j1:j2], style="on green")
    text.append("’")
    return text


def _entry_style(entry: ReportEntry) -> Optional[str]:
    kinds = {change.kind for change in entry.changes}
    if kinds & RECURRENCE_KINDS:
        return "green"
    if kinds & COMPLETION_KINDS:
        return "blue"
    if kinds & POSTPONEMENT_KINDS:
        return "yellow"
    return None


class ReportRenderer:
    """Writes a report to a rich console, one section after another."""

    def __init__(self, console: Console) -> None:
        self.console = console

    @property
    def colorize(self) -> bool:
        return self.console.color_system is not None

    def change_lines(self, entry: ReportEntry) -> List[Text]:
        lines = []
        for change in entry.changes:
            if isinstance(change, DescriptionChanged) and self.colorize:
                lines.append(subject_diff(change.before, change.after))
            else:
                lines.append(Text(_capitalize(describe(change))))
        if entry.follow_up is not None:
            lines.append(Text("Next occurrence: ") + Text(entry.follow_up, style="green"))
        return lines

    def render(self, report: Report) -> None:
        if report.is_empty:
            self.console.print("No changes.")
            return

        for number, section in enumerate(report.sections):
            if number:
                self.console.print()
            self.console.print(section.title)
            self.console.print("-" * len(section.title))

            if section.kind != SectionKind.CHANGED:
                self.console.print()
                for entry in section.entries:
                    self.console.print(Text(" → ") + Text(entry.line, style=SECTION_STYLES[section.kind]))
                continue

            for entry in section.entries:
                self.console.print()
                self.console.print(Text(" → ") + Text(entry.line, style=_entry_style(entry) or ""))
                for line in self.change_lines(entry):
                    self.console.print(Text("    → ") + line)


def format_report(report: Report) -> str:
    """Render a report to plain text."""
    console = Console(color_system=None, highlight=False, soft_wrap=True, width=200)
    with console.capture() as capture:
        ReportRenderer(console).render(report)
    return capture.get()
