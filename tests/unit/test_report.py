"""Unit tests for report building and rendering."""

import io
from datetime import date

import pytest

from todiff.engine import SemanticDiffer
from todiff.models import (
    Completed,
    ContextsChanged,
    DescriptionChanged,
    DueChanged,
    Postponed,
    PriorityAdded,
    PriorityRemoved,
    ProjectsChanged,
    Recurred,
    TagChanged,
    Unparsed,
)
from todiff.report import Report, ReportRenderer, SectionKind, build_report, describe, format_report, make_console
from todiff.report.render import join_words, subject_diff

BEFORE = [
    "2018-03-20 Call mom due:2018-03-25 rec:1w",
    "Pay rent",
]
AFTER = [
    "x 2018-03-23 2018-03-20 Call mom due:2018-03-25 rec:1w",
    "2018-03-23 Call mom due:2018-03-30 rec:1w",
    "Learn Rust",
]


@pytest.fixture
def result():
    """Diff with a new, a changed and a removed task."""
    return SemanticDiffer().diff_lines(BEFORE, AFTER)


def test_build_report_sections(result):
    """Test sections come out in order with their entries."""
    report = build_report(result)

    assert [s.kind for s in report.sections] == [SectionKind.NEW, SectionKind.CHANGED, SectionKind.REMOVED]
    assert [s.title for s in report.sections] == ["New tasks", "Changed tasks", "Removed tasks"]
    assert report.section(SectionKind.NEW).entries[0].line == "Learn Rust"
    changed = report.section(SectionKind.CHANGED).entries[0]
    assert changed.line == BEFORE[0]
    assert changed.follow_up == AFTER[1]
    assert [c.kind for c in changed.changes] == ["completed", "recurred"]


def test_build_report_without_removed(result):
    """Test the removed section can be turned off."""
    report = build_report(result, show_removed=False)

    assert report.section(SectionKind.REMOVED) is None


def test_build_report_omits_empty_sections():
    """Test sections without entries are left out."""
    report = build_report(SemanticDiffer().diff_lines(["Call mom"], ["Call mom", "Pay rent"]))

    assert [s.kind for s in report.sections] == [SectionKind.NEW]


def test_build_report_orders_by_category():
    """Test changed tasks are grouped recurred, completed, postponed, other; new tasks by creation date."""
    before = [
        "(A) Buy milk",
        "Pay rent due:2018-04-01",
        "Renew passport",
        "Call mom due:2018-03-25 rec:1w",
    ]
    after = [
        "(B) Buy milk",
        "Pay rent due:2018-04-03",
        "x 2018-03-23 Renew passport",
        "x 2018-03-23 Call mom due:2018-03-25 rec:1w",
        "Call mom due:2018-03-30 rec:1w",
        "2018-03-22 Fix bike",
        "Learn Rust",
        "2018-03-01 Plan trip",
    ]

    report = build_report(SemanticDiffer().diff_lines(before, after))

    assert [e.line for e in report.section(SectionKind.CHANGED).entries] == [
        "Call mom due:2018-03-25 rec:1w",
        "Renew passport",
        "Pay rent due:2018-04-01",
        "(A) Buy milk",
    ]
    assert [e.line for e in report.section(SectionKind.NEW).entries] == [
        "Learn Rust",
        "2018-03-01 Plan trip",
        "2018-03-22 Fix bike",
    ]


def test_empty_report():
    """Test an unchanged snapshot yields an empty report."""
    report = build_report(SemanticDiffer().diff_lines(["Call mom"], ["Call mom"]))

    assert report.is_empty
    assert format_report(report).strip() == "No changes."


def test_report_json_round_trip(result):
    """Test reports serialize with their change kinds."""
    report = build_report(result)

    restored = Report.model_validate_json(report.model_dump_json())

    assert restored == report
    assert isinstance(restored.section(SectionKind.CHANGED).entries[0].changes[1], Recurred)


def test_format_report_layout(result):
    """Test the plain text layout of a report."""
    text = format_report(build_report(result))

    assert text.splitlines() == [
        "New tasks",
        "---------",
        "",
        " → Learn Rust",
        "",
        "Changed tasks",
        "-------------",
        "",
        " → 2018-03-20 Call mom due:2018-03-25 rec:1w",
        "    → Completed on 2018-03-23",
        "    → Recurred (from 2018-03-23)",
        "    → Next occurrence: 2018-03-23 Call mom due:2018-03-30 rec:1w",
        "",
        "Removed tasks",
        "-------------",
        "",
        " → Pay rent",
    ]


@pytest.mark.parametrize(
    "change,expected",
    [
        (Completed(on=date(2018, 3, 23)), "completed on 2018-03-23"),
        (Recurred(strict=True, from_date=date(2018, 4, 1)), "recurred (strict, from 2018-04-01)"),
        (Postponed(strict=True, delta_days=3), "postponed (strict) by 3 days"),
        (Postponed(strict=None, delta_days=1), "postponed by 1 day"),
        (Postponed(strict=False, delta_days=-2), "brought forward (non-strict) by 2 days"),
        (DueChanged(before=None, after=date(2018, 3, 1)), "added due date 2018-03-01"),
        (DueChanged(before=date(2018, 3, 1), after=None), "removed due date"),
        (PriorityAdded(after="A"), "added priority (A)"),
        (PriorityRemoved(before="A"), "removed priority"),
        (DescriptionChanged(before="a", after="b"), "set subject to ‘b’"),
        (ProjectsChanged(added=("a", "b", "c"), removed=()), "added projects +a, +b and +c"),
        (ProjectsChanged(added=("a",), removed=("b",)), "added project +a and removed project +b"),
        (ContextsChanged(added=(), removed=("home",)), "removed context @home"),
        (TagChanged(key="id", before=None, after="7"), "added tag id:7"),
        (TagChanged(key="id", before="7", after="8"), "set tag id to 8"),
        (TagChanged(key="id", before="7", after=None), "removed tag id:7"),
        (Unparsed(before="a\x01", after="b\x01"), "changed line to ‘b\x01’"),
    ],
)
def test_describe(change, expected):
    """Test the wording of each change."""
    assert describe(change) == expected


def test_join_words():
    """Test English list joining."""
    assert join_words([]) == ""
    assert join_words(["a"]) == "a"
    assert join_words(["a", "b"]) == "a and b"
    assert join_words(["a", "b", "c"]) == "a, b and c"


def test_subject_diff_marks_insertions():
    """Test the character diff highlights added text."""
    text = subject_diff("Call mom", "Call my mom")

    assert text.plain == "Changed subject ‘Call my mom’"
    assert any("green" in str(span.style) for span in text.spans)


def test_colored_output_contains_ansi(result):
    """Test forced color mode emits escape codes."""
    buffer = io.StringIO()
    console = make_console("always", file=buffer)

    ReportRenderer(console).render(build_report(result))

    assert "\x1b[" in buffer.getvalue()
    assert "Learn Rust" in buffer.getvalue()


def test_never_color_output_is_plain(result):
    """Test disabled color mode emits no escape codes."""
    buffer = io.StringIO()
    console = make_console("never", file=buffer)

    ReportRenderer(console).render(build_report(result))

    assert "\x1b[" not in buffer.getvalue()
