"""Unit tests for change classification."""

from datetime import date

from todiff.engine import RecurrenceAttributor, TaskPair, classify_pair, recurrence_for_child
from todiff.models import (
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
from todiff.parsing import parse_line


def classify(before: str, after: str):
    return classify_pair(parse_line(before), parse_line(after))


def pair(before: str, after: str, before_index: int = 0) -> TaskPair:
    return TaskPair(
        before_index=before_index,
        after_index=before_index,
        before=parse_line(before),
        after=parse_line(after),
    )


def test_identical_tasks_have_no_changes():
    """Test equal tasks produce nothing."""
    assert classify("(A) Call mom +family due:2018-03-25", "(A) Call mom +family due:2018-03-25") == []


def test_tag_reordering_is_not_a_change():
    """Test token order does not matter."""
    assert classify("Call mom +family @phone", "Call mom @phone +family") == []


def test_priority_added():
    """Test adding a priority yields a single change."""
    changes = classify("2018-03-20 Call mom due:2018-03-25", "(A) 2018-03-20 Call mom due:2018-03-25")

    assert changes == [PriorityAdded(after="A")]


def test_priority_changed_and_removed():
    """Test priority edits and removals."""
    assert classify("(A) Call mom", "(C) Call mom") == [PriorityChanged(before="A", after="C")]
    assert classify("(A) Call mom", "Call mom") == [PriorityRemoved(before="A")]


def test_priority_dropped_on_completion_is_silent():
    """Test completing a task does not also report losing its priority."""
    changes = classify("(A) Call mom", "x 2018-03-23 Call mom")

    assert changes == [Completed(on=date(2018, 3, 23))]


def test_uncompleted():
    """Test reopening a done task."""
    assert classify("x 2018-03-23 Call mom", "Call mom") == [Uncompleted()]


def test_completion_date_changed():
    """Test editing the completion date of a done task."""
    changes = classify("x 2018-03-23 Call mom", "x 2018-03-24 Call mom")

    assert changes == [CompletionDateChanged(before=date(2018, 3, 23), after=date(2018, 3, 24))]


def test_postponed_with_strict_recurrence_absorbs_threshold():
    """Test shifting due and threshold together is one postponement."""
    changes = classify(
        "Take over the world t:2022-02-02 due:2033-03-03 rec:+1y",
        "Take over the world t:2022-02-05 due:2033-03-06 rec:+1y",
    )

    assert changes == [Postponed(strict=True, delta_days=3)]


def test_postponed_without_recurrence_is_unmarked():
    """Test postponing a one-off task."""
    changes = classify("Pay rent due:2018-03-01", "Pay rent due:2018-03-08")

    assert changes == [Postponed(strict=None, delta_days=7)]


def test_due_brought_forward_is_negative():
    """Test moving the due date earlier gives a negative delta."""
    changes = classify("Pay rent due:2018-03-08 rec:1m", "Pay rent due:2018-03-01 rec:1m")

    assert changes == [Postponed(strict=False, delta_days=-7)]


def test_threshold_moving_differently_is_reported():
    """Test a threshold shift that differs from the due shift is its own change."""
    changes = classify("Pay rent t:2018-03-01 due:2018-03-08", "Pay rent t:2018-03-05 due:2018-03-10")

    assert changes == [
        Postponed(strict=None, delta_days=2),
        ThresholdChanged(before=date(2018, 3, 1), after=date(2018, 3, 5)),
    ]


def test_due_added_and_removed():
    """Test due dates appearing or disappearing."""
    assert classify("Pay rent", "Pay rent due:2018-03-01") == [DueChanged(before=None, after=date(2018, 3, 1))]
    assert classify("Pay rent due:2018-03-01", "Pay rent") == [DueChanged(before=date(2018, 3, 1), after=None)]


def test_creation_date_changed():
    """Test editing the creation date."""
    changes = classify("2018-03-20 Call mom", "2018-03-21 Call mom")

    assert changes == [CreationDateChanged(before=date(2018, 3, 20), after=date(2018, 3, 21))]


def test_description_projects_and_contexts():
    """Test text and token edits, in their fixed order."""
    changes = classify("Call mom +family @phone @home", "Call mother +family +weekend @phone @car")

    assert changes == [
        DescriptionChanged(before="Call mom", after="Call mother"),
        ProjectsChanged(added=("weekend",), removed=()),
        ContextsChanged(added=("car",), removed=("home",)),
    ]


def test_recurrence_interval_changed():
    """Test editing the rec: tag itself."""
    assert classify("Water plants rec:1w", "Water plants rec:+2w") == [
        RecurrenceChanged(before="1w", after="+2w")
    ]
    assert classify("Water plants rec:1w", "Water plants") == [RecurrenceChanged(before="1w", after=None)]


def test_extra_tags():
    """Test opaque tags are diffed key by key."""
    changes = classify("Build shed id:1 owner:sam", "Build shed owner:alex size:big")

    assert changes == [
        TagChanged(key="id", before="1", after=None),
        TagChanged(key="owner", before="sam", after="alex"),
        TagChanged(key="size", before=None, after="big"),
    ]


def test_changes_come_out_in_fixed_order():
    """Test completion comes before priority, threshold, text and tags."""
    changes = classify(
        "2018-03-20 Pay rent t:2018-03-01 id:1",
        "x 2018-03-25 2018-03-20 (B) Pay rent t:2018-03-02 id:2",
    )

    assert [c.kind for c in changes] == ["completed", "threshold_changed", "description_changed", "tag_changed"]


def test_due_change_on_completion_without_recurrence_is_reported():
    """Test a due date moved while completing a one-off task is still a postponement."""
    changes = classify("Pay rent due:2018-03-01", "x 2018-03-02 Pay rent due:2018-03-05")

    assert changes == [Completed(on=date(2018, 3, 2)), Postponed(strict=None, delta_days=4)]


def test_due_change_with_recurrence_is_absorbed():
    """Test a due date moved alongside a recurrence is not also a postponement."""
    recurred = Recurred(strict=False, from_date=date(2018, 3, 23))

    changes = classify_pair(
        parse_line("Call mom due:2018-03-25 rec:1w"),
        parse_line("x 2018-03-23 Call mom due:2018-03-26 rec:1w"),
        recurred,
    )

    assert changes == [Completed(on=date(2018, 3, 23)), recurred]


def test_unparsed_pair_compares_raw_text():
    """Test opaque tasks report a raw line change."""
    assert classify("junk\x01", "junk\x01") == []
    assert classify("junk\x01", "junk\x02") == [Unparsed(before="junk\x01", after="junk\x02")]


def test_recurrence_for_child_non_strict():
    """Test a child due one interval after completion is the next occurrence."""
    parent = pair(
        "2018-03-20 Call mom due:2018-03-25 rec:1w",
        "x 2018-03-23 2018-03-20 Call mom due:2018-03-25 rec:1w",
    )
    child = parse_line("2018-03-23 Call mom due:2018-03-30 rec:1w")

    assert recurrence_for_child(parent, child) == Recurred(strict=False, from_date=date(2018, 3, 23))


def test_recurrence_for_child_strict():
    """Test strict recurrence counts from the original due date."""
    parent = pair("Pay rent due:2018-04-01 rec:+1m", "x 2018-03-22 Pay rent due:2018-04-01 rec:+1m")
    child = parse_line("Pay rent due:2018-05-01 rec:+1m")

    assert recurrence_for_child(parent, child) == Recurred(strict=True, from_date=date(2018, 4, 1))


def test_recurrence_for_child_rejects_wrong_date():
    """Test a child with an unexpected due date is not a recurrence."""
    parent = pair("Call mom due:2018-03-25 rec:1w", "x 2018-03-23 Call mom due:2018-03-25 rec:1w")

    assert recurrence_for_child(parent, parse_line("Call mom due:2018-03-31 rec:1w")) is None


def test_recurrence_for_child_requires_completion():
    """Test an open task cannot recur."""
    parent = pair("Call mom due:2018-03-25 rec:1w", "Call mom due:2018-03-25 rec:1w")

    assert recurrence_for_child(parent, parse_line("Call mom due:2018-04-01 rec:1w")) is None


def test_recurrence_for_child_requires_same_description():
    """Test the child must be the same task."""
    parent = pair("Call mom due:2018-03-25 rec:1w", "x 2018-03-23 Call mom due:2018-03-25 rec:1w")

    assert recurrence_for_child(parent, parse_line("Call dad due:2018-03-30 rec:1w")) is None


def test_attributor_claims_one_child_per_pair():
    """Test the first valid child wins and later duplicates stay new."""
    parent = pair("Call mom due:2018-03-25 rec:1w", "x 2018-03-23 Call mom due:2018-03-25 rec:1w")
    child = parse_line("Call mom due:2018-03-30 rec:1w")
    attributor = RecurrenceAttributor([parent])

    assert attributor.attribute(1, child)
    assert not attributor.attribute(2, child)
    assert attributor.claimed[0][0] == 1
