"""Recurrence date arithmetic."""

from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta

from todiff.models.task import RecurrenceSpec, RecurrenceUnit


def add_interval(base: date, spec: RecurrenceSpec) -> date:
    """Add one recurrence interval to a date.

    Month and year arithmetic clamps the day to the end of the target month,
    so `+1m` from Jan 31 lands on Feb 28 (or 29).
    """
    if spec.unit is RecurrenceUnit.DAY:
        return base + relativedelta(days=spec.amount)
    if spec.unit is RecurrenceUnit.WEEK:
        return base + relativedelta(weeks=spec.amount)
    if spec.unit is RecurrenceUnit.MONTH:
        return base + relativedelta(months=spec.amount)
    return base + relativedelta(years=spec.amount)


def next_due(
    spec: RecurrenceSpec,
    strict_base: Optional[date],
    completion_date: Optional[date],
) -> Optional[date]:
    """Compute the due date a recurrence should have produced.

    Strict specs recur from the original due date, the others from the
    completion date.

    Args:
        spec: Recurrence of the completed task
        strict_base: Due date of the completed task
        completion_date: Date the task was completed

    Returns:
        Expected due date of the next occurrence, or None if the required
        base date is missing or the result falls outside the calendar
    """
    base = recurrence_base(spec, strict_base, completion_date)
    if base is None:
        return None
    try:
        return add_interval(base, spec)
    except (ValueError, OverflowError):
        return None


def recurrence_base(
    spec: RecurrenceSpec, strict_base: Optional[date], completion_date: Optional[date]
) -> Optional[date]:
    """Return the date a recurrence is computed from."""
    return strict_base if spec.strict else completion_date
