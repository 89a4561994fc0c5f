"""
Price timeline resolution.

Pure functions over a product's price intervals. No storage access: the
price service loads the intervals and hands them here.

Rules:
- An interval is active on a date when effective_date <= date and either
  to_date is null or to_date >= date (both ends inclusive).
- When several intervals are active the one with the latest
  effective_date wins. Ties fall back to the highest id.
"""

from datetime import date
from typing import Iterable, TypeVar

from core.models import PriceInterval

IntervalT = TypeVar("IntervalT", bound=PriceInterval)


def is_active_on(interval: PriceInterval, as_of: date) -> bool:
    """Whether the interval is in force on as_of."""
    if interval.effective_date > as_of:
        return False
    return interval.is_open_ended or interval.to_date >= as_of


def select_active(intervals: Iterable[IntervalT], as_of: date) -> IntervalT | None:
    """
    Pick the single interval in force on as_of.

    Args:
        intervals: One product's intervals, any order
        as_of: Pricing date

    Returns:
        The winning interval, or None when no interval covers as_of.
    """
    active = [i for i in intervals if is_active_on(i, as_of)]
    if not active:
        return None
    return max(active, key=lambda i: (i.effective_date, i.id))


def overlaps(
    start_a: date,
    end_a: date | None,
    start_b: date,
    end_b: date | None,
) -> bool:
    """Whether two inclusive date ranges intersect. None end = open-ended."""
    a_reaches_b = end_a is None or end_a >= start_b
    b_reaches_a = end_b is None or end_b >= start_a
    return a_reaches_b and b_reaches_a


def find_overlap(
    effective_date: date,
    to_date: date | None,
    existing: Iterable[IntervalT],
    exclude_id: int | None = None,
) -> IntervalT | None:
    """
    First existing interval whose range intersects the candidate range.

    Args:
        effective_date: Candidate start
        to_date: Candidate end, None for open-ended
        existing: Same product's stored intervals
        exclude_id: Interval being rewritten, ignored

    Returns:
        The conflicting interval with the earliest effective_date, or None.
    """
    conflicts = [
        i for i in existing
        if i.id != exclude_id
        and overlaps(effective_date, to_date, i.effective_date, i.to_date)
    ]
    if not conflicts:
        return None
    return min(conflicts, key=lambda i: (i.effective_date, i.id))
