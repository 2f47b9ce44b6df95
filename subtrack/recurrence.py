"""
Billing recurrence arithmetic.

A billing cycle is the sequence anchor, anchor + 1 step, anchor + 2 steps...
Weekly and biweekly steps are fixed day counts. Monthly and yearly steps are
calendar steps; when the anchor's day does not exist in the target month the
date clamps to that month's last day (Jan 31 -> Feb 28 -> Mar 31). Every
occurrence is computed from the anchor, so one short month never shifts the
rest of the sequence.
"""

from datetime import date
from typing import Union

from dateutil.relativedelta import relativedelta

from . import Frequency
from .models import as_date


DateLike = Union[date, str]

_STEP_DAYS = {
    Frequency.WEEKLY: 7,
    Frequency.BIWEEKLY: 14,
}


def _offset(frequency: Frequency, count: int) -> relativedelta:
    if frequency in _STEP_DAYS:
        return relativedelta(days=_STEP_DAYS[frequency] * count)
    if frequency == Frequency.MONTHLY:
        return relativedelta(months=count)
    return relativedelta(years=count)


def add_step(day: DateLike, frequency, count: int = 1) -> date:
    """Offset a date by `count` billing steps of the given frequency."""
    return as_date(day) + _offset(Frequency.parse(frequency), count)


def next_occurrence_after(anchor: DateLike, frequency, reference: DateLike) -> date:
    """
    Smallest occurrence of the billing cycle strictly after `reference`.

    If the anchor is already after the reference it is returned unchanged.
    Raises InvalidFrequencyError for an unknown frequency.
    """
    freq = Frequency.parse(frequency)
    anchor = as_date(anchor)
    reference = as_date(reference)

    if anchor > reference:
        return anchor

    if freq in _STEP_DAYS:
        step = _STEP_DAYS[freq]
        count = (reference - anchor).days // step + 1
        return anchor + relativedelta(days=step * count)

    # Calendar steps: start at the reference's month (or year) and walk forward
    if freq == Frequency.MONTHLY:
        count = (reference.year - anchor.year) * 12 + (reference.month - anchor.month)
    else:
        count = reference.year - anchor.year

    candidate = anchor + _offset(freq, count)
    while candidate <= reference:
        count += 1
        candidate = anchor + _offset(freq, count)
    return candidate


def calculate_next_billing(start_date: DateLike, frequency, today: DateLike) -> date:
    """Next billing date for a new subscription, as set at creation time."""
    return next_occurrence_after(start_date, frequency, today)
