"""
Cost normalization and spending aggregation.

Monthly equivalents are a statistical approximation used to compare and
total subscriptions billed on different frequencies. They are never used
for due-date math.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Any, Iterable, Optional
import logging

from . import Frequency, SubscriptionStatus
from .exceptions import SubscriptionError
from .models import Subscription, as_date

logger = logging.getLogger(__name__)


# Average weeks per month (52 / 12) and bi-weeks per month (26 / 12)
WEEKS_PER_MONTH = 4.33
BIWEEKS_PER_MONTH = 2.17

# Errors that exclude a single record from an aggregation pass
RECORD_ERRORS = (SubscriptionError, TypeError, ValueError)


def monthly_equivalent(amount: float, frequency) -> float:
    """Convert a per-period amount to its monthly equivalent."""
    freq = Frequency.parse(frequency)
    if freq == Frequency.WEEKLY:
        return amount * WEEKS_PER_MONTH
    if freq == Frequency.BIWEEKLY:
        return amount * BIWEEKS_PER_MONTH
    if freq == Frequency.MONTHLY:
        return amount
    return amount / 12


def annual_cost(amount: float, frequency) -> float:
    """Yearly cost derived from the monthly equivalent."""
    return monthly_equivalent(amount, frequency) * 12


def _active(subscriptions: Iterable[Subscription]) -> List[Subscription]:
    return [s for s in subscriptions if s.status == SubscriptionStatus.ACTIVE]


def _skip(sub: Subscription, pass_name: str, error: Exception) -> None:
    logger.warning(f"Skipping subscription {getattr(sub, 'id', '?')} in {pass_name}: {error}")


def _required_date(value) -> date:
    day = as_date(value)
    if day is None:
        raise ValueError("date is missing")
    return day


def _monthly_or_skip(sub: Subscription, pass_name: str = "cost totals") -> Optional[float]:
    try:
        return float(monthly_equivalent(float(sub.amount), sub.frequency))
    except RECORD_ERRORS as e:
        _skip(sub, pass_name, e)
        return None


def _month_start(day: date) -> date:
    return day.replace(day=1)


def _next_month(day: date) -> date:
    return (day.replace(day=28) + timedelta(days=4)).replace(day=1)


# =============================================================================
# AGGREGATIONS
# =============================================================================

@dataclass
class SpendingSummary:
    """Dashboard totals over active subscriptions."""
    active_count: int = 0
    total_monthly: float = 0.0
    total_yearly: float = 0.0
    to_pay_this_week: float = 0.0
    to_pay_this_month: float = 0.0
    to_pay_this_year: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "active_count": self.active_count,
            "total_monthly": round(self.total_monthly, 2),
            "total_yearly": round(self.total_yearly, 2),
            "to_pay_this_week": round(self.to_pay_this_week, 2),
            "to_pay_this_month": round(self.to_pay_this_month, 2),
            "to_pay_this_year": round(self.to_pay_this_year, 2),
        }


def spending_summary(subscriptions: Iterable[Subscription], today: date) -> SpendingSummary:
    """
    Totals for active subscriptions.

    to_pay_* sum the raw per-period amount of every active subscription whose
    stored next billing date falls in the current calendar week (Monday
    start), month or year. A record that cannot be evaluated is logged and
    left out of every total.
    """
    today = as_date(today)
    week_start = today - timedelta(days=today.weekday())
    week_end = week_start + timedelta(days=6)

    summary = SpendingSummary()
    for sub in _active(subscriptions):
        try:
            amount = float(sub.amount)
            monthly = float(monthly_equivalent(amount, sub.frequency))
            billing = _required_date(sub.next_billing)
        except RECORD_ERRORS as e:
            _skip(sub, "cost totals", e)
            continue

        summary.active_count += 1
        summary.total_monthly += monthly
        summary.total_yearly += monthly * 12

        if week_start <= billing <= week_end:
            summary.to_pay_this_week += amount
        if (billing.year, billing.month) == (today.year, today.month):
            summary.to_pay_this_month += amount
        if billing.year == today.year:
            summary.to_pay_this_year += amount

    return summary


def _with_percentages(totals: Dict[str, float]) -> List[Dict[str, Any]]:
    grand_total = sum(totals.values())
    rows = [
        {
            "key": key,
            "amount": amount,
            "percentage": (amount / grand_total) * 100 if grand_total else 0.0,
        }
        for key, amount in totals.items()
    ]
    rows.sort(key=lambda r: r["amount"], reverse=True)
    return rows


def spending_by_category(subscriptions: Iterable[Subscription]) -> List[Dict[str, Any]]:
    """Monthly spending per category for active subscriptions, largest first."""
    totals: Dict[str, float] = {}
    for sub in _active(subscriptions):
        monthly = _monthly_or_skip(sub, "category breakdown")
        if monthly is None:
            continue
        totals[sub.category] = totals.get(sub.category, 0.0) + monthly
    return _with_percentages(totals)


def spending_by_subscription(subscriptions: Iterable[Subscription]) -> List[Dict[str, Any]]:
    """Monthly spending per active subscription, largest first."""
    rows = []
    names = {}
    totals: Dict[str, float] = {}
    for sub in _active(subscriptions):
        monthly = _monthly_or_skip(sub, "subscription breakdown")
        if monthly is None:
            continue
        totals[sub.id] = monthly
        names[sub.id] = sub.name

    for row in _with_percentages(totals):
        row["name"] = names[row["key"]]
        rows.append(row)
    return rows


def monthly_trend(subscriptions: Iterable[Subscription], today) -> List[Dict[str, Any]]:
    """
    Monthly spending history, most recent month first.

    Months run from the earliest active start date to the current month.
    Each month sums the monthly equivalent of every active subscription
    that had started by the end of that month.
    """
    today = as_date(today)

    started = []
    for sub in _active(subscriptions):
        try:
            start = _required_date(sub.start_date)
            monthly = float(monthly_equivalent(float(sub.amount), sub.frequency))
        except RECORD_ERRORS as e:
            _skip(sub, "monthly trend", e)
            continue
        started.append((start, monthly, sub.name))

    if not started:
        return []

    trend = []
    month = _month_start(min(start for start, _, _ in started))
    while month <= today:
        month_end = _next_month(month) - timedelta(days=1)
        names = [name for start, _, name in started if start <= month_end]
        trend.append({
            "month": month,
            "amount": sum(monthly for start, monthly, _ in started if start <= month_end),
            "subscriptions": names,
        })
        month = _next_month(month)

    trend.reverse()
    return trend


def payments_by_date(subscriptions: Iterable[Subscription], today,
                     days: int = 30) -> List[Dict[str, Any]]:
    """
    Upcoming charges grouped by billing date.

    Covers stored next billing dates from today through `days` ahead.
    Groups are sorted by date; subscriptions within a group by name.
    """
    today = as_date(today)
    horizon = today + timedelta(days=days)

    groups: Dict[date, List[Subscription]] = {}
    totals: Dict[date, float] = {}
    for sub in subscriptions:
        try:
            billing = _required_date(sub.next_billing)
            amount = float(sub.amount)
        except RECORD_ERRORS as e:
            _skip(sub, "payment calendar", e)
            continue
        if today <= billing <= horizon:
            groups.setdefault(billing, []).append(sub)
            totals[billing] = totals.get(billing, 0.0) + amount

    return [
        {
            "date": billing,
            "subscriptions": sorted(groups[billing], key=lambda s: str(s.name).casefold()),
            "total_amount": totals[billing],
        }
        for billing in sorted(groups)
    ]
