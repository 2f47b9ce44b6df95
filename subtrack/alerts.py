"""
Upcoming-action alert generation.

Alerts are recomputed from scratch on every call. Per subscription the
trial-ending check takes precedence over the renewal check, so a
subscription never yields both in one pass. The expiring check for
cancelled subscriptions runs independently.
"""

from datetime import date
from typing import Iterable, List, Optional
import logging

from . import AlertType, SubscriptionStatus, Urgency
from .exceptions import SubscriptionError
from .models import Alert, NotificationPolicy, Subscription, as_date

logger = logging.getLogger(__name__)


def urgency_for(days_remaining: int) -> Urgency:
    """Urgency tier for a number of days before the due date."""
    if days_remaining <= 1:
        return Urgency.HIGH
    if days_remaining <= 3:
        return Urgency.MEDIUM
    return Urgency.LOW


def _days_between(target, today: date) -> int:
    return (as_date(target) - today).days


def _trial_alert(sub: Subscription, policy: NotificationPolicy,
                 today: date) -> Optional[Alert]:
    if sub.status == SubscriptionStatus.CANCELLED or not policy.trial_ending:
        return None
    # A trial without an end date cannot be evaluated; skip the branch
    if not sub.is_trial_period or not sub.trial_end_date:
        return None

    days = _days_between(sub.trial_end_date, today)
    if not policy.in_window(days):
        return None

    return Alert(
        id=f"trial-{sub.id}",
        subscription_id=sub.id,
        subscription_name=sub.name,
        type=AlertType.TRIAL_ENDING,
        days_remaining=days,
        amount=sub.amount,
        currency=sub.currency,
        urgency=urgency_for(days),
        next_billing_date=as_date(sub.next_billing),
        primary_color=sub.primary_color,
    )


def _renewal_alert(sub: Subscription, policy: NotificationPolicy,
                   today: date) -> Optional[Alert]:
    if sub.status not in (SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIAL):
        return None
    if not policy.upcoming_payments or not sub.reminder_enabled:
        return None

    days = _days_between(sub.next_billing, today)
    if not policy.in_window(days):
        return None

    return Alert(
        id=f"billing-{sub.id}",
        subscription_id=sub.id,
        subscription_name=sub.name,
        type=AlertType.RENEWAL,
        days_remaining=days,
        amount=sub.amount,
        currency=sub.currency,
        urgency=urgency_for(days),
        primary_color=sub.primary_color,
    )


def _expiring_alert(sub: Subscription, policy: NotificationPolicy,
                    today: date) -> Optional[Alert]:
    if sub.status != SubscriptionStatus.CANCELLED or not policy.subscription_expiring:
        return None

    days = _days_between(sub.next_billing, today)
    if not policy.in_window(days):
        return None

    # No further charge after cancellation
    return Alert(
        id=f"expiring-{sub.id}",
        subscription_id=sub.id,
        subscription_name=sub.name,
        type=AlertType.EXPIRING,
        days_remaining=days,
        amount=0,
        currency=sub.currency,
        urgency=urgency_for(days),
        primary_color=sub.primary_color,
    )


def _alerts_for(sub: Subscription, policy: NotificationPolicy,
                today: date) -> List[Alert]:
    alerts = []

    trial = _trial_alert(sub, policy, today)
    if trial:
        alerts.append(trial)
    else:
        renewal = _renewal_alert(sub, policy, today)
        if renewal:
            alerts.append(renewal)

    expiring = _expiring_alert(sub, policy, today)
    if expiring:
        alerts.append(expiring)

    return alerts


def generate_alerts(subscriptions: Iterable[Subscription],
                    policy: NotificationPolicy,
                    today) -> List[Alert]:
    """
    Build the sorted alert list for a snapshot of subscriptions.

    Args:
        subscriptions: Snapshot of subscription records; never mutated.
        policy: Notification toggles and advance window.
        today: Reference day for the whole pass.

    Returns:
        Alerts sorted by days_remaining ascending. Ties keep input order.
    """
    today = as_date(today)
    alerts: List[Alert] = []

    for sub in subscriptions:
        try:
            alerts.extend(_alerts_for(sub, policy, today))
        except (SubscriptionError, TypeError, ValueError) as e:
            logger.warning(f"Skipping subscription {getattr(sub, 'id', '?')} in alert pass: {e}")

    # Stable sort: ties keep input order
    alerts.sort(key=lambda a: a.days_remaining)
    logger.debug(f"Generated {len(alerts)} alerts for {today.isoformat()}")
    return alerts
