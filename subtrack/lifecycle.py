"""
Subscription lifecycle: creation, cancel/reactivate and payment recording.

Every operation takes a Subscription and returns an updated copy; inputs are
never mutated. Status machine:

    (create) -> active | trial
    active | trial --cancel--> cancelled
    cancelled --reactivate--> active

Deletion is a hard removal handled by the store, outside this machine.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional
import uuid

from . import Frequency, PaymentStatus, SubscriptionStatus
from .exceptions import (
    InvalidTransitionError,
    MissingFieldError,
    PaymentNotFoundError,
    PaymentStateError,
    SubscriptionError,
)
from .models import PaymentRecord, Subscription, as_date
from .recurrence import add_step, calculate_next_billing


def _timestamp() -> str:
    return datetime.now().isoformat()


# =============================================================================
# REACTIVATION
# =============================================================================

@dataclass
class ReactivationResult:
    """Fields to write back when a cancelled subscription is reactivated."""
    status: SubscriptionStatus
    start_date: date
    next_billing: date
    was_expired: bool = False


def reactivate(subscription: Subscription, today) -> ReactivationResult:
    """
    Decide the new anchor dates for a reactivated subscription.

    If the stored next billing date has not passed, only the status changes.
    If it has passed (strictly before today), the cycle restarts today and
    the next billing date is exactly one step after today.
    """
    today = as_date(today)
    next_billing = as_date(subscription.next_billing)

    if next_billing < today:
        return ReactivationResult(
            status=SubscriptionStatus.ACTIVE,
            start_date=today,
            next_billing=add_step(today, subscription.frequency),
            was_expired=True,
        )

    return ReactivationResult(
        status=SubscriptionStatus.ACTIVE,
        start_date=as_date(subscription.start_date),
        next_billing=next_billing,
    )


def apply_reactivation(subscription: Subscription, today) -> Subscription:
    """Reactivate a cancelled subscription and return the updated copy."""
    if subscription.status != SubscriptionStatus.CANCELLED:
        raise InvalidTransitionError(
            f"Only cancelled subscriptions can be reactivated (status: {subscription.status.value})",
            subscription.id,
        )

    result = reactivate(subscription, today)
    stamp = _timestamp()
    updated = replace(
        subscription,
        status=result.status,
        start_date=result.start_date,
        next_billing=result.next_billing,
        reactivated_at=stamp,
        updated_at=stamp,
    )
    if result.was_expired:
        updated.start_date_updated_at = stamp
        updated.next_billing_updated_at = stamp
    return updated


def cancel(subscription: Subscription) -> Subscription:
    """Soft-cancel a subscription. Dates and history are kept."""
    if subscription.status == SubscriptionStatus.CANCELLED:
        raise InvalidTransitionError("Subscription is already cancelled", subscription.id)
    return replace(subscription, status=SubscriptionStatus.CANCELLED, updated_at=_timestamp())


# =============================================================================
# CREATION
# =============================================================================

def create_subscription(name: str,
                        amount: float,
                        frequency,
                        start_date,
                        today,
                        is_trial_period: bool = False,
                        trial_end_date=None,
                        status: Optional[SubscriptionStatus] = None,
                        subscription_id: Optional[str] = None,
                        **fields) -> Subscription:
    """
    Create a new subscription with its next billing date computed.

    Extra keyword arguments are passed through to the Subscription (category,
    currency, reminder_enabled, payment_method, notes...).
    """
    freq = Frequency.parse(frequency)
    sub_id = subscription_id or uuid.uuid4().hex[:12]

    if amount < 0:
        raise SubscriptionError(f"Amount must not be negative: {amount}", sub_id)
    if is_trial_period and not trial_end_date:
        raise MissingFieldError("trial_end_date", sub_id)

    if status is None:
        status = SubscriptionStatus.TRIAL if is_trial_period else SubscriptionStatus.ACTIVE
    if status == SubscriptionStatus.CANCELLED:
        raise InvalidTransitionError("A subscription cannot be created cancelled", sub_id)

    stamp = _timestamp()
    start = as_date(start_date)
    return Subscription(
        id=sub_id,
        name=name,
        amount=amount,
        frequency=freq,
        start_date=start,
        next_billing=calculate_next_billing(start, freq, today),
        status=status,
        is_trial_period=is_trial_period,
        trial_end_date=as_date(trial_end_date) if is_trial_period else None,
        created_at=stamp,
        updated_at=stamp,
        **fields,
    )


# =============================================================================
# PAYMENTS
# =============================================================================

def record_payment(subscription: Subscription, today) -> Subscription:
    """
    Mark the subscription as paid.

    Appends a pending payment for the current amount and moves the next
    billing date forward by exactly one step from its stored value.
    """
    today = as_date(today)
    stamp = _timestamp()
    payment = PaymentRecord(
        id=f"payment-{subscription.id}-{uuid.uuid4().hex[:8]}",
        amount=subscription.amount,
        currency=subscription.currency,
        payment_date=today,
        recorded_date=stamp,
    )
    return replace(
        subscription,
        next_billing=add_step(subscription.next_billing, subscription.frequency),
        payment_history=list(subscription.payment_history) + [payment],
        next_billing_updated_at=stamp,
        updated_at=stamp,
    )


def _replace_payment(subscription: Subscription, payment: PaymentRecord) -> list:
    return [payment if p.id == payment.id else p for p in subscription.payment_history]


def _pending_payment(subscription: Subscription, payment_id: str) -> PaymentRecord:
    payment = subscription.find_payment(payment_id)
    if payment is None:
        raise PaymentNotFoundError(f"Payment not found: {payment_id}", subscription.id)
    if not payment.is_pending:
        raise PaymentStateError(f"Payment {payment_id} is already confirmed", subscription.id)
    return payment


def adjust_payment(subscription: Subscription,
                   payment_id: str,
                   amount: float,
                   payment_date=None,
                   update_subscription_amount: bool = False) -> Subscription:
    """
    Correct the amount or date of a pending payment.

    A payment can be adjusted once. original_amount keeps what was recorded
    before the adjustment. With update_subscription_amount the new amount also
    becomes the subscription's amount going forward.
    """
    payment = _pending_payment(subscription, payment_id)
    if payment.is_adjusted:
        raise PaymentStateError(f"Payment {payment_id} was already adjusted", subscription.id)
    if amount <= 0:
        raise PaymentStateError("Adjusted amount must be greater than 0", subscription.id)

    changed = amount != payment.amount
    adjusted = replace(
        payment,
        amount=amount,
        payment_date=as_date(payment_date) if payment_date else payment.payment_date,
        is_adjusted=changed,
        original_amount=payment.amount if changed else None,
    )

    stamp = _timestamp()
    updated = replace(
        subscription,
        payment_history=_replace_payment(subscription, adjusted),
        updated_at=stamp,
    )
    if update_subscription_amount:
        updated.amount = amount
        updated.amount_updated_at = stamp
    return updated


def confirm_payment(subscription: Subscription, payment_id: str) -> Subscription:
    """Move a pending payment to confirmed."""
    payment = _pending_payment(subscription, payment_id)
    confirmed = replace(payment, status=PaymentStatus.CONFIRMED)
    return replace(
        subscription,
        payment_history=_replace_payment(subscription, confirmed),
        updated_at=_timestamp(),
    )
