"""
Data model for subscription records, payments, alerts and notification policy.

All dates handled by the engine are timezone-naive calendar days
(datetime.date). Timestamps that are informational only (created_at,
*_updated_at, recorded_date) stay as ISO strings and are never read by
the engine.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Any, Optional

from . import Frequency, SubscriptionStatus, PaymentStatus, AlertType, Urgency


# Advance windows offered by the notification settings
ALLOWED_ADVANCE_DAYS = (3, 7, 14, 30)


def as_date(value) -> Optional[date]:
    """Normalize a date, datetime or ISO string to a calendar day.

    Datetimes are truncated to their date, so callers never compare a
    midnight-local value against a later time on the same day.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    # Accept full ISO timestamps as produced by JavaScript toISOString()
    return date.fromisoformat(text[:10])


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class PaymentRecord:
    """A payment the user marked as made for a subscription."""
    id: str
    amount: float
    currency: str
    payment_date: date
    recorded_date: str
    status: PaymentStatus = PaymentStatus.PENDING
    is_adjusted: bool = False
    original_amount: Optional[float] = None

    @property
    def is_pending(self) -> bool:
        return self.status == PaymentStatus.PENDING

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "amount": self.amount,
            "currency": self.currency,
            "payment_date": _iso(self.payment_date),
            "recorded_date": self.recorded_date,
            "status": self.status.value,
            "is_adjusted": self.is_adjusted,
        }
        if self.original_amount is not None:
            data["original_amount"] = self.original_amount
        return data


@dataclass
class Subscription:
    """A tracked recurring subscription.

    start_date anchors the billing cycle. next_billing is the stored next
    charge date; it goes stale as time passes and is only recomputed on
    creation, payment and reactivation.
    """
    id: str
    name: str
    amount: float
    frequency: Frequency
    start_date: date
    next_billing: date
    category: str = "other"
    currency: str = "$"
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    is_trial_period: bool = False
    trial_end_date: Optional[date] = None
    reminder_enabled: bool = True
    payment_method: Optional[str] = None
    is_automatic_payment: bool = False
    url: Optional[str] = None
    logo_url: Optional[str] = None
    notes: Optional[str] = None
    primary_color: Optional[str] = None
    payment_history: List[PaymentRecord] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    reactivated_at: Optional[str] = None
    # Change tracking, informational only
    amount_updated_at: Optional[str] = None
    frequency_updated_at: Optional[str] = None
    category_updated_at: Optional[str] = None
    payment_method_updated_at: Optional[str] = None
    start_date_updated_at: Optional[str] = None
    next_billing_updated_at: Optional[str] = None

    @property
    def is_cancelled(self) -> bool:
        return self.status == SubscriptionStatus.CANCELLED

    def find_payment(self, payment_id: str) -> Optional[PaymentRecord]:
        for payment in self.payment_history:
            if payment.id == payment_id:
                return payment
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "amount": self.amount,
            "currency": self.currency,
            "frequency": self.frequency.value,
            "start_date": _iso(self.start_date),
            "next_billing": _iso(self.next_billing),
            "is_trial_period": self.is_trial_period,
            "trial_end_date": _iso(self.trial_end_date),
            "status": self.status.value,
            "reminder_enabled": self.reminder_enabled,
            "payment_method": self.payment_method,
            "is_automatic_payment": self.is_automatic_payment,
            "url": self.url,
            "logo_url": self.logo_url,
            "notes": self.notes,
            "primary_color": self.primary_color,
            "payment_history": [p.to_dict() for p in self.payment_history],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "reactivated_at": self.reactivated_at,
            "amount_updated_at": self.amount_updated_at,
            "frequency_updated_at": self.frequency_updated_at,
            "category_updated_at": self.category_updated_at,
            "payment_method_updated_at": self.payment_method_updated_at,
            "start_date_updated_at": self.start_date_updated_at,
            "next_billing_updated_at": self.next_billing_updated_at,
        }


@dataclass
class Alert:
    """Derived upcoming-action alert. Never persisted."""
    id: str
    subscription_id: str
    subscription_name: str
    type: AlertType
    days_remaining: int
    amount: float
    currency: str
    urgency: Urgency
    next_billing_date: Optional[date] = None
    primary_color: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "subscription_id": self.subscription_id,
            "subscription_name": self.subscription_name,
            "type": self.type.value,
            "days_remaining": self.days_remaining,
            "amount": self.amount,
            "currency": self.currency,
            "urgency": self.urgency.value,
        }
        if self.next_billing_date is not None:
            data["next_billing_date"] = self.next_billing_date.isoformat()
        if self.primary_color:
            data["primary_color"] = self.primary_color
        return data


@dataclass(frozen=True)
class NotificationPolicy:
    """Which alerts to raise and how many days ahead."""
    advance_days: int = 7
    upcoming_payments: bool = True
    trial_ending: bool = True
    subscription_expiring: bool = True

    def __post_init__(self):
        if self.advance_days not in ALLOWED_ADVANCE_DAYS:
            raise ValueError(
                f"advance_days must be one of {ALLOWED_ADVANCE_DAYS}, got {self.advance_days}"
            )

    def in_window(self, days: int) -> bool:
        """Check whether a day count falls inside the advance window."""
        return 0 <= days <= self.advance_days

    def to_dict(self) -> Dict[str, Any]:
        return {
            "advance_days": self.advance_days,
            "upcoming_payments": self.upcoming_payments,
            "trial_ending": self.trial_ending,
            "subscription_expiring": self.subscription_expiring,
        }
