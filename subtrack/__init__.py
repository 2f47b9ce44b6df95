# subtrack - personal subscription-expense tracker
# Billing dates, normalized costs and alerts are derived on the fly from the
# stored subscription records; nothing derived is ever persisted.

from enum import Enum

from .exceptions import InvalidFrequencyError


class Frequency(Enum):
    """Billing frequency of a subscription."""
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def parse(cls, value) -> "Frequency":
        """Coerce a raw value to a Frequency, failing loudly on anything else."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidFrequencyError(value) from None


class SubscriptionStatus(Enum):
    """Lifecycle status of a subscription."""
    ACTIVE = "active"
    TRIAL = "trial"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    """Status of a recorded payment."""
    PENDING = "pending"
    CONFIRMED = "confirmed"


class AlertType(Enum):
    """Kinds of upcoming-action alerts."""
    RENEWAL = "renewal"
    TRIAL_ENDING = "trial_ending"
    EXPIRING = "expiring"


class Urgency(Enum):
    """Urgency tier of an alert."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


from .models import (
    Subscription,
    PaymentRecord,
    Alert,
    NotificationPolicy,
    ALLOWED_ADVANCE_DAYS,
    as_date,
)

from .recurrence import (
    add_step,
    next_occurrence_after,
    calculate_next_billing,
)

from .costs import (
    WEEKS_PER_MONTH,
    BIWEEKS_PER_MONTH,
    monthly_equivalent,
    annual_cost,
    spending_summary,
    spending_by_category,
    spending_by_subscription,
    monthly_trend,
    payments_by_date,
)

from .alerts import (
    generate_alerts,
    urgency_for,
)

from .lifecycle import (
    ReactivationResult,
    reactivate,
    apply_reactivation,
    cancel,
    create_subscription,
    record_payment,
    adjust_payment,
    confirm_payment,
)

from .humanize import (
    days_until,
    format_days_remaining,
    format_currency,
)


__version__ = "1.0.0"

__all__ = [
    # Core enums
    "Frequency",
    "SubscriptionStatus",
    "PaymentStatus",
    "AlertType",
    "Urgency",
    # Data model
    "Subscription",
    "PaymentRecord",
    "Alert",
    "NotificationPolicy",
    "ALLOWED_ADVANCE_DAYS",
    "as_date",
    # Recurrence
    "add_step",
    "next_occurrence_after",
    "calculate_next_billing",
    # Costs
    "WEEKS_PER_MONTH",
    "BIWEEKS_PER_MONTH",
    "monthly_equivalent",
    "annual_cost",
    "spending_summary",
    "spending_by_category",
    "spending_by_subscription",
    "monthly_trend",
    "payments_by_date",
    # Alerts
    "generate_alerts",
    "urgency_for",
    # Lifecycle
    "ReactivationResult",
    "reactivate",
    "apply_reactivation",
    "cancel",
    "create_subscription",
    "record_payment",
    "adjust_payment",
    "confirm_payment",
    # Humanization
    "days_until",
    "format_days_remaining",
    "format_currency",
]
