"""
Pydantic boundary models.

Raw records (store file, imports) and settings are validated here before
anything reaches the engine. Both snake_case keys and the camelCase keys of
the browser app's export format are accepted.
"""

from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from . import Frequency, PaymentStatus, SubscriptionStatus
from .models import (
    ALLOWED_ADVANCE_DAYS,
    NotificationPolicy,
    PaymentRecord,
    Subscription,
    as_date,
)


class _BoundaryModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# =============================================================================
# Records
# =============================================================================

class PaymentRecordSchema(_BoundaryModel):
    """Stored payment record."""
    id: str
    amount: float = Field(..., ge=0)
    currency: str = "$"
    payment_date: date
    recorded_date: str = ""
    status: PaymentStatus = PaymentStatus.PENDING
    is_adjusted: bool = False
    original_amount: Optional[float] = None

    @field_validator("payment_date", mode="before")
    @classmethod
    def parse_payment_date(cls, v):
        return as_date(v)

    def to_model(self) -> PaymentRecord:
        return PaymentRecord(
            id=self.id,
            amount=self.amount,
            currency=self.currency,
            payment_date=self.payment_date,
            recorded_date=self.recorded_date,
            status=self.status,
            is_adjusted=self.is_adjusted,
            original_amount=self.original_amount if self.is_adjusted else None,
        )


class SubscriptionSchema(_BoundaryModel):
    """Stored or imported subscription record."""
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: str = "other"
    amount: float = Field(..., ge=0)
    currency: str = "$"
    frequency: Frequency
    start_date: date
    next_billing: date
    is_trial_period: bool = False
    trial_end_date: Optional[date] = None
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    reminder_enabled: bool = True
    payment_method: Optional[str] = None
    is_automatic_payment: bool = False
    url: Optional[str] = None
    logo_url: Optional[str] = None
    notes: Optional[str] = None
    primary_color: Optional[str] = None
    payment_history: List[PaymentRecordSchema] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    reactivated_at: Optional[str] = None
    amount_updated_at: Optional[str] = None
    frequency_updated_at: Optional[str] = None
    category_updated_at: Optional[str] = None
    payment_method_updated_at: Optional[str] = None
    start_date_updated_at: Optional[str] = None
    next_billing_updated_at: Optional[str] = None

    @field_validator("frequency", mode="before")
    @classmethod
    def parse_frequency(cls, v):
        # InvalidFrequencyError is a ValueError, so pydantic reports it
        return Frequency.parse(v)

    @field_validator("start_date", "next_billing", "trial_end_date", mode="before")
    @classmethod
    def parse_dates(cls, v):
        return as_date(v)

    @field_validator("payment_history", mode="before")
    @classmethod
    def default_history(cls, v):
        return v or []

    @model_validator(mode="after")
    def check_trial_end_date(self):
        if self.is_trial_period and self.trial_end_date is None:
            raise ValueError("trial_end_date is required when is_trial_period is set")
        return self

    def to_model(self) -> Subscription:
        return Subscription(
            id=self.id,
            name=self.name,
            category=self.category,
            amount=self.amount,
            currency=self.currency,
            frequency=self.frequency,
            start_date=self.start_date,
            next_billing=self.next_billing,
            is_trial_period=self.is_trial_period,
            trial_end_date=self.trial_end_date,
            status=self.status,
            reminder_enabled=self.reminder_enabled,
            payment_method=self.payment_method,
            is_automatic_payment=self.is_automatic_payment,
            url=self.url,
            logo_url=self.logo_url,
            notes=self.notes,
            primary_color=self.primary_color,
            payment_history=[p.to_model() for p in self.payment_history],
            created_at=self.created_at,
            updated_at=self.updated_at,
            reactivated_at=self.reactivated_at,
            amount_updated_at=self.amount_updated_at,
            frequency_updated_at=self.frequency_updated_at,
            category_updated_at=self.category_updated_at,
            payment_method_updated_at=self.payment_method_updated_at,
            start_date_updated_at=self.start_date_updated_at,
            next_billing_updated_at=self.next_billing_updated_at,
        )


# =============================================================================
# Settings
# =============================================================================

class NotificationSettingsSchema(_BoundaryModel):
    """Notification toggles and advance window."""
    upcoming_payments: bool = True
    trial_ending: bool = True
    subscription_expiring: bool = True
    advance_days: int = 7

    @field_validator("advance_days", mode="before")
    @classmethod
    def parse_advance_days(cls, v):
        # Older settings files store the window as a string ("7")
        days = int(v)
        if days not in ALLOWED_ADVANCE_DAYS:
            raise ValueError(f"advance_days must be one of {ALLOWED_ADVANCE_DAYS}")
        return days

    def to_policy(self) -> NotificationPolicy:
        return NotificationPolicy(
            advance_days=self.advance_days,
            upcoming_payments=self.upcoming_payments,
            trial_ending=self.trial_ending,
            subscription_expiring=self.subscription_expiring,
        )


class NumberFormatSchema(_BoundaryModel):
    """Separators used when displaying amounts."""
    thousands_separator: Literal["space", "comma", "dot", "none"] = "comma"
    decimal_separator: Literal["comma", "dot"] = "dot"


class LabelOverrideSchema(_BoundaryModel):
    """Override or extension entry for a label table."""
    label: Optional[str] = None
    enabled: bool = True


class SettingsSchema(_BoundaryModel):
    """Whole application settings document."""
    language: Literal["en", "fr", "es"] = "en"
    currency: str = Field("$", min_length=1, max_length=4)
    number_format: NumberFormatSchema = Field(default_factory=NumberFormatSchema)
    notifications: NotificationSettingsSchema = Field(default_factory=NotificationSettingsSchema)
    categories: Dict[str, LabelOverrideSchema] = Field(default_factory=dict)
    payment_methods: Dict[str, LabelOverrideSchema] = Field(default_factory=dict)

    def dump(self) -> Dict[str, Any]:
        """Plain snake_case dict for the settings file."""
        return self.model_dump(mode="json", exclude_none=True)
