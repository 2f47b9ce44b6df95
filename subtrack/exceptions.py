"""
Error taxonomy for subtrack.

Record-scoped errors derive from SubscriptionError so that batch passes
(alert generation, aggregation, import) can exclude a single bad record
and keep going.
"""

from typing import Optional


class SubtrackError(Exception):
    """Base exception for all subtrack errors."""
    pass


# =============================================================================
# Record-scoped errors
# =============================================================================

class SubscriptionError(SubtrackError):
    """An error tied to a single subscription record."""

    def __init__(self, message: str, subscription_id: Optional[str] = None):
        super().__init__(message)
        self.subscription_id = subscription_id


class InvalidFrequencyError(SubscriptionError, ValueError):
    """Billing frequency is not one of weekly, biweekly, monthly, yearly."""

    def __init__(self, frequency, subscription_id: Optional[str] = None):
        super().__init__(f"Unknown billing frequency: {frequency!r}", subscription_id)
        self.frequency = frequency


class MissingFieldError(SubscriptionError):
    """A field required by the record's own flags is absent."""

    def __init__(self, field_name: str, subscription_id: Optional[str] = None):
        super().__init__(f"Missing required field: {field_name}", subscription_id)
        self.field_name = field_name


class InvalidTransitionError(SubscriptionError):
    """Status change not allowed from the current status."""
    pass


class PaymentStateError(SubscriptionError):
    """Payment record is not in a state that allows the operation."""
    pass


class PaymentNotFoundError(SubscriptionError):
    """No payment with the given id in the subscription's history."""
    pass


# =============================================================================
# Storage and settings errors
# =============================================================================

class StoreError(SubtrackError):
    """Base exception for subscription store errors."""
    pass


class SubscriptionNotFoundError(StoreError):
    """No subscription with the given id in the store."""

    def __init__(self, subscription_id: str):
        super().__init__(f"Subscription not found: {subscription_id}")
        self.subscription_id = subscription_id


class ImportValidationError(StoreError):
    """Import payload could not be read at all."""
    pass


class SettingsError(SubtrackError):
    """Settings file is unreadable or invalid."""
    pass
