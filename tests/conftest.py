"""
Pytest fixtures for subtrack testing.

Provides:
- Fixed reference day and notification policies
- Subscription factories
- Temporary storage paths
- Store and settings factories
"""

import pytest
from pathlib import Path
from datetime import date
from typing import Dict, Any
import sys

# Add the project root to sys.path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


# =============================================================================
# REFERENCE DAY AND POLICY FIXTURES
# =============================================================================

@pytest.fixture
def today():
    """Fixed reference day used across tests (a Wednesday)."""
    return date(2025, 3, 12)


@pytest.fixture
def default_policy():
    """Notification policy with every alert enabled and a 7-day window."""
    from subtrack import NotificationPolicy
    return NotificationPolicy()


# =============================================================================
# SUBSCRIPTION FACTORIES
# =============================================================================

@pytest.fixture
def make_subscription():
    """Factory for Subscription records with sensible defaults."""
    from subtrack import Subscription, Frequency, SubscriptionStatus

    counter = {"n": 0}

    def _make(**overrides) -> Subscription:
        counter["n"] += 1
        data: Dict[str, Any] = {
            "id": f"sub-{counter['n']}",
            "name": f"Service {counter['n']}",
            "amount": 10.0,
            "frequency": Frequency.MONTHLY,
            "start_date": date(2025, 1, 15),
            "next_billing": date(2025, 3, 15),
            "status": SubscriptionStatus.ACTIVE,
        }
        data.update(overrides)
        return Subscription(**data)

    return _make


@pytest.fixture
def sample_record() -> Dict[str, Any]:
    """A raw stored record as found in the JSON store."""
    return {
        "id": "netflix",
        "name": "Netflix",
        "category": "video_streaming",
        "amount": 15.49,
        "currency": "$",
        "frequency": "monthly",
        "start_date": "2024-06-05",
        "next_billing": "2025-03-05",
        "status": "active",
        "reminder_enabled": True,
        "payment_history": [],
    }


@pytest.fixture
def camel_case_record() -> Dict[str, Any]:
    """A record in the browser export format (camelCase, ISO timestamps)."""
    return {
        "id": "spotify",
        "name": "Spotify",
        "category": "music_streaming",
        "amount": 10.99,
        "currency": "€",
        "frequency": "monthly",
        "startDate": "2024-11-20T00:00:00.000Z",
        "nextBilling": "2025-03-20T00:00:00.000Z",
        "status": "trial",
        "isTrialPeriod": True,
        "trialEndDate": "2025-03-16T00:00:00.000Z",
        "reminderEnabled": True,
        "paymentHistory": [
            {
                "id": "payment-spotify-1",
                "amount": 10.99,
                "currency": "€",
                "paymentDate": "2025-02-20T00:00:00.000Z",
                "recordedDate": "2025-02-20T09:12:00.000Z",
                "status": "confirmed",
            }
        ],
    }


# =============================================================================
# TEMPORARY STORAGE FIXTURES
# =============================================================================

@pytest.fixture
def temp_storage_path(tmp_path):
    """Provide a temporary storage directory."""
    storage_dir = tmp_path / "subtrack_test_storage"
    storage_dir.mkdir(parents=True, exist_ok=True)
    return storage_dir


@pytest.fixture
def store_file(temp_storage_path):
    return temp_storage_path / "subscriptions.json"


@pytest.fixture
def settings_file(temp_storage_path):
    return temp_storage_path / "settings.yaml"


@pytest.fixture
def make_store(store_file):
    """Factory for a SubscriptionStore backed by the temporary store file."""
    from subtrack.store import SubscriptionStore

    def _make(path=None):
        return SubscriptionStore(path or store_file)

    return _make


@pytest.fixture
def make_settings(settings_file):
    """Factory for a SettingsManager backed by the temporary settings file."""
    from subtrack.settings import SettingsManager

    def _make(path=None):
        return SettingsManager(path or settings_file)

    return _make
