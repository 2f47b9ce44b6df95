"""
Tests for billing recurrence arithmetic

Tests cover:
- Next occurrence strictly after a reference day
- Anchors already in the future
- Month-end clamping and leap years
- Single and multi-step offsets
- Invalid frequencies
"""

import pytest
from datetime import date, datetime
import sys
from pathlib import Path

# Add path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from subtrack import (
    Frequency,
    add_step,
    calculate_next_billing,
    next_occurrence_after,
)
from subtrack.exceptions import InvalidFrequencyError, SubscriptionError


class TestNextOccurrenceAfter:
    """Tests for next_occurrence_after."""

    def test_monthly_after_anchor(self):
        """Test that a monthly cycle started 2025-01-15 next bills on 2025-02-15."""
        result = next_occurrence_after(date(2025, 1, 15), "monthly", date(2025, 1, 20))
        assert result == date(2025, 2, 15)

    def test_reference_on_occurrence_moves_to_next(self):
        """Test that an occurrence equal to the reference is not returned."""
        result = next_occurrence_after(date(2025, 1, 15), Frequency.MONTHLY, date(2025, 2, 15))
        assert result == date(2025, 3, 15)

    def test_anchor_equal_to_reference(self):
        """Test that an anchor equal to the reference advances one step."""
        result = next_occurrence_after(date(2025, 1, 15), Frequency.MONTHLY, date(2025, 1, 15))
        assert result == date(2025, 2, 15)

    def test_future_anchor_returned_unchanged(self):
        """Test that an anchor after the reference is returned as is."""
        for freq in Frequency:
            result = next_occurrence_after(date(2025, 6, 1), freq, date(2025, 3, 1))
            assert result == date(2025, 6, 1)

    def test_weekly(self):
        """Test weekly steps of 7 days."""
        assert next_occurrence_after(date(2025, 1, 1), "weekly", date(2025, 1, 3)) == date(2025, 1, 8)
        assert next_occurrence_after(date(2025, 1, 1), "weekly", date(2025, 1, 8)) == date(2025, 1, 15)

    def test_biweekly(self):
        """Test biweekly steps of 14 days."""
        assert next_occurrence_after(date(2025, 1, 1), "biweekly", date(2025, 1, 10)) == date(2025, 1, 15)
        assert next_occurrence_after(date(2025, 1, 1), "biweekly", date(2025, 1, 15)) == date(2025, 1, 29)

    def test_yearly(self):
        """Test yearly steps."""
        result = next_occurrence_after(date(2020, 7, 4), "yearly", date(2025, 3, 1))
        assert result == date(2025, 7, 4)

    def test_yearly_reference_after_anniversary(self):
        """Test that a passed anniversary rolls to the next year."""
        result = next_occurrence_after(date(2020, 2, 10), "yearly", date(2025, 3, 1))
        assert result == date(2026, 2, 10)

    def test_datetime_reference_truncated(self):
        """Test that a datetime reference is compared as a calendar day."""
        result = next_occurrence_after(
            date(2025, 1, 15), "monthly", datetime(2025, 1, 15, 23, 59)
        )
        assert result == date(2025, 2, 15)

    def test_iso_string_inputs(self):
        """Test that ISO strings and timestamps are accepted."""
        result = next_occurrence_after("2025-01-15", "monthly", "2025-01-20T08:30:00.000Z")
        assert result == date(2025, 2, 15)

    def test_invalid_frequency_raises(self):
        """Test that an unknown frequency fails loudly."""
        with pytest.raises(InvalidFrequencyError):
            next_occurrence_after(date(2025, 1, 15), "fortnightly", date(2025, 1, 20))

    def test_invalid_frequency_is_record_scoped(self):
        """Test that InvalidFrequencyError is both a SubscriptionError and a ValueError."""
        with pytest.raises(SubscriptionError):
            next_occurrence_after(date(2025, 1, 15), "daily", date(2025, 1, 20))
        with pytest.raises(ValueError):
            next_occurrence_after(date(2025, 1, 15), "daily", date(2025, 1, 20))


class TestMonthEndClamping:
    """Tests for day-of-month overflow handling."""

    def test_jan_31_clamps_to_feb_28(self):
        """Test that Jan 31 bills on the last day of February."""
        result = next_occurrence_after(date(2025, 1, 31), "monthly", date(2025, 2, 1))
        assert result == date(2025, 2, 28)

    def test_clamping_does_not_drift(self):
        """Test that the cycle returns to the 31st after a short month."""
        result = next_occurrence_after(date(2025, 1, 31), "monthly", date(2025, 2, 28))
        assert result == date(2025, 3, 31)

    def test_leap_year_february(self):
        """Test that Jan 31 bills on Feb 29 in a leap year."""
        result = next_occurrence_after(date(2024, 1, 31), "monthly", date(2024, 2, 1))
        assert result == date(2024, 2, 29)

    def test_yearly_leap_day_anchor(self):
        """Test that a Feb 29 anchor bills on Feb 28 in common years."""
        result = next_occurrence_after(date(2024, 2, 29), "yearly", date(2024, 3, 1))
        assert result == date(2025, 2, 28)

    def test_yearly_leap_day_returns_in_leap_year(self):
        """Test that a Feb 29 anchor bills on Feb 29 again four years on."""
        result = next_occurrence_after(date(2024, 2, 29), "yearly", date(2027, 6, 1))
        assert result == date(2028, 2, 29)


class TestOccurrenceProperties:
    """Property checks over a grid of anchors and references."""

    ANCHORS = [date(2024, 1, 31), date(2024, 2, 29), date(2024, 12, 15), date(2025, 3, 1)]
    REFERENCES = [date(2025, 1, 1), date(2025, 2, 28), date(2025, 3, 31), date(2026, 7, 15)]

    @pytest.mark.parametrize("freq", list(Frequency))
    def test_result_is_after_reference_and_on_cycle(self, freq):
        """Test that the result is strictly after the reference and equals anchor + k steps."""
        for anchor in self.ANCHORS:
            for reference in self.REFERENCES:
                if anchor > reference:
                    continue
                result = next_occurrence_after(anchor, freq, reference)
                assert result > reference

                k = 0
                while add_step(anchor, freq, k) < result:
                    k += 1
                assert add_step(anchor, freq, k) == result
                # No earlier occurrence lies after the reference
                assert add_step(anchor, freq, k - 1) <= reference

    @pytest.mark.parametrize("freq", list(Frequency))
    def test_future_anchor_property(self, freq):
        """Test that result == anchor whenever anchor > reference."""
        for anchor in self.ANCHORS:
            reference = date(2023, 12, 31)
            assert next_occurrence_after(anchor, freq, reference) == anchor


class TestAddStep:
    """Tests for add_step and calculate_next_billing."""

    def test_single_steps(self):
        """Test one step of each frequency."""
        day = date(2025, 3, 1)
        assert add_step(day, Frequency.WEEKLY) == date(2025, 3, 8)
        assert add_step(day, Frequency.BIWEEKLY) == date(2025, 3, 15)
        assert add_step(day, Frequency.MONTHLY) == date(2025, 4, 1)
        assert add_step(day, Frequency.YEARLY) == date(2026, 3, 1)

    def test_multi_step_from_anchor(self):
        """Test that k steps are computed from the anchor."""
        assert add_step(date(2025, 1, 31), "monthly", 1) == date(2025, 2, 28)
        assert add_step(date(2025, 1, 31), "monthly", 2) == date(2025, 3, 31)
        assert add_step(date(2025, 1, 1), "weekly", 3) == date(2025, 1, 22)

    def test_zero_steps(self):
        """Test that zero steps returns the same day."""
        assert add_step(date(2025, 1, 31), "monthly", 0) == date(2025, 1, 31)

    def test_calculate_next_billing(self):
        """Test the creation-time helper."""
        assert calculate_next_billing("2025-01-15", "monthly", "2025-01-20") == date(2025, 2, 15)
        assert calculate_next_billing("2025-04-01", "monthly", "2025-01-20") == date(2025, 4, 1)
