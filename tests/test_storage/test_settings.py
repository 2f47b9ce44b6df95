"""
Tests for SettingsManager - YAML-backed application settings

Tests cover:
- Defaults and deep merge of partial files
- Validation errors
- Updates, persistence and observers
- Currency format and label tables
"""

import pytest
import yaml
import sys
from pathlib import Path

# Add path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from subtrack import NotificationPolicy
from subtrack.exceptions import SettingsError
from subtrack.settings import DEFAULT_SETTINGS, SettingsManager, deep_merge


class TestSettingsLoading:
    """Tests for loading settings."""

    def test_defaults_without_file(self, make_settings):
        """Test that a missing file yields the defaults."""
        manager = make_settings()
        assert manager.language == "en"
        assert manager.settings.currency == "$"
        assert manager.policy == NotificationPolicy()
        assert manager.to_dict() == DEFAULT_SETTINGS

    def test_partial_file_merged(self, make_settings, settings_file):
        """Test that a partial file only overrides what it names."""
        settings_file.write_text(yaml.safe_dump({
            "language": "fr",
            "notifications": {"advance_days": 14},
        }))
        manager = make_settings()

        assert manager.language == "fr"
        assert manager.policy.advance_days == 14
        assert manager.policy.trial_ending is True
        assert manager.settings.number_format.thousands_separator == "comma"

    def test_string_advance_days_accepted(self, make_settings, settings_file):
        """Test that the advance window may be stored as a string."""
        settings_file.write_text("notifications:\n  advance_days: '30'\n")
        assert make_settings().policy.advance_days == 30

    def test_invalid_advance_days(self, make_settings, settings_file):
        """Test that windows other than 3, 7, 14, 30 are rejected."""
        settings_file.write_text("notifications:\n  advance_days: 10\n")
        with pytest.raises(SettingsError):
            make_settings()

    def test_invalid_language(self, make_settings, settings_file):
        """Test that unsupported languages are rejected."""
        settings_file.write_text("language: de\n")
        with pytest.raises(SettingsError):
            make_settings()

    def test_not_a_mapping(self, make_settings, settings_file):
        """Test that a YAML list is rejected."""
        settings_file.write_text("- a\n- b\n")
        with pytest.raises(SettingsError):
            make_settings()

    def test_broken_yaml(self, make_settings, settings_file):
        """Test that unparsable YAML is reported as a settings error."""
        settings_file.write_text("language: [en\n")
        with pytest.raises(SettingsError):
            make_settings()

    def test_empty_file(self, make_settings, settings_file):
        """Test that an empty file means defaults."""
        settings_file.write_text("")
        assert make_settings().to_dict() == DEFAULT_SETTINGS


class TestSettingsUpdates:
    """Tests for updates, persistence and observers."""

    def test_set_value_persists(self, make_settings, settings_file):
        """Test that set_value writes the file."""
        manager = make_settings()
        manager.set_value("notifications.advance_days", 3)

        saved = yaml.safe_load(settings_file.read_text())
        assert saved["notifications"]["advance_days"] == 3
        assert make_settings().policy.advance_days == 3

    def test_invalid_update_keeps_previous(self, make_settings):
        """Test that a rejected update leaves settings unchanged."""
        manager = make_settings()
        with pytest.raises(SettingsError):
            manager.set_value("notifications.advance_days", 5)
        assert manager.policy.advance_days == 7

    def test_observer_notified(self, make_settings):
        """Test that observers see the new policy."""
        manager = make_settings()
        seen = []
        manager.subscribe(lambda m: seen.append(m.policy.advance_days))

        manager.update({"notifications": {"advance_days": 14}})
        assert seen == [14]

    def test_unsubscribe(self, make_settings):
        """Test that an unsubscribed observer is not called."""
        manager = make_settings()
        seen = []
        unsubscribe = manager.subscribe(lambda m: seen.append(m.language))
        unsubscribe()
        manager.set_value("language", "fr")
        assert seen == []

    def test_in_memory_manager(self):
        """Test that a manager without a file still updates."""
        manager = SettingsManager()
        manager.set_value("currency", "€")
        assert manager.settings.currency == "€"

    @pytest.mark.parametrize("key", ["foo.bar", "notifications.snooze", "language.code", "number_format.grouping"])
    def test_unknown_key_rejected(self, make_settings, settings_file, key):
        """Test that set_value refuses keys that are not settings."""
        manager = make_settings()
        with pytest.raises(SettingsError, match="Unknown setting"):
            manager.set_value(key, "1")
        assert not settings_file.exists()
        assert manager.to_dict() == DEFAULT_SETTINGS

    def test_label_override_by_key(self, make_settings):
        """Test that dotted keys into the label tables are accepted."""
        manager = make_settings()
        manager.set_value("categories.dating.enabled", False)
        assert "dating" not in manager.categories().enabled()


class TestSettingsAccessors:
    """Tests for derived accessors."""

    def test_currency_format(self, make_settings, settings_file):
        """Test keyword arguments for format_currency."""
        settings_file.write_text(yaml.safe_dump({
            "language": "fr",
            "currency": "€",
            "number_format": {"thousands_separator": "space", "decimal_separator": "comma"},
        }))
        assert make_settings().currency_format() == {
            "symbol": "€",
            "language": "fr",
            "thousands_separator": "space",
            "decimal_separator": "comma",
        }

    def test_custom_category_round_trip(self, make_settings):
        """Test that label table changes are saved and reloaded."""
        manager = make_settings()
        categories = manager.categories()
        categories.add("Board_Games", "Board games")
        categories.set_enabled("dating", False)
        manager.save_label_tables(categories, manager.payment_methods())

        reloaded = make_settings().categories()
        assert reloaded.label("board_games") == "Board games"
        assert "dating" not in reloaded.enabled()
        assert "video_streaming" in reloaded.enabled()


class TestDeepMerge:
    """Tests for deep_merge."""

    def test_nested(self):
        """Test nested merge without mutating the base."""
        base = {"a": {"b": 1, "c": 2}, "d": 3}
        merged = deep_merge(base, {"a": {"c": 20}})
        assert merged == {"a": {"b": 1, "c": 20}, "d": 3}
        assert base["a"]["c"] == 2

    def test_none_override(self):
        """Test that a None override returns a copy of the base."""
        assert deep_merge({"a": 1}, None) == {"a": 1}
