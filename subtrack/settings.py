"""
Application settings backed by a YAML file.

Missing keys fall back to defaults through a deep merge, so a settings file
only needs the values the user changed. Observers registered with
SettingsManager.subscribe() are called after every change; that is how the
boundary re-runs the alert engine when the notification policy changes.
"""

from copy import deepcopy
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
import logging

import yaml
from pydantic import ValidationError

from .categories import DEFAULT_CATEGORIES, DEFAULT_PAYMENT_METHODS, LabelTable
from .exceptions import SettingsError
from .models import NotificationPolicy
from .schemas import SettingsSchema

logger = logging.getLogger(__name__)


DEFAULT_SETTINGS: Dict[str, Any] = SettingsSchema().dump()

# Sections whose keys are user-defined
OPEN_SECTIONS = ("categories", "payment_methods")

SettingsObserver = Callable[["SettingsManager"], None]


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class SettingsManager:
    """Loads, validates, updates and persists application settings."""

    def __init__(self, settings_file: Optional[Path] = None):
        self.settings_file = Path(settings_file) if settings_file else None
        self._observers: List[SettingsObserver] = []
        self._settings = self._load()

    # =========================================================================
    # LOADING
    # =========================================================================

    def _load(self) -> SettingsSchema:
        raw: Dict[str, Any] = {}
        if self.settings_file and self.settings_file.exists():
            try:
                with open(self.settings_file) as f:
                    raw = yaml.safe_load(f) or {}
            except (yaml.YAMLError, OSError) as e:
                raise SettingsError(f"Cannot read settings file {self.settings_file}: {e}") from e
            if not isinstance(raw, dict):
                raise SettingsError(f"Settings file {self.settings_file} must contain a mapping")
            logger.debug(f"Loaded settings from {self.settings_file}")

        return self._validate(deep_merge(DEFAULT_SETTINGS, raw))

    @staticmethod
    def _validate(data: Dict[str, Any]) -> SettingsSchema:
        try:
            return SettingsSchema.model_validate(data)
        except ValidationError as e:
            raise SettingsError(f"Invalid settings: {e}") from e

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    @property
    def settings(self) -> SettingsSchema:
        return self._settings

    @property
    def policy(self) -> NotificationPolicy:
        """Notification policy to hand to the alert engine."""
        return self._settings.notifications.to_policy()

    @property
    def language(self) -> str:
        return self._settings.language

    def currency_format(self) -> Dict[str, str]:
        """Keyword arguments for humanize.format_currency."""
        return {
            "symbol": self._settings.currency,
            "language": self._settings.language,
            "thousands_separator": self._settings.number_format.thousands_separator,
            "decimal_separator": self._settings.number_format.decimal_separator,
        }

    def categories(self) -> LabelTable:
        return LabelTable(
            DEFAULT_CATEGORIES,
            {k: v.model_dump(exclude_none=True) for k, v in self._settings.categories.items()},
            kind="category",
        )

    def payment_methods(self) -> LabelTable:
        return LabelTable(
            DEFAULT_PAYMENT_METHODS,
            {k: v.model_dump(exclude_none=True) for k, v in self._settings.payment_methods.items()},
            kind="payment method",
        )

    def to_dict(self) -> Dict[str, Any]:
        return self._settings.dump()

    # =========================================================================
    # UPDATES
    # =========================================================================

    def subscribe(self, observer: SettingsObserver) -> Callable[[], None]:
        """Register an observer; returns a function that unregisters it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def update(self, changes: Dict[str, Any]) -> SettingsSchema:
        """Merge a partial settings dict, validate, persist and notify."""
        self._settings = self._validate(deep_merge(self.to_dict(), changes))
        self.save()
        self._notify()
        return self._settings

    def set_value(self, dotted_key: str, value: Any) -> SettingsSchema:
        """Set a single value addressed as 'notifications.advance_days'."""
        parts = dotted_key.split(".")
        self._check_key(parts, dotted_key)
        changes: Dict[str, Any] = {}
        node = changes
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value
        return self.update(changes)

    @staticmethod
    def _check_key(parts: List[str], dotted_key: str) -> None:
        node: Any = DEFAULT_SETTINGS
        for part in parts:
            if not isinstance(node, dict) or part not in node:
                raise SettingsError(f"Unknown setting: {dotted_key}")
            if part in OPEN_SECTIONS and node is DEFAULT_SETTINGS:
                return
            node = node[part]

    def save_label_tables(self, categories: LabelTable, payment_methods: LabelTable) -> None:
        """Persist category/payment-method overrides."""
        data = self.to_dict()
        data["categories"] = categories.overrides()
        data["payment_methods"] = payment_methods.overrides()
        self._settings = self._validate(data)
        self.save()
        self._notify()

    def save(self) -> None:
        """Write settings to the YAML file, if one is configured."""
        if not self.settings_file:
            return
        self.settings_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.settings_file, "w") as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
        logger.info(f"Settings saved to {self.settings_file}")

    def _notify(self) -> None:
        for observer in list(self._observers):
            observer(self)
