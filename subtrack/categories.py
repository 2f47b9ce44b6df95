"""
Category and payment-method label tables.

Each table is a closed set of built-in keys plus an open extension table of
user-defined entries. Keys are validated here, at the boundary; the billing
engine only ever sees the key string on a subscription and never reads
labels.
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional
import re

from .exceptions import SettingsError


KEY_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_]{0,63}$")

DEFAULT_CATEGORIES: Dict[str, str] = {
    "groceries": "Groceries",
    "pet_food": "Pet food",
    "productivity_apps": "Productivity apps",
    "car_insurance": "Car insurance",
    "home_insurance": "Home insurance",
    "health_insurance": "Health insurance",
    "travel_insurance": "Travel insurance",
    "pet_insurance": "Pet insurance",
    "podcasts": "Podcasts",
    "film_clubs": "Film clubs",
    "sports_clubs": "Sports clubs",
    "travel_clubs": "Travel clubs",
    "clubs_communities": "Clubs and communities",
    "online_shopping": "Online shopping",
    "airlines": "Airlines",
    "graphic_design": "Graphic design",
    "concerts_opera": "Concerts and opera",
    "online_courses": "Online courses",
    "cryptocurrency": "Cryptocurrency",
    "music_creation": "Music creation",
    "cybersecurity": "Cybersecurity",
    "adult_entertainment": "Adult entertainment",
    "water": "Water",
    "photo_video_editing": "Photo and video editing",
    "electricity": "Electricity",
    "storage": "Storage",
    "home_maintenance": "Home maintenance",
    "professional_training": "Professional training",
    "bank_fees": "Bank fees",
    "pet_sitting": "Pet sitting",
    "childcare": "Childcare",
    "gas": "Gas",
    "business_management": "Business management",
    "financial_management": "Financial management",
    "web_hosting": "Web hosting",
    "cloud_hosting": "Cloud hosting",
    "lodging": "Lodging",
    "artificial_intelligence": "Artificial intelligence",
    "internet": "Internet",
    "investing": "Investing",
    "video_games": "Video games",
    "news_magazines": "News / Magazines",
    "audiobooks": "Audiobooks",
    "ebooks": "E-books",
    "equipment_rental": "Equipment rental",
    "clothing_rental": "Clothing rental",
    "digital_magazines": "Digital magazines",
    "smart_home": "Smart home",
    "fitness": "Fitness",
    "fashion": "Fashion and clothing",
    "music_streaming": "Music streaming",
    "museums_galleries": "Museums and galleries",
    "meditation": "Meditation",
    "programming": "Programming",
    "loyalty_programs": "Loyalty programs",
    "legal_protection": "Legal protection",
    "advertising": "Advertising",
    "dating": "Dating",
    "restocking": "Restocking",
    "car_services": "Car services",
    "email_services": "Email services",
    "postal_services": "Postal services",
    "pet_care": "Pet care",
    "baby_care": "Baby care",
    "creator_support": "Creator support",
    "health_tracking": "Health tracking",
    "home_security": "Home security",
    "curated_boxes": "Curated boxes",
    "therapy_coaching": "Therapy / Coaching",
    "theatre_shows": "Theatre and shows",
    "public_transit": "Public transit",
    "phone": "Phone",
    "television": "Television",
    "video_streaming": "Video streaming",
    "other": "Other",
}

DEFAULT_PAYMENT_METHODS: Dict[str, str] = {
    "cash": "Cash",
    "credit_card": "Credit card",
    "debit_card": "Debit card",
    "prepaid_card": "Prepaid card",
    "crypto": "Cryptocurrency",
    "digital_wallet": "Digital wallet",
    "bank_transfer": "Bank transfer",
    "check": "Check",
}


@dataclass
class LabelEntry:
    """A labelled key in a table."""
    label: str
    enabled: bool = True
    builtin: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "enabled": self.enabled}


class LabelTable:
    """Built-in labels plus user extensions and enable/disable overrides."""

    def __init__(self, defaults: Dict[str, str],
                 overrides: Optional[Dict[str, Dict[str, Any]]] = None,
                 kind: str = "label"):
        self.kind = kind
        self._defaults = dict(defaults)
        self._entries: Dict[str, LabelEntry] = {
            key: LabelEntry(label=label) for key, label in defaults.items()
        }
        for key, override in (overrides or {}).items():
            self._apply_override(key, override)

    @staticmethod
    def validate_key(key: str) -> str:
        """Normalize and validate a table key."""
        normalized = str(key).strip().lower()
        if not KEY_PATTERN.match(normalized):
            raise SettingsError(f"Invalid label key: {key!r}")
        return normalized

    def _apply_override(self, key: str, override: Dict[str, Any]) -> None:
        key = self.validate_key(key)
        entry = self._entries.get(key)
        if entry is None:
            label = override.get("label")
            if not label:
                raise SettingsError(f"Custom entry {key!r} needs a label")
            entry = LabelEntry(label=str(label), builtin=False)
            self._entries[key] = entry
        elif override.get("label"):
            entry.label = str(override["label"])
        if "enabled" in override:
            entry.enabled = bool(override["enabled"])

    def add(self, key: str, label: str) -> str:
        """Add a user-defined entry. Returns the normalized key."""
        key = self.validate_key(key)
        if key in self._entries:
            raise SettingsError(f"Label key already exists: {key}")
        self._entries[key] = LabelEntry(label=label, builtin=False)
        return key

    def remove(self, key: str) -> bool:
        """Remove a user-defined entry. Built-in entries can only be disabled."""
        key = self.validate_key(key)
        entry = self._entries.get(key)
        if entry is None:
            return False
        if entry.builtin:
            raise SettingsError(f"Built-in entry {key!r} cannot be removed; disable it instead")
        del self._entries[key]
        return True

    def set_enabled(self, key: str, enabled: bool) -> None:
        key = self.validate_key(key)
        if key not in self._entries:
            raise SettingsError(f"Unknown {self.kind}: {key}")
        self._entries[key].enabled = enabled

    def label(self, key: str) -> str:
        """Label for a key, falling back to the key itself."""
        entry = self._entries.get(key)
        return entry.label if entry else key

    def is_known(self, key: str) -> bool:
        return key in self._entries

    def require(self, key: str) -> str:
        """
        Normalize a key a subscription is about to use.

        Raises SettingsError if the key is not in the table or is disabled.
        """
        key = self.validate_key(key)
        entry = self._entries.get(key)
        if entry is None:
            raise SettingsError(f"Unknown {self.kind}: {key}")
        if not entry.enabled:
            raise SettingsError(f"Disabled {self.kind}: {key}")
        return key

    def entries(self) -> Dict[str, LabelEntry]:
        return dict(self._entries)

    def enabled(self) -> Dict[str, str]:
        return {k: e.label for k, e in self._entries.items() if e.enabled}

    def overrides(self) -> Dict[str, Dict[str, Any]]:
        """Entries that differ from the defaults, in settings-file form."""
        result = {}
        for key, entry in self._entries.items():
            default_label = self._defaults.get(key)
            if entry.builtin and entry.enabled and entry.label == default_label:
                continue
            result[key] = entry.to_dict()
        return result

    def __len__(self) -> int:
        return len(self._entries)
