"""
JSON-file persistence for the subscription collection.

The store owns the collection and hands out snapshots; the engine works on
those snapshots and the store writes back the updated copies it returns.
Malformed records are skipped with a warning when loading or importing;
the rest of the collection still loads.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
import json
import logging

from pydantic import ValidationError

from . import lifecycle
from .exceptions import ImportValidationError, StoreError, SubscriptionNotFoundError
from .models import Subscription
from .schemas import SubscriptionSchema

logger = logging.getLogger(__name__)


STORE_VERSION = 1


@dataclass
class ImportReport:
    """Outcome of an import."""
    imported: List[str] = field(default_factory=list)
    skipped: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "imported_count": len(self.imported),
            "skipped_count": len(self.skipped),
            "imported": self.imported,
            "skipped": self.skipped,
        }


def parse_records(records: List[Any]) -> Tuple[List[Subscription], List[Dict[str, Any]]]:
    """Validate raw records. Returns the valid models and a list of skipped entries."""
    parsed: List[Subscription] = []
    skipped: List[Dict[str, Any]] = []
    for index, raw in enumerate(records):
        try:
            parsed.append(SubscriptionSchema.model_validate(raw).to_model())
        except ValidationError as e:
            record_id = raw.get("id") if isinstance(raw, dict) else None
            logger.warning(f"Skipping invalid subscription record #{index} ({record_id}): "
                           f"{e.error_count()} validation error(s)")
            skipped.append({
                "index": index,
                "id": record_id,
                "errors": [err["msg"] for err in e.errors()],
            })
    return parsed, skipped


def _records_from_payload(payload: Any) -> List[Any]:
    # Accept a bare list (browser export) or the store envelope
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("subscriptions"), list):
        return payload["subscriptions"]
    raise ImportValidationError("Expected a list of subscriptions or an object with 'subscriptions'")


class SubscriptionStore:
    """Subscription collection persisted to a JSON file."""

    def __init__(self, store_file: Optional[Path] = None):
        self.store_file = Path(store_file) if store_file else None
        self._subscriptions: Dict[str, Subscription] = {}
        self.load_errors: List[Dict[str, Any]] = []
        self._load()

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def _load(self) -> None:
        if not self.store_file or not self.store_file.exists():
            return
        try:
            with open(self.store_file, "r") as f:
                payload = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise StoreError(f"Cannot read store file {self.store_file}: {e}") from e

        subscriptions, skipped = parse_records(_records_from_payload(payload))
        for sub in subscriptions:
            self._subscriptions[sub.id] = sub
        self.load_errors = skipped
        logger.debug(f"Loaded {len(self._subscriptions)} subscriptions from {self.store_file}")

    def export_data(self) -> Dict[str, Any]:
        """Export the collection for persistence."""
        return {
            "version": STORE_VERSION,
            "subscriptions": [s.to_dict() for s in self._subscriptions.values()],
            "exported_at": datetime.now().isoformat(),
        }

    def to_json(self) -> str:
        return json.dumps(self.export_data(), indent=2, default=str)

    def save(self) -> None:
        """Write the collection to the store file, if one is configured."""
        if not self.store_file:
            return
        self.store_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.store_file, "w") as f:
            f.write(self.to_json())

    def import_data(self, payload: Union[str, List[Any], Dict[str, Any]],
                    replace: bool = False) -> ImportReport:
        """
        Import subscriptions from an export payload.

        Records are merged by id unless replace is set, in which case the
        current collection is discarded first.
        """
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as e:
                raise ImportValidationError(f"Import is not valid JSON: {e}") from e

        subscriptions, skipped = parse_records(_records_from_payload(payload))
        if replace:
            self._subscriptions.clear()
        for sub in subscriptions:
            self._subscriptions[sub.id] = sub
        self.save()

        report = ImportReport(imported=[sub.id for sub in subscriptions], skipped=skipped)
        logger.info(f"Imported {len(report.imported)} subscriptions "
                    f"({len(report.skipped)} skipped)")
        return report

    # =========================================================================
    # COLLECTION ACCESS
    # =========================================================================

    def snapshot(self) -> List[Subscription]:
        """Current subscriptions in insertion order."""
        return list(self._subscriptions.values())

    def get(self, subscription_id: str) -> Subscription:
        try:
            return self._subscriptions[subscription_id]
        except KeyError:
            raise SubscriptionNotFoundError(subscription_id) from None

    def __contains__(self, subscription_id: str) -> bool:
        return subscription_id in self._subscriptions

    def __len__(self) -> int:
        return len(self._subscriptions)

    def add(self, subscription: Subscription) -> Subscription:
        if subscription.id in self._subscriptions:
            raise StoreError(f"Subscription already exists: {subscription.id}")
        self._subscriptions[subscription.id] = subscription
        self.save()
        logger.info(f"Added subscription {subscription.id} ({subscription.name})")
        return subscription

    def put(self, subscription: Subscription) -> Subscription:
        """Write back an updated copy of an existing subscription."""
        self.get(subscription.id)
        self._subscriptions[subscription.id] = subscription
        self.save()
        return subscription

    def delete(self, subscription_id: str) -> Subscription:
        """Hard-delete a subscription and its history. Not reversible."""
        removed = self.get(subscription_id)
        del self._subscriptions[subscription_id]
        self.save()
        logger.info(f"Deleted subscription {subscription_id}")
        return removed

    # =========================================================================
    # LIFECYCLE SHORTCUTS
    # =========================================================================

    def cancel(self, subscription_id: str) -> Subscription:
        updated = self.put(lifecycle.cancel(self.get(subscription_id)))
        logger.info(f"Cancelled subscription {subscription_id}")
        return updated

    def reactivate(self, subscription_id: str, today) -> Subscription:
        updated = self.put(lifecycle.apply_reactivation(self.get(subscription_id), today))
        logger.info(f"Reactivated subscription {subscription_id}, "
                    f"next billing {updated.next_billing.isoformat()}")
        return updated

    def record_payment(self, subscription_id: str, today) -> Subscription:
        updated = self.put(lifecycle.record_payment(self.get(subscription_id), today))
        logger.info(f"Recorded payment for {subscription_id}, "
                    f"next billing {updated.next_billing.isoformat()}")
        return updated

    def adjust_payment(self, subscription_id: str, payment_id: str, amount: float,
                       payment_date=None, update_subscription_amount: bool = False) -> Subscription:
        return self.put(lifecycle.adjust_payment(
            self.get(subscription_id), payment_id, amount,
            payment_date=payment_date,
            update_subscription_amount=update_subscription_amount,
        ))

    def confirm_payment(self, subscription_id: str, payment_id: str) -> Subscription:
        return self.put(lifecycle.confirm_payment(self.get(subscription_id), payment_id))

    def pending_payments(self) -> List[Dict[str, Any]]:
        """Pending payments across all subscriptions, oldest first."""
        pending = [
            {"subscription": sub, "payment": payment}
            for sub in self._subscriptions.values()
            for payment in sub.payment_history
            if payment.is_pending
        ]
        pending.sort(key=lambda p: p["payment"].payment_date)
        return pending
