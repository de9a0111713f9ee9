"""
In-memory data store with key-value persistence and broadcast.

The ``DataStore`` keeps one list of records per collection and one
``BehaviorSubject`` per collection.  Services read and mutate the lists
directly, then call ``notify_data_change`` which writes every collection
to storage and publishes fresh snapshots to subscribers.

Each collection is stored as a single JSON array under the key
``<prefix>_<collection>``.  Loading merges stored records into memory,
skipping ids that are already present.  A key holding malformed JSON or
a record that fails validation is logged and skipped; the rest of the
data still loads.

A process-wide store is available through ``get_store``.  It is created
lazily from ``settings`` and can be dropped with ``reset_store``.
"""

from __future__ import annotations

import json
import logging
import secrets
import string
import time
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from .broadcast import BehaviorSubject
from .config import settings
from .dates import ensure_aware, utcnow  # noqa: F401
from .storage import KeyValueStorage, build_storage
from ..schemas.application import FranchiseApplication
from ..schemas.franchise import Franchise
from ..schemas.notification import Notification
from ..schemas.partnership import PartnershipDeactivation
from ..schemas.payment import PaymentRequest, PaymentTransaction, RefundRequest
from ..schemas.timeline import ApplicationTimelineEntry
from ..schemas.user import User


logger = logging.getLogger(__name__)


# Collection name -> record model.  Order is the order used for saving
# and for ``get_data_counts``.
COLLECTION_MODELS: Dict[str, Type[BaseModel]] = {
    "franchises": Franchise,
    "applications": FranchiseApplication,
    "payment_transactions": PaymentTransaction,
    "refund_requests": RefundRequest,
    "application_timelines": ApplicationTimelineEntry,
    "payment_requests": PaymentRequest,
    "notifications": Notification,
    "partnership_deactivations": PartnershipDeactivation,
    "users": User,
}

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_unique_id() -> str:
    """Return ``<epoch milliseconds>-<9 random lowercase alphanumerics>``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{int(time.time() * 1000)}-{suffix}"


def apply_update(record: BaseModel, data: BaseModel) -> Dict[str, Any]:
    """Copy the fields set in ``data`` onto ``record``.

    The merged result is validated against the record's own model first,
    so an explicit ``null`` for a required field raises
    ``ValidationError`` (a ``ValueError``) and leaves ``record`` unchanged.
    Returns the applied changes.
    """
    changes = data.model_dump(exclude_unset=True)
    merged = type(record).model_validate({**record.model_dump(), **changes})
    for field in changes:
        setattr(record, field, getattr(merged, field))
    return changes


class DataStore:
    """Collections of records plus their persistence and subscribers."""

    def __init__(self, storage: KeyValueStorage, key_prefix: Optional[str] = None) -> None:
        self.storage = storage
        self.key_prefix = key_prefix or settings.storage_key_prefix
        self.collections: Dict[str, List[BaseModel]] = {
            name: [] for name in COLLECTION_MODELS
        }
        self.subjects: Dict[str, BehaviorSubject] = {
            name: BehaviorSubject([], name=name) for name in COLLECTION_MODELS
        }

    # Typed accessors used by the services.

    @property
    def franchises(self) -> List[Franchise]:
        return self.collections["franchises"]  # type: ignore[return-value]

    @property
    def applications(self) -> List[FranchiseApplication]:
        return self.collections["applications"]  # type: ignore[return-value]

    @property
    def payment_transactions(self) -> List[PaymentTransaction]:
        return self.collections["payment_transactions"]  # type: ignore[return-value]

    @property
    def refund_requests(self) -> List[RefundRequest]:
        return self.collections["refund_requests"]  # type: ignore[return-value]

    @property
    def application_timelines(self) -> List[ApplicationTimelineEntry]:
        return self.collections["application_timelines"]  # type: ignore[return-value]

    @property
    def payment_requests(self) -> List[PaymentRequest]:
        return self.collections["payment_requests"]  # type: ignore[return-value]

    @property
    def notifications(self) -> List[Notification]:
        return self.collections["notifications"]  # type: ignore[return-value]

    @property
    def partnership_deactivations(self) -> List[PartnershipDeactivation]:
        return self.collections["partnership_deactivations"]  # type: ignore[return-value]

    @property
    def users(self) -> List[User]:
        return self.collections["users"]  # type: ignore[return-value]

    def storage_key(self, collection: str) -> str:
        return f"{self.key_prefix}_{collection}"

    def _check_collection(self, collection: str) -> None:
        if collection not in COLLECTION_MODELS:
            raise KeyError(f"Unknown collection '{collection}'")

    def load_from_storage(self) -> None:
        """Merge stored records into memory and publish the result."""
        for name, model in COLLECTION_MODELS.items():
            key = self.storage_key(name)
            raw = self.storage.get_item(key)
            if raw is None:
                continue
            try:
                records = json.loads(raw)
            except json.JSONDecodeError:
                logger.error("Stored data under '%s' is not valid JSON; skipping", key)
                continue
            if not isinstance(records, list):
                logger.error("Stored data under '%s' is not a list; skipping", key)
                continue

            items = self.collections[name]
            existing_ids = {item.id for item in items}
            loaded = 0
            for record in records:
                try:
                    item = model.model_validate(record)
                except ValidationError as exc:
                    logger.warning(
                        "Skipping invalid %s record: %s",
                        name,
                        exc.errors(include_url=False),
                    )
                    continue
                if item.id in existing_ids:
                    continue
                items.append(item)
                existing_ids.add(item.id)
                loaded += 1
            logger.debug("Loaded %s %s from storage", loaded, name)
        self.update_subjects()

    def save_to_storage(self) -> None:
        """Serialize every collection under its key.

        Storage errors propagate to the caller.
        """
        for name, items in self.collections.items():
            payload = json.dumps(
                [item.model_dump(mode="json") for item in items],
                ensure_ascii=False,
            )
            self.storage.set_item(self.storage_key(name), payload)

    def update_subjects(self) -> None:
        for name, items in self.collections.items():
            self.subjects[name].next(list(items))

    def notify_data_change(self) -> None:
        """Persist all collections, then broadcast fresh snapshots."""
        self.save_to_storage()
        self.update_subjects()

    def clear_stored_data(self) -> None:
        for name in COLLECTION_MODELS:
            self.storage.remove_item(self.storage_key(name))
            self.collections[name].clear()
        logger.info("Cleared all stored data")
        self.update_subjects()

    def get_data_counts(self) -> Dict[str, int]:
        return {name: len(items) for name, items in self.collections.items()}

    def find(self, collection: str, item_id: str) -> Optional[BaseModel]:
        self._check_collection(collection)
        for item in self.collections[collection]:
            if item.id == item_id:
                return item
        return None

    def subscribe(
        self, collection: str, callback: Callable[[List[BaseModel]], None]
    ) -> Callable[[], None]:
        self._check_collection(collection)
        return self.subjects[collection].subscribe(callback)


_store: Optional[DataStore] = None


def get_store() -> DataStore:
    """Return the process-wide store, loading it from storage on first use."""
    global _store
    if _store is None:
        store = DataStore(build_storage())
        store.load_from_storage()
        logger.info("Data store ready: %s", store.get_data_counts())
        _store = store
    return _store


def reset_store() -> None:
    global _store
    _store = None
