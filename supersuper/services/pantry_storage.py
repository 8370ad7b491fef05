"""Pantry store: item table, name/word indexes and search over a key-value store.

Persisted schema (one JSON document under the storage key):

    {
      "schema_version": 2,
      "items":      {"<product_id>": {product_id, display_name, normalized_name, quantity, ...}},
      "name_index": {"<normalized name>": ["<product_id>", ...]},
      "word_index": {"<token>": ["<product_id>", ...]}
    }

- items: keyed by product id (usually a barcode) for O(1) lookup
- name_index: exact case-insensitive name lookup; several products may share a name
- word_index: token -> products, scanned by the fuzzy search

Every public method loads the document, works on it and writes it back at most
once. Storage failures are logged and never raised to the caller.
"""

import logging
import threading
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ValidationError

from supersuper.schemas.pantry import PantryAggregate, PantryItem, PantryItemUpdate, TripItem
from supersuper.services.kv_store import KeyValueStore, StorageReadError, StorageWriteError
from supersuper.services.pantry_migrations import migrate_aggregate
from supersuper.services.search_ranker import DEFAULT_SIMILARITY_THRESHOLD, rank_products
from supersuper.services.text_index import (
    index_item,
    normalize_name,
    rename_item,
    tokenize,
    unindex_item,
)

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "supersuper_pantry"

_locks: dict[str, threading.RLock] = {}
_locks_guard = threading.Lock()


def _lock_for(storage_key: str) -> threading.RLock:
    """One lock per storage key, shared by every store instance in the process."""
    with _locks_guard:
        lock = _locks.get(storage_key)
        if lock is None:
            lock = _locks[storage_key] = threading.RLock()
        return lock


class PantryStore:
    """CRUD and search over the pantry aggregate persisted in a key-value store."""

    def __init__(
        self,
        kv_store: KeyValueStore,
        storage_key: str = DEFAULT_STORAGE_KEY,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        on_items_changed: Callable[[list[str]], None] | None = None,
    ):
        self.kv_store = kv_store
        self.storage_key = storage_key
        self.similarity_threshold = similarity_threshold
        self.on_items_changed = on_items_changed
        self.last_write_ok = True
        self.last_error: str | None = None
        self._lock = _lock_for(storage_key)

    # --- Persistence ---

    def _load(self, for_update: bool = False) -> PantryAggregate:
        read = self.kv_store.get_for_update if for_update else self.kv_store.get
        try:
            raw = read(self.storage_key)
        except StorageReadError as e:
            logger.error(f"Error reading pantry '{self.storage_key}': {e}")
            return PantryAggregate()

        if raw is None:
            return PantryAggregate()

        try:
            return migrate_aggregate(raw)
        except ValueError as e:
            logger.error(f"Discarding unreadable pantry '{self.storage_key}': {e}")
            return PantryAggregate()

    @contextmanager
    def _locked_aggregate(self) -> Iterator[PantryAggregate]:
        """Load the aggregate for a read-modify-write cycle.

        Holds the per-key process lock and the storage lock from
        get_for_update until the cycle ends. A successful save commits early.
        """
        with self._lock:
            try:
                yield self._load(for_update=True)
            finally:
                self.kv_store.release(self.storage_key)

    def _save(self, aggregate: PantryAggregate) -> bool:
        try:
            self.kv_store.set(self.storage_key, aggregate.model_dump(mode="json"))
        except StorageWriteError as e:
            logger.error(f"Error saving pantry '{self.storage_key}': {e}")
            self.last_write_ok = False
            self.last_error = str(e)
            return False

        self.last_write_ok = True
        self.last_error = None
        return True

    def _notify(self, product_ids: list[str]) -> None:
        if not product_ids or self.on_items_changed is None:
            return
        try:
            self.on_items_changed(product_ids)
        except Exception as e:
            logger.error(f"Pantry change hook failed for {product_ids}: {e}")

    def _remove(self, aggregate: PantryAggregate, product_id: str) -> None:
        unindex_item(aggregate, aggregate.items[product_id])
        del aggregate.items[product_id]

    # --- Reads ---

    def get_all_items(self) -> list[PantryItem]:
        """All pantry items, in no guaranteed order."""
        with self._lock:
            return list(self._load().items.values())

    def get_item_by_id(self, product_id: str) -> PantryItem | None:
        with self._lock:
            return self._load().items.get(product_id)

    def get_items_by_name(self, display_name: str) -> list[PantryItem]:
        """Items whose name equals display_name, ignoring case."""
        with self._lock:
            aggregate = self._load()
        product_ids = aggregate.name_index.get(normalize_name(display_name), [])
        return [aggregate.items[pid] for pid in product_ids if pid in aggregate.items]

    def search(self, query: str) -> list[PantryItem]:
        """Find items by partial or misspelled name.

        Every query word must match some word of the item name, either as a
        substring or within the similarity threshold. Items are ranked by their
        combined score, best first. An empty query returns every item.
        """
        with self._lock:
            aggregate = self._load()

        if not query or not query.strip():
            return list(aggregate.items.values())

        search_words = tokenize(query)
        if not search_words:
            return list(aggregate.items.values())

        ranked = rank_products(search_words, aggregate.word_index, self.similarity_threshold)
        return [aggregate.items[pid] for pid, _score in ranked if pid in aggregate.items]

    # --- Mutations ---

    def add_items_from_trip(
        self, trip_items: Iterable[TripItem | Mapping[str, Any]]
    ) -> list[PantryItem]:
        """Add a completed trip's items, raising quantities of products already held.

        A batch that is not a sequence of items is logged and ignored.
        """
        if isinstance(trip_items, (str, bytes, Mapping, BaseModel)) or not isinstance(
            trip_items, Iterable
        ):
            logger.warning(
                f"Rejected trip: expected a list of items, got {type(trip_items).__name__}"
            )
            return self.get_all_items()

        with self._locked_aggregate() as aggregate:
            purchased_at = datetime.now(UTC)
            changed: list[str] = []

            for raw in trip_items:
                try:
                    trip_item = raw if isinstance(raw, TripItem) else TripItem.model_validate(raw)
                except ValidationError as e:
                    logger.warning(f"Skipping invalid trip item {raw!r}: {e}")
                    continue

                product_id = trip_item.product_id
                if not product_id:
                    logger.warning(f"Skipping trip item without product id: {raw!r}")
                    continue

                display_name = trip_item.display_name or product_id
                quantity = trip_item.quantity or 1
                image = trip_item.image or trip_item.thumbnail

                item = aggregate.items.get(product_id)
                if item is not None:
                    item.quantity += quantity
                    item.last_bought_on = purchased_at
                    if image and not item.image:
                        item.image = image
                    if rename_item(aggregate, item, display_name):
                        changed.append(product_id)
                else:
                    item = PantryItem(
                        product_id=product_id,
                        display_name=display_name,
                        normalized_name=normalize_name(display_name),
                        quantity=quantity,
                        image=image,
                        last_bought_on=purchased_at,
                    )
                    aggregate.items[product_id] = item
                    index_item(aggregate, item)
                    changed.append(product_id)

            self._save(aggregate)

        self._notify(changed)
        return list(aggregate.items.values())

    def update_item(
        self, product_id: str, updates: PantryItemUpdate | Mapping[str, Any]
    ) -> list[PantryItem]:
        """Shallow-merge updates into an item, re-indexing it when renamed.

        A quantity of zero or less removes the item. Malformed updates are
        logged and ignored.
        """
        with self._locked_aggregate() as aggregate:
            if isinstance(updates, PantryItemUpdate):
                validated = updates
            elif isinstance(updates, Mapping):
                try:
                    validated = PantryItemUpdate.model_validate(dict(updates))
                except ValidationError as e:
                    logger.warning(f"Rejected update for pantry item {product_id}: {e}")
                    return list(aggregate.items.values())
            else:
                logger.warning(
                    f"Rejected update for pantry item {product_id}: "
                    f"expected a mapping, got {type(updates).__name__}"
                )
                return list(aggregate.items.values())

            item = aggregate.items.get(product_id)
            if item is None:
                return list(aggregate.items.values())

            fields = validated.model_dump(exclude_unset=True)
            renamed = False

            quantity = fields.pop("quantity", None)
            display_name = fields.pop("display_name", None)

            if quantity is not None and quantity <= 0:
                self._remove(aggregate, product_id)
            else:
                if quantity is not None:
                    item.quantity = quantity
                if display_name is not None:
                    renamed = rename_item(aggregate, item, display_name)
                for field, value in fields.items():
                    setattr(item, field, value)

            self._save(aggregate)

        if renamed:
            self._notify([product_id])
        return list(aggregate.items.values())

    def update_item_quantity(self, product_id: str, new_quantity: int) -> list[PantryItem]:
        """Set an item's quantity; zero or less removes it."""
        with self._locked_aggregate() as aggregate:
            if product_id in aggregate.items:
                if new_quantity <= 0:
                    self._remove(aggregate, product_id)
                else:
                    aggregate.items[product_id].quantity = new_quantity
                self._save(aggregate)

            return list(aggregate.items.values())

    def remove_item(self, product_id: str) -> list[PantryItem]:
        with self._locked_aggregate() as aggregate:
            if product_id in aggregate.items:
                self._remove(aggregate, product_id)
                self._save(aggregate)
            return list(aggregate.items.values())

    def clear_pantry(self) -> bool:
        """Delete the persisted pantry entirely."""
        with self._lock:
            try:
                self.kv_store.delete(self.storage_key)
            except StorageWriteError as e:
                logger.error(f"Error clearing pantry '{self.storage_key}': {e}")
                self.last_write_ok = False
                self.last_error = str(e)
                return False

            self.last_write_ok = True
            self.last_error = None
            return True
