"""Key-value stores holding JSON documents under string keys."""

import json
import logging
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from supersuper.models.kv_entry import KeyValueEntry

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base class for key-value storage failures."""


class StorageReadError(StorageError):
    """Persisted data is malformed or could not be read."""


class StorageWriteError(StorageError):
    """Data could not be persisted (serialization or backend failure)."""


class KeyValueStore(Protocol):
    """Synchronous JSON key-value storage."""

    def get(self, key: str) -> Any | None: ...

    def get_for_update(self, key: str) -> Any | None:
        """Read a value and hold it against other writers until set() or release()."""
        ...

    def release(self, key: str) -> None:
        """End a get_for_update() hold without writing."""
        ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store. Values round-trip through JSON like a persistent store would."""

    def __init__(self, initial: dict[str, str] | None = None):
        # key -> JSON text
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageReadError(f"Invalid JSON stored under '{key}': {e}") from e

    def set(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageWriteError(f"Cannot serialize value for '{key}': {e}") from e

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def get_for_update(self, key: str) -> Any | None:
        # Callers serialize through their own process lock
        return self.get(key)

    def release(self, key: str) -> None:
        pass

    def raw(self, key: str) -> str | None:
        """Stored JSON text for a key."""
        return self._data.get(key)


class SqlKeyValueStore:
    """Store backed by the kv_entries table, one row per key."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Any | None:
        try:
            entry = self.db.get(KeyValueEntry, key)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageReadError(f"Error reading '{key}': {e}") from e

        return self._decode(key, entry)

    def get_for_update(self, key: str) -> Any | None:
        """Read a value with its row locked until the session commits or rolls back.

        SQLite ignores FOR UPDATE and relies on its database-level write lock.
        """
        stmt = (
            select(KeyValueEntry)
            .where(KeyValueEntry.key == key)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        try:
            entry = self.db.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageReadError(f"Error reading '{key}' for update: {e}") from e

        return self._decode(key, entry)

    def release(self, key: str) -> None:
        if self.db.in_transaction():
            self.db.rollback()

    def _decode(self, key: str, entry: KeyValueEntry | None) -> Any | None:
        if entry is None:
            return None

        try:
            return json.loads(entry.value)
        except json.JSONDecodeError as e:
            raise StorageReadError(f"Invalid JSON stored under '{key}': {e}") from e

    def set(self, key: str, value: Any) -> None:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageWriteError(f"Cannot serialize value for '{key}': {e}") from e

        try:
            entry = self.db.get(KeyValueEntry, key)
            if entry is None:
                self.db.add(KeyValueEntry(key=key, value=payload))
            else:
                entry.value = payload
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageWriteError(f"Error saving '{key}': {e}") from e

    def delete(self, key: str) -> None:
        try:
            self.db.query(KeyValueEntry).filter(KeyValueEntry.key == key).delete()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageWriteError(f"Error deleting '{key}': {e}") from e

        logger.info(f"Deleted stored value '{key}'")
