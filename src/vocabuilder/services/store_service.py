"""Key-value store kept in the database."""
import json
import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vocabuilder.errors import StorageError
from vocabuilder.models.models import StoreItem
from vocabuilder.monitoring import error_count, store_operations

logger = logging.getLogger(__name__)


class PersistentStore:
    """Synchronous get/set/remove of string values under fixed keys.

    Every write is committed on its own; there is no transaction spanning
    several keys, so two processes writing the same key race and the last
    write wins.
    """

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db

    def _fail(self, operation: str, key: str, error: Exception) -> StorageError:
        self.db.rollback()
        error_count.labels(error_type="storage").inc()
        logger.error(f"Store {operation} failed for key {key}: {error}")
        return StorageError(f"Could not {operation} '{key}' in storage")

    def get(self, key: str) -> Optional[str]:
        """Get the raw value of a key, or None if it is not set."""
        store_operations.labels(operation_type="get").inc()
        try:
            item = self.db.query(StoreItem).filter(StoreItem.key == key).first()
        except SQLAlchemyError as e:
            raise self._fail("read", key, e) from e
        return item.value if item else None

    def set(self, key: str, value: str) -> None:
        """Set the raw value of a key."""
        store_operations.labels(operation_type="set").inc()
        try:
            item = self.db.query(StoreItem).filter(StoreItem.key == key).first()
            if item is None:
                item = StoreItem(key=key, value=value)
                self.db.add(item)
            else:
                item.value = value
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("write", key, e) from e

    def remove(self, key: str) -> None:
        """Remove a key. Removing a missing key does nothing."""
        store_operations.labels(operation_type="remove").inc()
        try:
            self.db.query(StoreItem).filter(StoreItem.key == key).delete()
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("remove", key, e) from e

    def get_json(self, key: str, default: Any = None) -> Any:
        """Get a JSON value. Missing, unreadable or corrupt values read as default."""
        try:
            raw = self.get(key)
        except StorageError:
            return default
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.warning(f"Ignoring corrupt value under key {key}: {e}")
            return default

    def set_json(self, key: str, value: Any) -> None:
        """Set a JSON value."""
        self.set(key, json.dumps(value, ensure_ascii=False))
