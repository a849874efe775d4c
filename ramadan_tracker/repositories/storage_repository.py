"""
Storage repository - durable key/value storage for the local record store.
Backends raise StorageUnavailableException; the JSON helpers swallow it.
"""
import json
import logging
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ramadan_tracker.exceptions import MalformedStorageException, StorageUnavailableException
from ramadan_tracker.models import StorageEntry

logger = logging.getLogger("ramadan_tracker.storage")


class StorageEntryRepository:
    """Repository for StorageEntry data access"""

    @staticmethod
    def get_by_key(db: Session, key: str) -> Optional[StorageEntry]:
        """Get storage entry for key"""
        return db.query(StorageEntry).filter(StorageEntry.key == key).first()

    @staticmethod
    def upsert(db: Session, key: str, value: str) -> StorageEntry:
        """Create or replace the value stored under key"""
        entry = StorageEntryRepository.get_by_key(db, key)
        if entry is None:
            entry = StorageEntry(key=key, value=value)
            db.add(entry)
        else:
            entry.value = value
        db.commit()
        db.refresh(entry)
        return entry


class SqlStorageBackend:
    """Key/value storage backed by the storage_entries table"""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory
        self.repo = StorageEntryRepository()

    def get_item(self, key: str) -> Optional[str]:
        db = self.session_factory()
        try:
            entry = self.repo.get_by_key(db, key)
            return entry.value if entry else None
        except SQLAlchemyError as e:
            raise StorageUnavailableException("read", str(e))
        finally:
            db.close()

    def set_item(self, key: str, value: str) -> None:
        db = self.session_factory()
        try:
            self.repo.upsert(db, key, value)
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageUnavailableException("write", str(e))
        finally:
            db.close()


class MemoryStorageBackend:
    """Process-local key/value storage"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value


def read_json_storage(
    backend,
    key: str,
    fallback: Any,
    validate: Optional[Callable[[Any], bool]] = None
) -> Any:
    """
    Read JSON from storage, returning fallback on missing or malformed payloads.

    Args:
        backend: Storage backend with get_item/set_item
        key: Storage key
        fallback: Value returned when nothing usable is stored
        validate: Optional shape check for the decoded value

    Returns:
        Decoded value or fallback
    """
    try:
        raw = backend.get_item(key)
        if raw is None:
            return fallback
        try:
            parsed = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            raise MalformedStorageException(key, str(e))
        if validate is not None and not validate(parsed):
            raise MalformedStorageException(key, "unexpected shape")
        return parsed
    except (StorageUnavailableException, MalformedStorageException) as e:
        logger.warning(f"Invalid storage payload for {key}: {e}")
        return fallback


def write_json_storage(backend, key: str, value: Any) -> bool:
    """
    Write a value as JSON. Failures are logged and reported as False.
    """
    try:
        backend.set_item(key, json.dumps(value, ensure_ascii=False))
        return True
    except (StorageUnavailableException, TypeError, ValueError) as e:
        logger.warning(f"Failed to write storage payload for {key}: {e}")
        return False
