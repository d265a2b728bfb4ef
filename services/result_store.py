"""
PlantCare AI - Result Store
Capped, newest-first collections of scan history and community posts,
kept as JSON arrays under fixed keys in a key-value backend.

The store is best-effort: a failed read yields an empty collection and a
failed write is logged and dropped. No operation raises to the caller.
"""

import json
import logging
from typing import Dict, Generic, List, Optional, Protocol, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from models import CommunityPost, ScanRecord, StorageEntry, db

logger = logging.getLogger(__name__)

SCAN_HISTORY_KEY = "plantCareAiScanHistory"
COMMUNITY_POSTS_KEY = "plantCareAiGreenGramPosts"
MAX_HISTORY_ITEMS = 12
MAX_POST_ITEMS = 20


class StorageError(Exception):
    """Raised by a backend when it cannot read or write a key."""


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryKeyValueStorage:
    """In-process backend. `quota_bytes` mimics a browser storage quota."""

    def __init__(self, quota_bytes: Optional[int] = None):
        self._data: Dict[str, str] = {}
        self.quota_bytes = quota_bytes

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self._data.items() if k != key)
            if used + len(value.encode("utf-8")) > self.quota_bytes:
                raise StorageError(f"Quota exceeded writing {key}")
        self._data[key] = value


class SqlKeyValueStorage:
    """Durable backend over the `storage_entries` table. Needs an app context."""

    def get(self, key: str) -> Optional[str]:
        try:
            entry = db.session.get(StorageEntry, key)
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(f"Could not read {key}: {e}") from e
        return entry.value if entry else None

    def set(self, key: str, value: str) -> None:
        try:
            entry = db.session.get(StorageEntry, key)
            if entry:
                entry.value = value
            else:
                db.session.add(StorageEntry(key=key, value=value))
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(f"Could not write {key}: {e}") from e


R = TypeVar("R")


class CappedCollection(Generic[R]):
    """
    Newest-first list of records under one storage key.

    add() prepends and truncates to `max_items`, so the oldest entries fall
    off the end. That is the only eviction rule.
    """

    def __init__(self, storage: KeyValueStorage, key: str, max_items: int,
                 record_type: Type[R]):
        self.storage = storage
        self.key = key
        self.max_items = max_items
        self.record_type = record_type

    def _read(self) -> List[R]:
        try:
            raw = self.storage.get(self.key)
            data = json.loads(raw) if raw else []
        except (StorageError, ValueError) as e:
            logger.error(f"Error reading {self.key} from storage: {e}")
            return []

        if not isinstance(data, list):
            logger.error(f"Error reading {self.key} from storage: expected a list")
            return []

        records = []
        for item in data:
            try:
                records.append(self.record_type.from_dict(item))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"⚠️  Skipping malformed entry in {self.key}: {e}")
        return records

    def _write(self, records: List[R]) -> bool:
        try:
            self.storage.set(self.key, json.dumps([r.to_dict() for r in records]))
        except (StorageError, TypeError, ValueError) as e:
            logger.error(f"Error writing {self.key} to storage: {e}")
            return False
        return True

    def get_all(self) -> List[R]:
        return self._read()

    def add(self, record: R) -> None:
        self._write([record, *self._read()][: self.max_items])

    def delete(self, record_id: str) -> None:
        records = self._read()
        remaining = [r for r in records if r.id != record_id]
        if len(remaining) != len(records):
            self._write(remaining)

    def clear(self) -> None:
        self._write([])


def scan_history(storage: KeyValueStorage) -> CappedCollection[ScanRecord]:
    return CappedCollection(storage, SCAN_HISTORY_KEY, MAX_HISTORY_ITEMS, ScanRecord)


def community_posts(storage: KeyValueStorage) -> CappedCollection[CommunityPost]:
    return CappedCollection(storage, COMMUNITY_POSTS_KEY, MAX_POST_ITEMS, CommunityPost)
