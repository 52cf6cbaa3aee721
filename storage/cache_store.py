"""Shared offline cache blob stored under one well-known name."""

import json
import logging
import threading
from typing import Any

from config.exceptions import StorageError
from storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

CACHE_STORE_NAME = "offline_cache"

# Guards every read-modify-write of any blob in the process
_BLOB_LOCK = threading.RLock()


class CacheStore:
    """Read/write access to the single JSON blob mapping cache key -> entry.

    All failures (backend errors, corrupt JSON, unserializable data) are
    logged and absorbed: reads degrade to an empty blob, writes are skipped.
    """

    def __init__(self, backend: KeyValueStore, name: str = CACHE_STORE_NAME):
        self.backend = backend
        self.name = name

    @property
    def lock(self) -> threading.RLock:
        """Lock to hold across a load/mutate/save cycle."""
        return _BLOB_LOCK

    def load(self) -> dict[str, Any]:
        try:
            raw = self.backend.get(self.name)
        except StorageError as e:
            logger.warning("Failed to read offline cache: %s", e)
            return {}
        if not raw:
            return {}
        if not isinstance(raw, str):
            logger.warning("Offline cache slot holds %s, treating as empty", type(raw).__name__)
            return {}
        try:
            blob = json.loads(raw)
        except ValueError as e:
            logger.warning("Offline cache blob is corrupt, treating as empty: %s", e)
            return {}
        if not isinstance(blob, dict):
            logger.warning("Offline cache blob is not an object, treating as empty")
            return {}
        return blob

    def save(self, blob: dict[str, Any]) -> bool:
        """Serialize and persist the whole blob. Returns False if the write was skipped."""
        try:
            serialized = json.dumps(blob, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.warning("Failed to serialize offline cache: %s", e)
            return False
        try:
            self.backend.set(self.name, serialized)
        except StorageError as e:
            logger.warning("Failed to persist offline cache: %s", e)
            return False
        return True

    def clear(self) -> bool:
        """Delete the entire blob (every namespace)."""
        try:
            self.backend.remove(self.name)
        except StorageError as e:
            logger.warning("Failed to clear offline cache: %s", e)
            return False
        return True
