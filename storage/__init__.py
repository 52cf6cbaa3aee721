"""Persistent key-value backends and the shared cache blob."""

from config.settings import Settings
from models.enums import CacheBackend
from storage.cache_store import CacheStore, CACHE_STORE_NAME
from storage.kv_store import KeyValueStore, MemoryKeyValueStore, JsonFileKeyValueStore
from storage.sqlite_store import SqliteKeyValueStore


def create_store(settings: Settings) -> KeyValueStore:
    """Build the key-value backend selected by ``settings.cache_backend``."""
    backend = CacheBackend(settings.cache_backend)
    if backend == CacheBackend.SQLITE:
        return SqliteKeyValueStore(settings.cache_store_path)
    if backend == CacheBackend.JSON:
        return JsonFileKeyValueStore(settings.cache_store_path.with_suffix(".json"))
    return MemoryKeyValueStore()


__all__ = [
    "create_store",
    "CacheStore",
    "CACHE_STORE_NAME",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "SqliteKeyValueStore",
]
