"""Persistent key-value store protocol and simple backends."""

import json
import logging
import threading
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from config.exceptions import StorageError

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """String-valued persistent store, the localStorage of the client.

    Implementations raise StorageError when the backend is unavailable.
    """

    def get(self, name: str) -> Optional[str]:
        """Return the stored string, or None if the name is absent."""
        ...

    def set(self, name: str, value: str) -> None:
        """Store a string under a name, replacing any previous value."""
        ...

    def remove(self, name: str) -> None:
        """Delete a name. Removing an absent name is a no-op."""
        ...

    def keys(self) -> list[str]:
        """Return all stored names."""
        ...


class MemoryKeyValueStore:
    """In-process store for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, name: str) -> Optional[str]:
        return self._data.get(name)

    def set(self, name: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Value for '{name}' must be a string")
        self._data[name] = value

    def remove(self, name: str) -> None:
        self._data.pop(name, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileKeyValueStore:
    """Store backed by a single JSON file mapping name -> string.

    Every operation re-reads the file so several processes pointing at the
    same path observe each other's writes.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read store file: {e}", {"path": str(self.path)}) from e
        if not isinstance(raw, dict):
            raise StorageError("Store file does not contain a JSON object", {"path": str(self.path)})
        return raw

    def _write(self, data: dict[str, str]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            raise StorageError(f"Failed to write store file: {e}", {"path": str(self.path)}) from e

    def get(self, name: str) -> Optional[str]:
        with self._lock:
            return self._read().get(name)

    def set(self, name: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[name] = value
            self._write(data)

    def remove(self, name: str) -> None:
        with self._lock:
            data = self._read()
            if name in data:
                del data[name]
                self._write(data)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._read())
