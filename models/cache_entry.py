"""Offline cache entry data models."""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class CacheEntry:
    """A single cached payload inside the shared cache blob.

    ``timestamp`` is the write time in epoch milliseconds and ``ttl`` the
    time-to-live in milliseconds.
    """
    data: Any = None
    timestamp: int = 0
    ttl: Optional[int] = None

    def age(self, now_ms: int) -> int:
        return now_ms - self.timestamp

    def effective_ttl(self, default_ttl: int) -> int:
        return self.ttl if self.ttl is not None else default_ttl

    def is_expired(self, now_ms: int, default_ttl: int) -> bool:
        return self.age(now_ms) > self.effective_ttl(default_ttl)

    def to_dict(self) -> dict:
        return {"data": self.data, "timestamp": self.timestamp, "ttl": self.ttl}

    @classmethod
    def from_dict(cls, raw: Any) -> Optional["CacheEntry"]:
        """Build an entry from its persisted form, or None if it is malformed."""
        if not isinstance(raw, dict) or "timestamp" not in raw:
            return None
        try:
            timestamp = int(raw["timestamp"])
            ttl = raw.get("ttl")
            ttl = int(ttl) if ttl is not None else None
        except (TypeError, ValueError, OverflowError):
            return None
        return cls(data=raw.get("data"), timestamp=timestamp, ttl=ttl)


@dataclass
class CacheInfo:
    """Read-only diagnostic view of a cache entry (all values in milliseconds)."""
    age: int
    remaining: int
    is_expired: bool
    timestamp: int
