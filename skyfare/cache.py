"""In-memory TTL cache for fare calendar results.

Entries expire passively: a stale entry is treated as missing on read and is
overwritten by the next put. Nothing is evicted on a timer.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional

from .config import CALENDAR_TTL

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    created_at: float
    value: Any


class TTLCache:
    """Process-local key/value store with a fixed time-to-live."""

    def __init__(self, ttl: float = CALENDAR_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self.clock = clock
        self._store: dict[Hashable, CacheEntry] = {}

    def init(self) -> None:
        """Start from an empty store."""
        self._store = {}

    def get(self, key: Hashable) -> Optional[Any]:
        """Return the cached value, or None if missing or older than the TTL."""
        entry = self._store.get(key)
        if entry is None:
            return None
        if self.clock() - entry.created_at >= self.ttl:
            logger.debug(f"Cache entry expired: {key}")
            return None
        return entry.value

    def put(self, key: Hashable, value: Any) -> None:
        self._store[key] = CacheEntry(created_at=self.clock(), value=value)

    def clear_expired(self) -> int:
        """Drop stale entries. Returns number of removed entries."""
        now = self.clock()
        stale = [k for k, e in self._store.items() if now - e.created_at >= self.ttl]
        for key in stale:
            del self._store[key]
        return len(stale)

    def clear_all(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)


def make_key(origin: str, destination: str, month: str, cabin: str, adults: int) -> tuple:
    return (origin.upper(), destination.upper(), month, cabin, adults)
