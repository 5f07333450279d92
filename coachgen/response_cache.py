"""
Session-scoped memo of prompt -> generated text.

Keys are the prompt text verbatim. At most one entry exists per key; a put
with an existing key replaces it. Size and age bounds are enforced: puts
evict the least recently used entries beyond max_entries, and entries older
than max_age are treated as misses.
"""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: str
    created_at: float


class ResponseCache:
    """Thread-safe LRU cache with a time-to-live"""

    def __init__(self,
                 max_entries: int = 100,
                 max_age: float = 24 * 60 * 60,
                 clock: Callable[[], float] = time.time):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        if max_age <= 0:
            raise ValueError("max_age must be positive")

        self.max_entries = max_entries
        self.max_age = max_age
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

        self.stats = {
            'hits': 0,
            'misses': 0,
            'evictions': 0,
            'expirations': 0,
        }

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at > self.max_age

    def get(self, key: str) -> Optional[str]:
        """Return the cached value for key, or None on a miss or expiry"""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.stats['misses'] += 1
                return None

            if self._is_expired(entry, self._clock()):
                del self._entries[key]
                self.stats['expirations'] += 1
                self.stats['misses'] += 1
                logger.debug("Cache entry expired")
                return None

            self._entries.move_to_end(key)
            self.stats['hits'] += 1
            return entry.value

    def put(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous entry"""
        entry = CacheEntry(key=key, value=value, created_at=self._clock())
        with self._lock:
            self._entries[key] = entry
            self._entries.move_to_end(key)

            while len(self._entries) > self.max_entries:
                evicted_key, _ = self._entries.popitem(last=False)
                self.stats['evictions'] += 1
                logger.debug(f"Evicted cache entry ({len(evicted_key)} chars key)")

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def purge_expired(self) -> int:
        """Drop all expired entries, returning how many were removed"""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if self._is_expired(entry, now)]
            for key in expired:
                del self._entries[key]
            self.stats['expirations'] += len(expired)
        if expired:
            logger.info(f"Purged {len(expired)} expired cache entries")
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                **self.stats,
                'size': len(self._entries),
                'max_entries': self.max_entries,
                'max_age': self.max_age,
            }
