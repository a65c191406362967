"""In-process read cache for trip and trip-list reads.

Entries never expire on their own. Writes remove the affected entries
immediately so no read after an edit can observe the stale itinerary.

One cache is shared by every request, and FastAPI runs the sync trip routes
in its threadpool, so all access to the entries goes through a lock.
"""

import threading
from collections.abc import Hashable
from typing import Any

CacheKey = tuple[Hashable, ...]


# Metrics interface (to be implemented by actual metrics system)
class CacheMetrics:
    """Interface for read cache metrics."""

    def inc_hit(self, kind: str) -> None:
        """Increment cache hit counter."""
        pass

    def inc_invalidation(self, kind: str, count: int = 1) -> None:
        """Increment invalidation counter."""
        pass


class ReadCache:
    """Keyed cache of read results.

    Keys are tuples whose first element names the kind of read ("trip",
    "trips", "upcoming"), so all list reads for an owner can be dropped by
    prefix.
    """

    def __init__(self, metrics: CacheMetrics | None = None) -> None:
        self._entries: dict[CacheKey, Any] = {}
        self._lock = threading.Lock()
        self._metrics = metrics or CacheMetrics()

    def get(self, key: CacheKey) -> Any | None:
        """Get cached value, None on miss."""
        with self._lock:
            value = self._entries.get(key)
        if value is not None:
            self._metrics.inc_hit(str(key[0]))
        return value

    def set(self, key: CacheKey, value: Any) -> None:
        """Store value under key."""
        with self._lock:
            self._entries[key] = value

    def invalidate(self, key: CacheKey) -> None:
        """Drop a single entry."""
        with self._lock:
            removed = self._entries.pop(key, None)
        if removed is not None:
            self._metrics.inc_invalidation(str(key[0]))

    def invalidate_prefix(self, prefix: CacheKey) -> int:
        """Drop every entry whose key starts with prefix.

        Returns:
            Number of entries removed
        """
        with self._lock:
            stale = [key for key in list(self._entries) if key[: len(prefix)] == prefix]
            for key in stale:
                del self._entries[key]

        if stale:
            self._metrics.inc_invalidation(str(prefix[0]), len(stale))
        return len(stale)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
