"""In-process TTL read cache.

Holds derived read results (daily topic payload, leaderboard pages) for a
few seconds to spare the database. Entries may vanish at any time without
affecting correctness. The clock is injected so tests can move time
without sleeping.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable
from functools import lru_cache
from typing import Any

from dbai.config import get_settings

DAILY_TOPIC_CACHE_KEY = "topics:daily"
LEADERBOARD_CACHE_KEY = "leaderboard:{period}:{sort}:{limit}"


class TTLCache:
    """Bounded mapping whose entries expire ``ttl`` seconds after being set."""

    def __init__(
        self,
        max_entries: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries <= 0:
            msg = "max_entries must be positive"
            raise ValueError(msg)
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, Any]] = OrderedDict()

    def get(self, key: str) -> Any | None:  # noqa: ANN401
        """Return the cached value, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return value

    def set(self, key: str, value: Any, ttl: float) -> None:  # noqa: ANN401
        """Store a value; the least recently used entry is evicted when full."""
        if ttl <= 0:
            return
        self._entries[key] = (self._clock() + ttl, value)
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def invalidate(self, key: str) -> None:
        """Drop a single key."""
        self._entries.pop(key, None)

    def invalidate_prefix(self, prefix: str) -> None:
        """Drop every key starting with prefix."""
        for key in [k for k in self._entries if k.startswith(prefix)]:
            del self._entries[key]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


@lru_cache
def get_read_cache() -> TTLCache:
    """Process-wide read cache (FastAPI dependency)."""
    return TTLCache(max_entries=get_settings().read_cache_max_entries)
