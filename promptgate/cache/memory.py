"""In-memory cache backend."""

import time
from collections import OrderedDict
from typing import Any, Optional

from promptgate.cache.base import CacheBackend, CacheEntry


class InMemoryCache(CacheBackend):
    """Process-local cache with TTL expiry, LRU eviction and a tag index.

    Expired entries are dropped lazily on lookup and swept in bulk at most
    once per ``sweep_interval`` seconds. The tag index only ever references
    live entries: eviction, expiry and deletion all prune it.
    """

    supports_tags = True

    def __init__(self, max_size: Optional[int] = None, sweep_interval: float = 60) -> None:
        self.max_size = max_size
        self.sweep_interval = sweep_interval
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._tags: dict[str, set[str]] = {}
        self._next_sweep = time.monotonic() + sweep_interval

    def __len__(self) -> int:
        return len(self._entries)

    def tagged(self, tag: str) -> int:
        """Number of live entries carrying ``tag``."""
        return len(self._tags.get(tag, ()))

    def _drop(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.pop(key, None)
        if entry is None:
            return None
        for tag in entry.tags:
            members = self._tags.get(tag)
            if members is None:
                continue
            members.discard(key)
            if not members:
                del self._tags[tag]
        return entry

    def _sweep(self) -> None:
        now = time.monotonic()
        if now < self._next_sweep:
            return
        self._next_sweep = now + self.sweep_interval
        for key in [k for k, entry in self._entries.items() if entry.is_expired()]:
            self._drop(key)

    async def get(self, key: str) -> Optional[CacheEntry]:
        self._sweep()
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired():
            self._drop(key)
            return None
        self._entries.move_to_end(key)
        return entry

    async def set(self, entry: CacheEntry) -> None:
        self._sweep()
        self._drop(entry.fingerprint)
        if self.max_size is not None:
            # oldest use first
            while self._entries and len(self._entries) >= self.max_size:
                self._drop(next(iter(self._entries)))
        self._entries[entry.fingerprint] = entry
        for tag in entry.tags:
            self._tags.setdefault(tag, set()).add(entry.fingerprint)

    async def delete(self, key: str) -> bool:
        return self._drop(key) is not None

    async def delete_by_tag(self, tag: str) -> int:
        removed = 0
        for key in list(self._tags.get(tag, ())):
            if self._drop(key) is not None:
                removed += 1
        return removed

    async def clear(self) -> None:
        self._entries.clear()
        self._tags.clear()

    async def get_stats(self) -> dict[str, Any]:
        return {
            "backend": "memory",
            "size": len(self._entries),
            "active_entries": sum(not entry.is_expired() for entry in self._entries.values()),
            "max_size": self.max_size,
            "tags": len(self._tags),
        }
