"""Thread-safe in-process response cache."""

from __future__ import annotations

import threading
from typing import Optional

from exposee.cache.base import CacheEntry, ResponseCache
from exposee.models import ExposedBatch, RequestIdentity


class InMemoryResponseCache(ResponseCache):
    """Dictionary-backed cache guarded by a single lock.

    Entries live as long as the instance. The lock is held only for the
    dictionary access itself, so lookups for different identities never wait
    on each other's network exchange.

    Example::

        cache = InMemoryResponseCache()
        with ExposeeServiceClient(cache=cache) as client:
            client.fetch(descriptor, batch_timestamp)
    """

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def lookup(self, identity: RequestIdentity) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(identity.cache_key)

    def store(
        self,
        identity: RequestIdentity,
        validator: Optional[str],
        batch: ExposedBatch,
    ) -> None:
        entry = CacheEntry(validator=validator, batch=tuple(batch))
        with self._lock:
            self._entries[identity.cache_key] = entry

    def invalidate(self, identity: RequestIdentity) -> None:
        """Drop the entry for *identity* if present."""
        with self._lock:
            self._entries.pop(identity.cache_key, None)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
