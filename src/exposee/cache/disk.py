"""Disk-based validator cache.

Uses :mod:`diskcache` to persist the last validator and decoded batch per
request identity across process restarts. :class:`diskcache.Cache` is
thread- and process-safe, so no additional locking is done here.

Records are stored as plain ``(key, keyDate)`` pairs rather than pickled
model instances so that cache directories survive model changes.

Cache keys are SHA-256 hashes of ``METHOD|URL``.

See Also:
    :class:`~exposee.models.CacheConfig` -- the Pydantic model that
    selects the backend and controls ``ttl_seconds``.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any, Optional

import diskcache

from exposee.cache.base import CacheEntry, ResponseCache
from exposee.models import ExposedBatch, ExposedRecord, RequestIdentity


class DiskResponseCache(ResponseCache):
    """Disk-backed cache of validators and decoded batches.

    Args:
        cache_dir: Root directory for the cache. A ``validators/``
            subdirectory is created inside it.
        ttl_seconds: Optional expiry for entries. ``None`` keeps entries
            until they are overwritten or cleared.
    """

    def __init__(self, cache_dir: str | Path, ttl_seconds: Optional[int] = None) -> None:
        self._directory = Path(cache_dir) / "validators"
        self._ttl_seconds = ttl_seconds
        self._cache = diskcache.Cache(str(self._directory))

    def lookup(self, identity: RequestIdentity) -> Optional[CacheEntry]:
        raw = self._cache.get(self._make_key(identity))
        if raw is None:
            return None
        batch = tuple(
            ExposedRecord.from_key_date(key, key_date) for key, key_date in raw["records"]
        )
        return CacheEntry(validator=raw["validator"], batch=batch)

    def store(
        self,
        identity: RequestIdentity,
        validator: Optional[str],
        batch: ExposedBatch,
    ) -> None:
        raw = {
            "validator": validator,
            "records": [(record.key, record.key_date) for record in batch],
        }
        self._cache.set(self._make_key(identity), raw, expire=self._ttl_seconds)

    def invalidate(self, identity: RequestIdentity) -> None:
        """Remove the entry stored for *identity*."""
        self._cache.delete(self._make_key(identity))

    def clear(self) -> None:
        """Remove all entries from the cache."""
        self._cache.clear()

    def stats(self) -> dict[str, Any]:
        """Return the entry count, directory and TTL of the cache."""
        return {
            "size": len(self._cache),
            "directory": str(self._directory),
            "ttl_seconds": self._ttl_seconds,
        }

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache` and release resources."""
        self._cache.close()

    def _make_key(self, identity: RequestIdentity) -> str:
        raw = f"{identity.method.upper()}|{identity.cache_key}"
        return hashlib.sha256(raw.encode()).hexdigest()
