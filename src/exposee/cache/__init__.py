"""Validator caches for the exposee client.

Three interchangeable backends implement :class:`ResponseCache`:

- :class:`InMemoryResponseCache` -- the default, lives with the process.
- :class:`DiskResponseCache` -- persists entries with :mod:`diskcache`.
- :class:`NullResponseCache` -- never hits; every fetch decodes.

:func:`create_cache` picks one from a :class:`~exposee.models.CacheConfig`.
"""

from __future__ import annotations

from pathlib import Path

from exposee.cache.base import CacheEntry, NullResponseCache, ResponseCache
from exposee.cache.disk import DiskResponseCache
from exposee.cache.memory import InMemoryResponseCache
from exposee.models import CacheConfig


def create_cache(config: CacheConfig, cache_dir: str | Path) -> ResponseCache:
    """Instantiate the backend selected by ``config.backend``."""
    if config.backend == "disk":
        return DiskResponseCache(cache_dir, ttl_seconds=config.ttl_seconds)
    if config.backend == "none":
        return NullResponseCache()
    return InMemoryResponseCache()


__all__ = [
    "CacheEntry",
    "DiskResponseCache",
    "InMemoryResponseCache",
    "NullResponseCache",
    "ResponseCache",
    "create_cache",
]
