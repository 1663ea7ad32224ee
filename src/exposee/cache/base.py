"""Abstract response cache and the no-op implementation.

A :class:`ResponseCache` remembers, per request identity, the last cache
validator (``ETag``) seen together with the batch decoded from that
response. The client uses it only to recognise "nothing changed since last
time"; correctness never depends on a hit.

Concurrency contract:
    One cache instance may be shared by concurrent ``fetch`` calls. Every
    implementation must serialise its own reads and writes, either with one
    lock per instance or with a backend that is itself thread-safe. Callers
    never lock around the cache. The client calls ``lookup`` and ``store``
    through :func:`asyncio.to_thread`, so implementations may block on I/O.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from exposee.models import ExposedBatch, ExposedRecord, RequestIdentity


@dataclass(frozen=True)
class CacheEntry:
    """The validator and decoded batch stored for one request identity."""

    validator: Optional[str]
    batch: tuple[ExposedRecord, ...]


class ResponseCache(ABC):
    """Per-identity store of the last seen validator and batch.

    Identities are compared by :attr:`~exposee.models.RequestIdentity.cache_key`,
    i.e. by exact URL string.
    """

    @abstractmethod
    def lookup(self, identity: RequestIdentity) -> Optional[CacheEntry]:
        """Return the entry stored for *identity*, or ``None`` on a miss."""
        ...

    @abstractmethod
    def store(
        self,
        identity: RequestIdentity,
        validator: Optional[str],
        batch: ExposedBatch,
    ) -> None:
        """Create or overwrite the entry for *identity*."""
        ...

    def close(self) -> None:
        """Release backend resources. The default does nothing."""


class NullResponseCache(ResponseCache):
    """A cache that never hits and discards every store.

    With this cache every successful fetch returns freshly decoded data.
    """

    def lookup(self, identity: RequestIdentity) -> Optional[CacheEntry]:
        return None

    def store(
        self,
        identity: RequestIdentity,
        validator: Optional[str],
        batch: ExposedBatch,
    ) -> None:
        return None
