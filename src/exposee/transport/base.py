"""Abstract transport contract.

A :class:`Transport` performs exactly one HTTP exchange per call and never
retries. It is asynchronous so that callers who already run an event loop
can compose it directly; :class:`~exposee.client.ExposeeServiceClient`
adds the blocking facade on top.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Optional

from exposee.models import RequestIdentity


@dataclass(frozen=True)
class TransportResponse:
    """Status, headers and body of one completed exchange.

    ``headers`` should be case-insensitive (e.g. :class:`httpx.Headers`);
    plain dicts are looked up case-insensitively by the accessors below.
    """

    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def etag(self) -> Optional[str]:
        """The cache validator, or ``None`` when absent or empty."""
        return self._header("etag") or None

    @property
    def date(self) -> Optional[str]:
        """The raw ``Date`` header, or ``None`` when absent."""
        return self._header("date")

    def _header(self, name: str) -> Optional[str]:
        value = self.headers.get(name)
        if value is not None:
            return value
        for key, candidate in self.headers.items():
            if key.lower() == name:
                return candidate
        return None


class Transport(ABC):
    """Performs one HTTP exchange for a :class:`~exposee.models.RequestIdentity`.

    Implementations own their timeout policy. A missing response, for any
    reason, must surface as :class:`~exposee.exceptions.NetworkTransportError`.
    """

    @abstractmethod
    async def execute(self, identity: RequestIdentity) -> TransportResponse:
        """Send *identity* and return the response, whatever its status.

        Raises:
            NetworkTransportError: If no response was obtained.
        """
        ...

    async def aclose(self) -> None:
        """Release connections. The default does nothing."""
