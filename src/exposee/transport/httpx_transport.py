"""Production transport backed by :class:`httpx.AsyncClient`."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from exposee.exceptions import NetworkTransportError
from exposee.models import RequestConfig, RequestIdentity
from exposee.transport.base import Transport, TransportResponse

logger = logging.getLogger(__name__)


class HttpxTransport(Transport):
    """Asynchronous transport on :mod:`httpx`.

    The underlying :class:`httpx.AsyncClient` is created lazily on first use
    so that it binds to the event loop that actually runs the exchange.

    Args:
        config: Timeout and TLS verification settings.
        transport: Optional :class:`httpx.AsyncBaseTransport` to route
            requests through, e.g. :class:`httpx.MockTransport` in tests.
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._config.timeout,
                verify=self._config.verify_ssl,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def execute(self, identity: RequestIdentity) -> TransportResponse:
        client = self._get_client()
        logger.debug("%s %s", identity.method, identity.url)
        try:
            response = await client.request(
                identity.method,
                identity.url,
                headers=identity.header_dict(),
                content=identity.content or None,
            )
        except httpx.RequestError as exc:
            raise NetworkTransportError(
                f"{identity.method} {identity.url} failed: {exc}"
            ) from exc
        logger.debug("%s %s -> %d", identity.method, identity.url, response.status_code)
        return TransportResponse(
            status_code=response.status_code,
            headers=response.headers,
            body=response.content,
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
