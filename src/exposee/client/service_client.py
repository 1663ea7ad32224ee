"""Exposee service client: fetch exposed-key batches and publish reports.

:class:`ExposeeServiceClient` orchestrates one batch fetch as a fixed
sequence:

1. **Build** the request identity from the descriptor and batch timestamp.
2. **Dispatch** it through the :class:`~exposee.transport.Transport`.
3. **Check the status**; anything outside 2xx ends the call.
4. **Guard the clock** against the response's ``Date`` header, if present.
5. **Resolve the cache**: an unchanged ``ETag`` ends the call with
   ``Success(None)`` and no decode.
6. **Decode** the body, store the new validator and batch, return them.

Every step either advances or ends the call with exactly one
:class:`~exposee.exceptions.SyncError`. Nothing is retried here; retry and
multi-batch scheduling belong to the caller.

See Also:
    :mod:`exposee.client.runner` for the blocking bridge used by
    :meth:`ExposeeServiceClient.fetch`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from exposee.cache import InMemoryResponseCache, ResponseCache, create_cache
from exposee.client.outcome import Failure, Success, SyncOutcome
from exposee.client.runner import LoopThread
from exposee.clock import TIME_SHIFT_THRESHOLD, check_clock_skew, parse_http_date, utcnow
from exposee.codec import decode_batch
from exposee.exceptions import InvalidResponseCodeError, SyncError
from exposee.models import (
    ApplicationDescriptor,
    ExposedBatch,
    ExposeeReport,
    GlobalConfig,
)
from exposee.request import BatchTimestamp, build_exposed_request, build_report_request
from exposee.transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)


class ExposeeServiceClient:
    """Client for the exposee backend with a blocking, typed fetch.

    Args:
        transport: Transport used for every exchange. Defaults to an
            :class:`~exposee.transport.HttpxTransport` with default settings.
        cache: Validator cache. Defaults to a fresh
            :class:`~exposee.cache.InMemoryResponseCache`. A cache passed in
            stays owned by the caller and is not closed by :meth:`close`.
        time_shift_threshold: Largest tolerated deviation between the
            backend's ``Date`` header and local time.
        clock: Returns the current aware UTC time. Injected by tests.

    Example::

        with ExposeeServiceClient() as client:
            outcome = client.fetch(descriptor, batch_timestamp)
            if isinstance(outcome, Success) and not outcome.unchanged:
                store(outcome.batch)
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        cache: Optional[ResponseCache] = None,
        time_shift_threshold: timedelta = TIME_SHIFT_THRESHOLD,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._transport = transport or HttpxTransport()
        self._owns_cache = cache is None
        self._cache = cache if cache is not None else InMemoryResponseCache()
        self._time_shift_threshold = time_shift_threshold
        self._clock = clock or utcnow
        self._runner = LoopThread()

    @classmethod
    def from_config(
        cls,
        config: GlobalConfig,
        cache_dir: Optional[str | Path] = None,
    ) -> ExposeeServiceClient:
        """Build a client whose transport, cache and threshold follow *config*.

        Args:
            config: Resolved global configuration.
            cache_dir: Directory for the disk cache backend. Defaults to
                :func:`~exposee.config.get_cache_dir`.
        """
        if cache_dir is None:
            from exposee.config import get_cache_dir

            cache_dir = get_cache_dir()
        client = cls(
            transport=HttpxTransport(config.request),
            cache=create_cache(config.cache, cache_dir),
            time_shift_threshold=timedelta(seconds=config.sync.time_shift_threshold_seconds),
        )
        client._owns_cache = True
        return client

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> ExposeeServiceClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the transport, stop the loop thread and close an owned cache."""
        if self._runner.running:
            self._runner.run(self._transport.aclose())
        self._runner.stop()
        if self._owns_cache:
            self._cache.close()

    async def aclose(self) -> None:
        """Close the transport from the caller's own event loop.

        Use this instead of :meth:`close` when only :meth:`fetch_async` or
        :meth:`report_async` were used.
        """
        await self._transport.aclose()
        if self._owns_cache:
            self._cache.close()

    # ------------------------------------------------------------------ #
    # Batch fetch
    # ------------------------------------------------------------------ #

    def fetch(
        self,
        descriptor: ApplicationDescriptor,
        batch_timestamp: BatchTimestamp,
    ) -> SyncOutcome:
        """Fetch the batch published at *batch_timestamp*, blocking until done.

        Returns:
            ``Success(None)`` if the batch is unchanged since the last fetch
            of the same request, ``Success(records)`` for fresh data
            (possibly empty), or ``Failure(error)`` with one
            :class:`~exposee.exceptions.SyncError`.
        """
        return self._runner.run(self.fetch_async(descriptor, batch_timestamp))

    async def fetch_async(
        self,
        descriptor: ApplicationDescriptor,
        batch_timestamp: BatchTimestamp,
    ) -> SyncOutcome:
        """Coroutine form of :meth:`fetch` for callers running their own loop."""
        try:
            batch = await self._fetch_batch(descriptor, batch_timestamp)
        except SyncError as exc:
            logger.info("Fetch failed (%s): %s", exc.kind.value, exc)
            return Failure(exc)
        return Success(batch)

    async def _fetch_batch(
        self,
        descriptor: ApplicationDescriptor,
        batch_timestamp: BatchTimestamp,
    ) -> Optional[ExposedBatch]:
        identity = build_exposed_request(descriptor, batch_timestamp)
        response = await self._transport.execute(identity)

        if not response.is_success:
            raise InvalidResponseCodeError(response.status_code)

        # A missing Date header skips the guard rather than failing the call.
        server_time = parse_http_date(response.date)
        if server_time is not None:
            check_clock_skew(server_time, self._clock(), self._time_shift_threshold)

        validator = response.etag
        cached = await asyncio.to_thread(self._cache.lookup, identity)
        if cached is not None and validator is not None and cached.validator == validator:
            logger.debug("Validator unchanged for %s (%s)", identity.url, validator)
            return None

        batch = decode_batch(response.body)
        await asyncio.to_thread(self._cache.store, identity, validator, batch)
        logger.debug("Decoded %d records from %s", len(batch), identity.url)
        return batch

    # ------------------------------------------------------------------ #
    # Report
    # ------------------------------------------------------------------ #

    def report(self, descriptor: ApplicationDescriptor, report: ExposeeReport) -> None:
        """Publish *report* to the backend, blocking until done.

        Raises:
            NetworkTransportError: If no response was obtained.
            InvalidResponseCodeError: If the backend rejected the report.
        """
        self._runner.run(self.report_async(descriptor, report))

    async def report_async(
        self,
        descriptor: ApplicationDescriptor,
        report: ExposeeReport,
    ) -> None:
        """Coroutine form of :meth:`report`."""
        identity = build_report_request(descriptor, report)
        response = await self._transport.execute(identity)
        if not response.is_success:
            raise InvalidResponseCodeError(response.status_code)
        logger.debug("Report accepted by %s", identity.url)
