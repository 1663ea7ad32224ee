"""Exposee service client.

Provides :class:`ExposeeServiceClient`, whose blocking
:meth:`~ExposeeServiceClient.fetch` returns a :data:`SyncOutcome`:
either :class:`Success` (``batch`` is ``None`` when unchanged) or
:class:`Failure` carrying one :class:`~exposee.exceptions.SyncError`.

Example::

    from exposee.client import ExposeeServiceClient, Success

    with ExposeeServiceClient() as client:
        outcome = client.fetch(descriptor, batch_timestamp)
"""

from exposee.client.outcome import Failure, Success, SyncOutcome
from exposee.client.runner import LoopThread
from exposee.client.service_client import ExposeeServiceClient

__all__ = ["ExposeeServiceClient", "Failure", "LoopThread", "Success", "SyncOutcome"]
