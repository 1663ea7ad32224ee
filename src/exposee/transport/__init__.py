"""HTTP transports for the exposee client.

:class:`Transport` is the asynchronous contract; :class:`HttpxTransport` is
the production implementation.
"""

from exposee.transport.base import Transport, TransportResponse
from exposee.transport.httpx_transport import HttpxTransport

__all__ = ["HttpxTransport", "Transport", "TransportResponse"]
