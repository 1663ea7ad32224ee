"""exposee -- backend synchronisation client for exposure notification.

Retrieves, per time batch, the diagnosis keys published by an
exposure-notification backend: builds the batch URL, fetches it through an
asynchronous transport behind a blocking call, rejects responses from a
backend whose clock disagrees with ours, skips batches whose ``ETag`` has
not changed, and decodes the protobuf body into typed records.

Typical use::

    from exposee import ApplicationDescriptor, ExposeeServiceClient, Success

    with ExposeeServiceClient() as client:
        outcome = client.fetch(descriptor, batch_timestamp)

Modules:
    client: :class:`ExposeeServiceClient` and its outcome types.
    request: Request identity construction.
    transport: Asynchronous HTTP transports.
    cache: Validator caches.
    clock: Clock-skew guard.
    codec: Protobuf batch codec.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer CLI.
"""

__version__ = "0.1.0"

from exposee.client import ExposeeServiceClient, Failure, Success, SyncOutcome  # noqa: E402
from exposee.models import ApplicationDescriptor, ExposedRecord  # noqa: E402

__all__ = [
    "ApplicationDescriptor",
    "ExposedRecord",
    "ExposeeServiceClient",
    "Failure",
    "Success",
    "SyncOutcome",
    "__version__",
]
