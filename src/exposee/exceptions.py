"""Exception hierarchy for exposee.

All exceptions inherit from :class:`ExposeeError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`exposee.exit_codes`.
The CLI entry point in :func:`exposee.app.main` catches ``ExposeeError`` and
exits with the appropriate code.

The four :class:`SyncError` subclasses are the failure kinds of a batch
fetch. Inner layers (transport, clock guard, decoder) raise them, and
:meth:`~exposee.client.ExposeeServiceClient.fetch` returns the caught
instance inside a :class:`~exposee.client.Failure` instead of propagating it.

Subclass hierarchy::

    ExposeeError (exit 1)
    +-- InvalidUsageError            (exit 2)
    +-- ConfigError                  (exit 1)
    +-- SyncError
        +-- NetworkTransportError    (exit 6)
        +-- InvalidResponseCodeError (exit 5)
        +-- TimeInconsistencyError   (exit 8)
        +-- PayloadDecodeError       (exit 9)
"""

from __future__ import annotations

import enum
from datetime import timedelta

from exposee.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_DECODE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_RESPONSE_CODE,
    EXIT_INVALID_USAGE,
    EXIT_TIME_INCONSISTENCY,
)


class ExposeeError(Exception):
    """Base exception for all exposee errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ExposeeError):
    """Raised for invalid CLI arguments such as an unparsable batch timestamp."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(ExposeeError):
    """Raised for configuration problems (invalid JSON, bad environment overrides)."""

    exit_code = EXIT_GENERIC_FAILURE


class SyncErrorKind(str, enum.Enum):
    """Discriminator for the failure kinds of a batch fetch."""

    NETWORK_TRANSPORT = "networkTransport"
    INVALID_RESPONSE_CODE = "invalidResponseCode"
    TIME_INCONSISTENCY = "timeInconsistency"
    PAYLOAD_DECODE_FAILURE = "payloadDecodeFailure"


class SyncError(ExposeeError):
    """Base class of the terminal failures of a single fetch.

    None of these is retried inside the client; the caller decides whether
    and when to try again.
    """

    kind: SyncErrorKind


class NetworkTransportError(SyncError):
    """No response was obtained (connectivity, DNS, TLS or timeout failure)."""

    kind = SyncErrorKind.NETWORK_TRANSPORT
    exit_code = EXIT_CONNECTION_ERROR


class InvalidResponseCodeError(SyncError):
    """A response arrived but its status code is outside the 2xx range.

    Args:
        status_code: The HTTP status code the backend answered with.
    """

    kind = SyncErrorKind.INVALID_RESPONSE_CODE
    exit_code = EXIT_INVALID_RESPONSE_CODE

    def __init__(self, status_code: int):
        super().__init__(f"Unexpected HTTP status {status_code}")
        self.status_code = status_code


class TimeInconsistencyError(SyncError):
    """The backend's clock deviates from the local clock beyond the threshold.

    Args:
        shift: The measured absolute difference between the two clocks.
    """

    kind = SyncErrorKind.TIME_INCONSISTENCY
    exit_code = EXIT_TIME_INCONSISTENCY

    def __init__(self, shift: timedelta):
        super().__init__(
            f"Server time deviates from local time by {shift.total_seconds():.0f}s"
        )
        self.shift = shift


class PayloadDecodeError(SyncError):
    """The response body is not a well-formed exposed-key batch."""

    kind = SyncErrorKind.PAYLOAD_DECODE_FAILURE
    exit_code = EXIT_DECODE_ERROR
