"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~exposee.exceptions.ExposeeError` subclass.
Shell wrappers and schedulers can inspect the exit code of ``exposee fetch``
to tell a transport outage from a clock problem without parsing stderr.

Example::

    $ exposee fetch --report-base-url https://backend.example.org
    $ echo $?
    8   # EXIT_TIME_INCONSISTENCY -- server and device clocks disagree
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_INVALID_RESPONSE_CODE = 5
"""The backend answered with a status code outside the 2xx range."""

EXIT_CONNECTION_ERROR = 6
"""No response was obtained (timeout, DNS failure, TLS failure, connection refused)."""

EXIT_TIME_INCONSISTENCY = 8
"""The backend's ``Date`` header deviates from local time beyond the threshold."""

EXIT_DECODE_ERROR = 9
"""The response body could not be decoded as an exposed-key batch."""
