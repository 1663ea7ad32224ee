"""Clock-skew guard for backend responses.

Exposure-window computations downstream depend on the device clock, so a
response whose ``Date`` header disagrees with local time by more than
:data:`TIME_SHIFT_THRESHOLD` is rejected outright. The guard never tries to
correct the local clock.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

from exposee.exceptions import TimeInconsistencyError

logger = logging.getLogger(__name__)

TIME_SHIFT_THRESHOLD = timedelta(hours=2)


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_http_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an HTTP-date header value into an aware UTC datetime.

    Returns:
        The parsed time, or ``None`` when *value* is empty or unparsable.
    """
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        logger.warning("Ignoring unparsable Date header: %r", value)
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def check_clock_skew(
    server_time: datetime,
    local_time: datetime,
    threshold: timedelta = TIME_SHIFT_THRESHOLD,
) -> timedelta:
    """Compare server and local time.

    Args:
        server_time: Time reported by the backend.
        local_time: Current device time.
        threshold: Largest tolerated absolute difference.

    Returns:
        The measured absolute shift when it is within *threshold*.

    Raises:
        TimeInconsistencyError: If the shift exceeds *threshold*. The error
            carries the measured shift.
    """
    shift = abs(local_time - server_time)
    if shift > threshold:
        logger.warning(
            "Rejecting response: clock shift %.1fs exceeds threshold %.0fs",
            shift.total_seconds(),
            threshold.total_seconds(),
        )
        raise TimeInconsistencyError(shift)
    return shift
