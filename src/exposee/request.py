"""Request construction for the exposee backend.

Builds :class:`~exposee.models.RequestIdentity` values from an
:class:`~exposee.models.ApplicationDescriptor`. Building is pure: the same
descriptor and batch timestamp always produce an equal identity, which is
what lets the identity serve as a cache key.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Union

from exposee.models import (
    EPOCH,
    ApplicationDescriptor,
    ExposeeReport,
    RequestIdentity,
)

PROTOBUF_CONTENT_TYPE = "application/x-protobuf"
JSON_CONTENT_TYPE = "application/json"
EXPOSED_PATH = "/v1/exposed"

BatchTimestamp = Union[datetime, int]


def epoch_millis(batch_timestamp: BatchTimestamp) -> int:
    """Convert a batch timestamp to whole milliseconds since the Unix epoch.

    Integers are taken as milliseconds already. Naive datetimes are
    interpreted as UTC.
    """
    if isinstance(batch_timestamp, bool):
        raise TypeError("batch timestamp must be a datetime or an int")
    if isinstance(batch_timestamp, int):
        return batch_timestamp
    if batch_timestamp.tzinfo is None:
        batch_timestamp = batch_timestamp.replace(tzinfo=timezone.utc)
    delta = batch_timestamp - EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000


def _endpoint(base_url: str) -> str:
    return base_url.rstrip("/") + EXPOSED_PATH


def build_exposed_request(
    descriptor: ApplicationDescriptor,
    batch_timestamp: BatchTimestamp,
) -> RequestIdentity:
    """Build the GET request for the batch published at *batch_timestamp*.

    Returns:
        An identity for ``{report_base_url}/v1/exposed/{epochMillis}`` with
        ``Accept: application/x-protobuf``.
    """
    url = f"{_endpoint(descriptor.report_base_url)}/{epoch_millis(batch_timestamp)}"
    return RequestIdentity(
        method="GET",
        url=url,
        headers=(("Accept", PROTOBUF_CONTENT_TYPE),),
    )


def build_report_request(
    descriptor: ApplicationDescriptor,
    report: ExposeeReport,
) -> RequestIdentity:
    """Build the POST request publishing *report* to the backend."""
    return RequestIdentity(
        method="POST",
        url=_endpoint(descriptor.report_base_url),
        headers=(
            ("Accept", JSON_CONTENT_TYPE),
            ("Content-Type", JSON_CONTENT_TYPE),
        ),
        content=report.to_json_bytes(),
    )
