"""Canonical Pydantic models shared across all exposee modules.

The models fall into three groups:

**Service models** -- supplied by the caller and read by the client:
    :class:`ApplicationDescriptor` and :class:`ExposeeReport`.

**Protocol models** -- produced while talking to the backend:
    :class:`RequestIdentity` (the cache key of one request) and
    :class:`ExposedRecord` (one decoded diagnosis key).

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig`, :class:`SyncConfig`, :class:`CacheConfig` and
    :class:`GlobalConfig`.

All models use Pydantic v2. Models that travel between threads or act as
dictionary keys are frozen.
"""

from __future__ import annotations

import base64
import json
from datetime import date, datetime, timedelta, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MILLISECOND = timedelta(milliseconds=1)


# --- Service models ---


class ApplicationDescriptor(BaseModel):
    """Endpoint configuration of one exposure-notification application.

    Owned by the caller and treated as already validated. The client only
    reads :attr:`report_base_url`; the remaining fields are carried for the
    surrounding application.

    The camelCase names used by discovery documents (``appId``,
    ``jwtPublicKey``, ``bucketBaseUrl``, ``reportBaseUrl``) are accepted as
    aliases.

    Example::

        ApplicationDescriptor(
            app_id="org.example.app",
            description="Example",
            bucket_base_url="https://bucket.example.org",
            report_base_url="https://backend.example.org",
            contact="ops@example.org",
        )
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    app_id: str = Field(alias="appId")
    description: str
    jwt_public_key: Optional[str] = Field(
        default=None,
        alias="jwtPublicKey",
        description="Public key reserved for payload signature verification",
    )
    bucket_base_url: str = Field(alias="bucketBaseUrl")
    report_base_url: str = Field(alias="reportBaseUrl")
    contact: str


class ExposeeAuthData(BaseModel):
    """Authorisation code accompanying a published diagnosis key."""

    model_config = ConfigDict(frozen=True)

    value: str


class ExposeeReport(BaseModel):
    """A diagnosis key the device publishes after a positive test."""

    model_config = ConfigDict(frozen=True)

    key: bytes
    onset: date
    auth_data: Optional[ExposeeAuthData] = None

    def to_json_bytes(self) -> bytes:
        """Serialise to the backend's JSON body (base64 key, ISO onset day)."""
        payload: dict[str, object] = {
            "key": base64.b64encode(self.key).decode("ascii"),
            "onset": self.onset.isoformat(),
        }
        if self.auth_data is not None:
            payload["authData"] = {"value": self.auth_data.value}
        return json.dumps(payload, separators=(",", ":")).encode("utf-8")


# --- Protocol models ---


class RequestIdentity(BaseModel):
    """A fully built request: method, URL, headers and optional body.

    Doubles as the cache key for :class:`~exposee.cache.ResponseCache`
    implementations, which compare identities by :attr:`cache_key` (the exact
    URL string).
    """

    model_config = ConfigDict(frozen=True)

    method: str = "GET"
    url: str
    headers: tuple[tuple[str, str], ...] = ()
    content: bytes = b""

    @property
    def cache_key(self) -> str:
        return self.url

    def header_dict(self) -> dict[str, str]:
        return dict(self.headers)


class ExposedRecord(BaseModel):
    """One published diagnosis key and the onset of its exposure window.

    ``onset`` is always timezone-aware UTC. :attr:`key_date` returns the
    epoch-millisecond value it was decoded from.
    """

    model_config = ConfigDict(frozen=True)

    key: bytes
    onset: datetime

    @classmethod
    def from_key_date(cls, key: bytes, key_date: int) -> ExposedRecord:
        """Build a record from raw key bytes and an epoch-millisecond ``keyDate``.

        Raises:
            OverflowError: If ``key_date`` lies outside the ``datetime`` range.
        """
        return cls(key=key, onset=EPOCH + timedelta(milliseconds=key_date))

    @property
    def key_date(self) -> int:
        onset = self.onset
        if onset.tzinfo is None:
            onset = onset.replace(tzinfo=timezone.utc)
        return (onset - EPOCH) // _ONE_MILLISECOND


ExposedBatch = list[ExposedRecord]


# --- Configuration models ---


class RequestConfig(BaseModel):
    """HTTP transport settings; the transport owns its own timeout policy."""

    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")


class SyncConfig(BaseModel):
    """Settings of the batch synchronisation protocol."""

    time_shift_threshold_seconds: int = Field(
        default=7200,
        description="Maximum tolerated deviation between server and device clocks",
    )


class CacheConfig(BaseModel):
    """Validator cache settings stored in :class:`GlobalConfig`."""

    backend: Literal["memory", "disk", "none"] = Field(
        default="memory", description="Cache backend: memory, disk, none"
    )
    ttl_seconds: Optional[int] = Field(
        default=None, description="Entry TTL for the disk backend (None keeps entries)"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/exposee/config.json``.

    Loaded and saved by :func:`~exposee.config.load_global_config` and
    :func:`~exposee.config.save_global_config`. Environment variables take
    precedence, see :func:`~exposee.config.resolve_config`.
    """

    request: RequestConfig = Field(default_factory=RequestConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
