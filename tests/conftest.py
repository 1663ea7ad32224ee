"""Shared test fixtures for exposee.

Provides a recording fake backend built on :class:`httpx.MockTransport`,
a fixed clock, a sample application descriptor, config isolation and a CLI
runner. These fixtures are automatically discovered by pytest.
"""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import Path
from typing import Optional

import httpx
import pytest

from exposee.models import ApplicationDescriptor
from exposee.output import reset_output
from exposee.transport import HttpxTransport

# Sub-second part keeps HTTP-date truncation from landing exactly on a threshold.
FIXED_NOW = datetime(2026, 3, 14, 12, 0, 0, 250_000, tzinfo=timezone.utc)


def http_date(moment: datetime) -> str:
    """Format *moment* as an RFC 7231 HTTP-date."""
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


class RecordingBackend:
    """A fake exposee backend that records every request it receives.

    Serves a single canned response. Assign ``error`` to make every request
    fail at the transport level instead.
    """

    def __init__(
        self,
        body: bytes = b"",
        status_code: int = 200,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self.body = body
        self.status_code = status_code
        self.headers = headers if headers is not None else {}
        self.error: Optional[Exception] = None
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, headers=self.headers, content=self.body)

    @property
    def urls(self) -> list[str]:
        return [str(r.url) for r in self.requests]

    def transport(self) -> HttpxTransport:
        return HttpxTransport(transport=httpx.MockTransport(self))


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    Typer's CliRunner swaps sys.stdout/sys.stderr; a manager created during
    one test would otherwise keep writing to closed streams.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Domain fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def descriptor() -> ApplicationDescriptor:
    """The descriptor used throughout the suite."""
    return ApplicationDescriptor(
        app_id="ch.xy",
        description="XY",
        jwt_public_key=None,
        bucket_base_url="http://xy.ch",
        report_base_url="http://xy.ch",
        contact="xy",
    )


@pytest.fixture
def fixed_clock():
    """A clock frozen at :data:`FIXED_NOW`."""
    return lambda: FIXED_NOW


@pytest.fixture
def backend() -> RecordingBackend:
    """A fake backend answering 200 with an empty batch and fresh headers."""
    return RecordingBackend(headers={"Etag": "HASH", "Date": http_date(FIXED_NOW)})


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG base directories at ``tmp_path`` and clears every
    ``EXPOSEE_*`` environment variable.
    """
    monkeypatch.setattr("exposee.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "EXPOSEE_TIMEOUT",
        "EXPOSEE_TIME_SHIFT_THRESHOLD",
        "EXPOSEE_CACHE_BACKEND",
        "EXPOSEE_REPORT_BASE_URL",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
