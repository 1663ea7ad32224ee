"""Sync commands -- fetch a batch of exposed keys and publish a report.

Thin wrappers around :class:`~exposee.client.ExposeeServiceClient` for
operators and shell-driven schedulers. A failed fetch exits with the exit
code of its :class:`~exposee.exceptions.SyncError` kind.
"""

from __future__ import annotations

import base64
import binascii
from datetime import date, datetime
from typing import Optional

import typer

from exposee.exceptions import ExposeeError, InvalidUsageError
from exposee.models import (
    ApplicationDescriptor,
    ExposeeAuthData,
    ExposeeReport,
    GlobalConfig,
)
from exposee.output import debug, error, info, print_records, success
from exposee.request import BatchTimestamp, epoch_millis

_REPORT_BASE_URL_ENV = "EXPOSEE_REPORT_BASE_URL"


def parse_batch_timestamp(value: Optional[str]) -> BatchTimestamp:
    """Parse ``--batch``: epoch milliseconds or an ISO 8601 datetime.

    ``None`` selects the current time.

    Raises:
        InvalidUsageError: If *value* is neither form.
    """
    if value is None:
        from exposee.clock import utcnow

        return utcnow()
    text = value.strip()
    if text.lstrip("-").isdigit():
        return int(text)
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise InvalidUsageError(
            f"Invalid batch timestamp '{value}': expected epoch milliseconds or ISO 8601"
        ) from None


def _descriptor(report_base_url: str, app_id: str) -> ApplicationDescriptor:
    return ApplicationDescriptor(
        app_id=app_id,
        description=app_id,
        bucket_base_url=report_base_url,
        report_base_url=report_base_url,
        contact="",
    )


def _load_config(cache_backend: Optional[str]) -> GlobalConfig:
    from exposee.config import resolve_config

    config = resolve_config()
    if cache_backend is None:
        return config
    data = config.model_dump()
    data["cache"]["backend"] = cache_backend
    try:
        return GlobalConfig.model_validate(data)
    except ValueError:
        raise InvalidUsageError(
            f"Unknown cache backend '{cache_backend}': expected memory, disk or none"
        ) from None


def fetch_command(
    report_base_url: str = typer.Option(
        ..., "--report-base-url", envvar=_REPORT_BASE_URL_ENV, help="Backend base URL."
    ),
    batch: Optional[str] = typer.Option(
        None, "--batch", "-b", help="Batch timestamp (epoch ms or ISO 8601). Defaults to now."
    ),
    app_id: str = typer.Option("exposee-cli", "--app-id", help="Application identifier."),
    cache_backend: Optional[str] = typer.Option(
        None, "--cache", help="Cache backend override: memory, disk, none."
    ),
) -> None:
    """Fetch one batch of exposed keys and print the decoded records.

    Example::

        exposee fetch --report-base-url https://backend.example.org --batch 1589536800000
        exposee --json fetch --cache disk
    """
    from exposee.client import ExposeeServiceClient, Failure

    try:
        config = _load_config(cache_backend)
        batch_timestamp = parse_batch_timestamp(batch)
    except ExposeeError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    descriptor = _descriptor(report_base_url, app_id)
    millis = epoch_millis(batch_timestamp)
    debug(f"Fetching batch {millis} from {report_base_url}")

    with ExposeeServiceClient.from_config(config) as client:
        outcome = client.fetch(descriptor, batch_timestamp)

    if isinstance(outcome, Failure):
        error(f"{outcome.kind.value}: {outcome.error}")
        raise typer.Exit(code=outcome.error.exit_code)

    if outcome.batch is None:
        info(f"Batch {millis} unchanged since last fetch.")
        return

    print_records(outcome.batch, title=f"Batch {millis}")
    info(f"{len(outcome.batch)} record(s) in batch {millis}.")


def report_command(
    report_base_url: str = typer.Option(
        ..., "--report-base-url", envvar=_REPORT_BASE_URL_ENV, help="Backend base URL."
    ),
    key: str = typer.Option(..., "--key", help="Base64-encoded diagnosis key."),
    onset: str = typer.Option(..., "--onset", help="Onset day (YYYY-MM-DD)."),
    auth_data: Optional[str] = typer.Option(
        None, "--auth-data", help="Authorisation code issued with the test result."
    ),
    app_id: str = typer.Option("exposee-cli", "--app-id", help="Application identifier."),
) -> None:
    """Publish one diagnosis key to the backend.

    Example::

        exposee report --report-base-url https://backend.example.org \\
            --key k6zymVXKbPHBkae6ng2k3H25WrpqxUEluI1w86t+eOI= --onset 2020-05-14
    """
    from exposee.client import ExposeeServiceClient

    try:
        report = ExposeeReport(
            key=base64.b64decode(key, validate=True),
            onset=date.fromisoformat(onset),
            auth_data=ExposeeAuthData(value=auth_data) if auth_data else None,
        )
        config = _load_config(None)
    except (binascii.Error, ValueError) as exc:
        error(f"Invalid report: {exc}")
        raise typer.Exit(code=InvalidUsageError.exit_code) from None
    except ExposeeError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    with ExposeeServiceClient.from_config(config) as client:
        try:
            client.report(_descriptor(report_base_url, app_id), report)
        except ExposeeError as exc:
            error(str(exc))
            raise typer.Exit(code=exc.exit_code) from None

    success(f"Reported key with onset {report.onset.isoformat()}.")
