"""Tests for request construction."""

from __future__ import annotations

import json
from datetime import date, datetime, timedelta, timezone

import pytest

from exposee.models import ApplicationDescriptor, ExposeeAuthData, ExposeeReport
from exposee.request import (
    PROTOBUF_CONTENT_TYPE,
    build_exposed_request,
    build_report_request,
    epoch_millis,
)


class TestEpochMillis:
    def test_aware_datetime(self) -> None:
        moment = datetime(2020, 5, 15, 10, 0, 0, 123_456, tzinfo=timezone.utc)
        assert epoch_millis(moment) == 1589536800123

    def test_naive_datetime_is_utc(self) -> None:
        assert epoch_millis(datetime(1970, 1, 1, 0, 0, 1)) == 1000

    def test_other_timezone_is_normalised(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        moment = datetime(1970, 1, 1, 2, 0, 0, tzinfo=plus_two)
        assert epoch_millis(moment) == 0

    def test_int_passes_through(self) -> None:
        assert epoch_millis(1589536800000) == 1589536800000

    def test_bool_rejected(self) -> None:
        with pytest.raises(TypeError):
            epoch_millis(True)  # type: ignore[arg-type]

    def test_distinct_millis_stay_distinct(self) -> None:
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert epoch_millis(base) != epoch_millis(base + timedelta(milliseconds=1))


class TestBuildExposedRequest:
    def test_url_ends_with_epoch_millis(self, descriptor: ApplicationDescriptor) -> None:
        moment = datetime(2020, 5, 15, 10, 0, tzinfo=timezone.utc)
        identity = build_exposed_request(descriptor, moment)
        assert identity.url == "http://xy.ch/v1/exposed/1589536800000"
        assert identity.url.rsplit("/", 1)[-1] == str(epoch_millis(moment))

    def test_accept_header_is_protobuf(self, descriptor: ApplicationDescriptor) -> None:
        identity = build_exposed_request(descriptor, 0)
        assert identity.header_dict() == {"Accept": "application/x-protobuf"}
        assert PROTOBUF_CONTENT_TYPE == "application/x-protobuf"

    def test_method_is_get_without_body(self, descriptor: ApplicationDescriptor) -> None:
        identity = build_exposed_request(descriptor, 0)
        assert identity.method == "GET"
        assert identity.content == b""

    def test_deterministic(self, descriptor: ApplicationDescriptor) -> None:
        moment = datetime.now(timezone.utc)
        first = build_exposed_request(descriptor, moment)
        second = build_exposed_request(descriptor, moment)
        assert first == second
        assert first.cache_key == second.cache_key

    def test_trailing_slash_not_doubled(self) -> None:
        descriptor = ApplicationDescriptor(
            app_id="a",
            description="a",
            bucket_base_url="https://bucket.example.org/",
            report_base_url="https://backend.example.org/api/",
            contact="c",
        )
        identity = build_exposed_request(descriptor, 42)
        assert identity.url == "https://backend.example.org/api/v1/exposed/42"

    def test_uses_report_base_url(self) -> None:
        descriptor = ApplicationDescriptor(
            appId="a",
            description="a",
            bucketBaseUrl="https://bucket.example.org",
            reportBaseUrl="https://report.example.org",
            contact="c",
        )
        identity = build_exposed_request(descriptor, 7)
        assert identity.url.startswith("https://report.example.org/")


class TestBuildReportRequest:
    def test_post_with_json_body(self, descriptor: ApplicationDescriptor) -> None:
        report = ExposeeReport(
            key=b"\x01\x02\x03",
            onset=date(2020, 5, 14),
            auth_data=ExposeeAuthData(value="abc"),
        )
        identity = build_report_request(descriptor, report)
        assert identity.method == "POST"
        assert identity.url == "http://xy.ch/v1/exposed"
        assert identity.header_dict()["Content-Type"] == "application/json"
        assert json.loads(identity.content) == {
            "key": "AQID",
            "onset": "2020-05-14",
            "authData": {"value": "abc"},
        }

    def test_auth_data_omitted_when_absent(self, descriptor: ApplicationDescriptor) -> None:
        report = ExposeeReport(key=b"\x00", onset=date(2020, 1, 1))
        body = json.loads(build_report_request(descriptor, report).content)
        assert "authData" not in body
