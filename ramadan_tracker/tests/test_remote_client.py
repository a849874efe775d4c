"""Tests for ramadan_tracker.services.remote_client - HTTP calls to the tracking store."""

import json
from datetime import date

import httpx
import pytest

from ramadan_tracker.services.remote_client import (
    RemoteTrackingClient,
    record_to_row,
    row_to_record,
)
from ramadan_tracker.exceptions import InvalidDateException


def make_client(handler):
    return RemoteTrackingClient(
        base_url="http://tracker.test",
        api_key="secret",
        user_id="user-1",
        transport=httpx.MockTransport(handler),
    )


class TestRowConversion:
    def test_record_to_row_serializes_details(self):
        row = record_to_row({"fasted": True, "quran_data": {"surahs": [1]}})

        assert row["fasted"] is True
        assert row["masjid"] is False
        assert json.loads(row["quran_data"]) == {"surahs": [1]}

    def test_row_to_record_parses_details(self):
        day, record = row_to_record({
            "date": "2026-03-01",
            "fasted": True,
            "dhikr_data": '{"count": 33}',
            "updated_at": "2026-03-01T10:00:00",
        })

        assert day == date(2026, 3, 1)
        assert record["fasted"] is True
        assert record["prayer"] is False
        assert record["dhikr_data"] == {"count": 33}
        assert "updated_at" not in record

    def test_row_to_record_tolerates_bad_detail_text(self):
        _, record = row_to_record({"date": "2026-03-01", "quran_data": "{oops"})

        assert record["quran_data"] == {}

    def test_row_without_date_raises(self):
        with pytest.raises(InvalidDateException):
            row_to_record({"fasted": True})


class TestFetchRows:
    @pytest.mark.asyncio
    async def test_success(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["headers"] = request.headers
            return httpx.Response(200, json=[
                {"date": "2026-03-01", "fasted": True},
                {"date": "2026-03-02", "quran": True, "quran_data": '{"surahs": [2]}'},
            ])

        client = make_client(handler)
        result = await client.fetch_rows()
        await client.aclose()

        assert result.ok
        assert seen["path"] == "/api/tracking"
        assert seen["headers"]["X-API-Key"] == "secret"
        assert seen["headers"]["X-User-Id"] == "user-1"
        assert [day for day, _ in result.data] == [date(2026, 3, 1), date(2026, 3, 2)]
        assert result.data[1][1]["quran_data"] == {"surahs": [2]}

    @pytest.mark.asyncio
    async def test_bad_rows_are_skipped(self):
        def handler(request):
            return httpx.Response(200, json=[{"date": "nope"}, "junk", {"date": "2026-03-01"}])

        client = make_client(handler)
        result = await client.fetch_rows()
        await client.aclose()

        assert result.ok
        assert [day for day, _ in result.data] == [date(2026, 3, 1)]

    @pytest.mark.asyncio
    async def test_non_2xx_is_failure(self):
        client = make_client(lambda request: httpx.Response(401, json={"error": "Unauthorized"}))

        result = await client.fetch_rows()
        await client.aclose()

        assert not result.ok
        assert "401" in result.error

    @pytest.mark.asyncio
    async def test_network_error_is_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)
        result = await client.fetch_rows()
        await client.aclose()

        assert result.ok is False
        assert result.data is None
        assert "refused" in result.error

    @pytest.mark.asyncio
    async def test_unexpected_shape_is_failure(self):
        client = make_client(lambda request: httpx.Response(200, json={"rows": []}))

        result = await client.fetch_rows()
        await client.aclose()

        assert not result.ok


class TestPutRow:
    @pytest.mark.asyncio
    async def test_sends_full_record(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "date": "2026-03-01"})

        client = make_client(handler)
        result = await client.put_row(date(2026, 3, 1), {"fasted": True, "madrasa_data": {"lessons": [1]}})
        await client.aclose()

        assert result.ok
        assert seen["method"] == "PUT"
        assert seen["path"] == "/api/tracking/2026-03-01"
        assert seen["body"]["fasted"] is True
        assert seen["body"]["quran"] is False
        assert json.loads(seen["body"]["madrasa_data"]) == {"lessons": [1]}

    @pytest.mark.asyncio
    async def test_server_error_is_failure(self):
        client = make_client(lambda request: httpx.Response(500, json={"error": "db down"}))

        result = await client.put_row(date(2026, 3, 1), {"fasted": True})
        await client.aclose()

        assert not result.ok

    @pytest.mark.asyncio
    async def test_unserializable_detail_is_failure(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"success": True})

        client = make_client(handler)
        result = await client.put_row(date(2026, 3, 1), {"fasted": True, "quran_data": {"surahs": {1, 2}}})
        await client.aclose()

        assert not result.ok
        assert "unserializable" in result.error
        assert calls == []
