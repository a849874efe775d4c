"""Remote tracking store client.

Talks to the store of record over HTTP:

- ``GET  /api/tracking``        all rows for the authenticated user
- ``PUT  /api/tracking/{date}`` idempotent upsert of one full record

Every call returns a SyncResult instead of raising, so network trouble never
unwinds into the record store.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any

import httpx

from ramadan_tracker.constants import CHECKLIST_KEYS, DETAIL_SUFFIX, REMOTE_TIMEOUT_SECONDS, TRACKING_API_PATH
from ramadan_tracker.exceptions import InvalidDateException, RemoteSyncException
from ramadan_tracker.records import DailyRecord, parse_data
from ramadan_tracker.services.date_service import format_date, parse_date

logger = logging.getLogger("ramadan_tracker.remote")


@dataclass
class SyncResult:
    """Outcome of one remote call."""

    ok: bool
    data: Any = None
    error: str | None = None

    @classmethod
    def success(cls, data: Any = None) -> "SyncResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: str) -> "SyncResult":
        return cls(ok=False, error=error)


def record_to_row(record: DailyRecord) -> dict[str, Any]:
    """Serialize a record for PUT: flags as booleans, detail payloads as JSON text."""
    row: dict[str, Any] = {key: bool(record.get(key)) for key in CHECKLIST_KEYS}
    for key, value in record.items():
        if key in row:
            continue
        if key.endswith(DETAIL_SUFFIX):
            row[key] = json.dumps(parse_data(value), ensure_ascii=False)
        else:
            row[key] = value
    return row


def row_to_record(row: dict[str, Any]) -> tuple[date, DailyRecord]:
    """Turn a remote row into (date, record). Raises InvalidDateException on a bad date."""
    day = parse_date(row.get("date"))
    record: DailyRecord = {key: bool(row.get(key)) for key in CHECKLIST_KEYS}
    for key, value in row.items():
        if key.endswith(DETAIL_SUFFIX):
            record[key] = parse_data(value)
    return day, record


class RemoteTrackingClient:
    """Async client for the remote tracking store."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        user_id: str = "",
        timeout: float = REMOTE_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {}
        if api_key:
            headers["X-API-Key"] = api_key
        if user_id:
            headers["X-User-Id"] = user_id
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def _request(self, operation: str, method: str, url: str, **kwargs) -> Any:
        try:
            resp = await self._client.request(method, url, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RemoteSyncException(
                operation, f"HTTP {exc.response.status_code}", exc.response.status_code
            ) from exc
        except httpx.HTTPError as exc:
            raise RemoteSyncException(operation, str(exc) or type(exc).__name__) from exc
        try:
            return resp.json()
        except ValueError as exc:
            raise RemoteSyncException(operation, "invalid JSON body") from exc

    async def fetch_rows(self) -> SyncResult:
        """Pull every row; data is a list of (date, record) pairs."""
        try:
            body = await self._request("pull", "GET", TRACKING_API_PATH)
        except RemoteSyncException as exc:
            logger.warning("Tracking pull failed: %s", exc)
            return SyncResult.failure(str(exc))

        if not isinstance(body, list):
            logger.warning("Tracking pull returned %s, expected a list", type(body).__name__)
            return SyncResult.failure("unexpected response shape")

        rows = []
        for item in body:
            if not isinstance(item, dict):
                continue
            try:
                rows.append(row_to_record(item))
            except InvalidDateException as exc:
                logger.warning("Skipping remote row: %s", exc)
        return SyncResult.success(rows)

    async def put_row(self, day: date, record: DailyRecord) -> SyncResult:
        """Upsert the full record for one date."""
        url = f"{TRACKING_API_PATH}/{format_date(day)}"
        try:
            payload = record_to_row(record)
        except (TypeError, ValueError) as exc:
            logger.warning("Tracking push for %s skipped, record not serializable: %s", day, exc)
            return SyncResult.failure(f"unserializable record: {exc}")
        try:
            body = await self._request("push", "PUT", url, json=payload)
        except RemoteSyncException as exc:
            logger.warning("Tracking push for %s failed: %s", day, exc)
            return SyncResult.failure(str(exc))
        return SyncResult.success(body)

    async def aclose(self) -> None:
        await self._client.aclose()
