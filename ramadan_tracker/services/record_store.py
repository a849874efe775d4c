"""
Daily record store.

Durable mapping from calendar date to daily record. Loaded eagerly from
storage, held in memory as the authoritative snapshot, and written back in
full on every mutation.
"""
import copy
import logging
import threading
from datetime import date
from typing import Any, Callable, Dict, List, Tuple

from ramadan_tracker.constants import STORAGE_KEY
from ramadan_tracker.exceptions import InvalidDateException
from ramadan_tracker.records import DailyRecord, detail_key, empty_record, parse_data
from ramadan_tracker.repositories.storage_repository import read_json_storage, write_json_storage
from ramadan_tracker.services.date_service import format_date, parse_date

logger = logging.getLogger("ramadan_tracker.store")

MutationListener = Callable[[date], None]


class DailyRecordStore:
    """Store of daily records keyed by calendar date"""

    def __init__(self, backend, storage_key: str = STORAGE_KEY):
        self.backend = backend
        self.storage_key = storage_key
        self._lock = threading.RLock()
        self._listeners: List[MutationListener] = []
        self._records: Dict[date, DailyRecord] = self._load()

    def _load(self) -> Dict[date, DailyRecord]:
        """Load the persisted mapping, skipping entries with a bad shape"""
        raw = read_json_storage(
            self.backend, self.storage_key, {}, validate=lambda v: isinstance(v, dict)
        )
        records = {}
        for key, value in raw.items():
            try:
                day = parse_date(key)
            except InvalidDateException as e:
                logger.warning(f"Dropping stored record: {e}")
                continue
            if not isinstance(value, dict):
                logger.warning(f"Dropping stored record for {key}: not an object")
                continue
            records[day] = value
        logger.info(f"Loaded {len(records)} daily records from {self.storage_key}")
        return records

    def _persist(self) -> bool:
        """Write the whole store. Best effort: memory keeps the mutation on failure."""
        payload = {format_date(day): record for day, record in sorted(self._records.items())}
        return write_json_storage(self.backend, self.storage_key, payload)

    def _notify(self, day: date) -> None:
        for listener in list(self._listeners):
            try:
                listener(day)
            except Exception as e:
                logger.error(f"Mutation listener failed for {day}: {e}")

    def subscribe(self, listener: MutationListener) -> Callable[[], None]:
        """
        Register a callback invoked with the date after each mutation.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def get(self, day) -> DailyRecord:
        """Record for date, or an all-false record when none exists"""
        try:
            day = parse_date(day)
        except InvalidDateException as e:
            logger.warning(f"Reading empty record: {e}")
            return empty_record()
        with self._lock:
            stored = self._records.get(day)
            return {**empty_record(), **copy.deepcopy(stored or {})}

    def set_flag(self, day, category: str, value: bool) -> DailyRecord:
        """
        Set one checklist flag, keeping other flags and detail payloads.

        Args:
            day: Calendar date
            category: Checklist category key
            value: New flag value

        Returns:
            The updated record
        """
        try:
            day = parse_date(day)
        except InvalidDateException as e:
            logger.warning(f"Set flag ignored: {e}")
            return empty_record()
        with self._lock:
            record = {**empty_record(), **self._records.get(day, {})}
            record[category] = bool(value)
            self._records[day] = record
            self._persist()
            result = copy.deepcopy(record)
        self._notify(day)
        return result

    def toggle(self, day, category: str) -> DailyRecord:
        """Flip one checklist flag"""
        with self._lock:
            current = self.get(day).get(category, False)
            return self.set_flag(day, category, not current)

    def merge_detail(self, day, category: str, partial: Dict[str, Any]) -> DailyRecord:
        """
        Shallow-merge partial into the category's detail payload.

        Keys absent from partial are never cleared.
        """
        try:
            day = parse_date(day)
        except InvalidDateException as e:
            logger.warning(f"Detail merge ignored: {e}")
            return empty_record()
        key = detail_key(category)
        with self._lock:
            record = {**empty_record(), **self._records.get(day, {})}
            existing = parse_data(record.get(key))
            record[key] = {**existing, **copy.deepcopy(parse_data(partial))}
            self._records[day] = record
            self._persist()
            result = copy.deepcopy(record)
        self._notify(day)
        return result

    def replace_many(self, rows: List[Tuple[date, DailyRecord]]) -> int:
        """
        Overwrite whole records for several dates with a single write.

        Used by the login pull/merge. Listeners are not notified, so merged
        remote state is never pushed straight back. Rows with a bad date are
        skipped.

        Returns:
            Number of dates written
        """
        applied = 0
        with self._lock:
            for day, record in rows:
                try:
                    day = parse_date(day)
                except InvalidDateException as e:
                    logger.warning(f"Skipping merged row: {e}")
                    continue
                self._records[day] = copy.deepcopy(record)
                applied += 1
            if applied:
                self._persist()
        return applied

    def all_dates(self) -> List[Tuple[date, DailyRecord]]:
        """Point-in-time snapshot sorted by date ascending"""
        with self._lock:
            return [
                (day, copy.deepcopy(record))
                for day, record in sorted(self._records.items())
            ]

    def snapshot(self) -> Dict[date, DailyRecord]:
        """Snapshot as a dict, for derivations that look dates up directly"""
        return dict(self.all_dates())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
