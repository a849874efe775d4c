"""
Daily record helpers.

A daily record is a JSON-like dict: the five checklist flags plus opaque
per-category detail payloads stored under "<category>_data". Anything else
in the dict is carried along untouched.
"""
import json
import logging
from typing import Any, Dict

from ramadan_tracker.constants import CHECKLIST_KEYS, DETAIL_SUFFIX
from ramadan_tracker.exceptions import UnknownCategoryException

logger = logging.getLogger("ramadan_tracker.records")

DailyRecord = Dict[str, Any]


def empty_record() -> DailyRecord:
    """A record with every checklist flag false and no detail payloads"""
    return {key: False for key in CHECKLIST_KEYS}


def detail_key(category: str) -> str:
    """Record key holding the detail payload for a category"""
    return f"{category}{DETAIL_SUFFIX}"


def is_checklist_key(key: str) -> bool:
    return key in CHECKLIST_KEYS


def require_checklist_key(key: str) -> str:
    if not is_checklist_key(key):
        raise UnknownCategoryException(key)
    return key


def parse_data(value: Any) -> Dict[str, Any]:
    """
    Read a detail payload that may be an object or serialized JSON text.

    Returns an empty dict for missing or malformed values.
    """
    if not value:
        return {}
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except (json.JSONDecodeError, ValueError):
            logger.debug("Ignoring malformed detail payload: %r", value[:80])
            return {}
        return parsed if isinstance(parsed, dict) else {}
    if isinstance(value, dict):
        return value
    return {}


def normalize_record(raw: Any) -> DailyRecord:
    """Treat anything that is not a dict as an empty record"""
    if not isinstance(raw, dict):
        return {}
    return raw


def count_true_flags(record: Any) -> int:
    """Number of checklist flags set true; unknown keys are ignored"""
    record = normalize_record(record)
    return sum(1 for key in CHECKLIST_KEYS if record.get(key))


def is_perfect_day(record: Any) -> bool:
    return count_true_flags(record) == len(CHECKLIST_KEYS)
