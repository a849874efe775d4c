"""
Tracking repository - Data access layer for the remote store of record.
Handles all database queries related to per-user tracking rows.
"""
import json
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ramadan_tracker.constants import CHECKLIST_KEYS, DETAIL_SUFFIX
from ramadan_tracker.models import TrackingRow
from ramadan_tracker.records import parse_data


class TrackingRowRepository:
    """Repository for TrackingRow data access"""

    @staticmethod
    def get_all(db: Session, user_id: str) -> List[TrackingRow]:
        """Get every row for a user, oldest date first"""
        return db.query(TrackingRow).filter(
            TrackingRow.user_id == user_id
        ).order_by(TrackingRow.date.asc()).all()

    @staticmethod
    def get_by_date(db: Session, user_id: str, target_date: date) -> Optional[TrackingRow]:
        """Get a user's row for a specific date"""
        return db.query(TrackingRow).filter(
            TrackingRow.user_id == user_id,
            TrackingRow.date == target_date
        ).first()

    @staticmethod
    def upsert(db: Session, user_id: str, target_date: date, body: Dict[str, Any]) -> TrackingRow:
        """
        Create or fully replace a user's row for a date.

        Args:
            db: Database session
            user_id: Owner of the row
            target_date: Calendar date
            body: Full daily record (flags + "<category>_data" payloads)

        Returns:
            Stored row
        """
        row = TrackingRowRepository.get_by_date(db, user_id, target_date)
        if row is None:
            row = TrackingRow(user_id=user_id, date=target_date)
            db.add(row)

        for key in CHECKLIST_KEYS:
            setattr(row, key, bool(body.get(key)))

        details = {
            key: parse_data(value)
            for key, value in body.items()
            if key.endswith(DETAIL_SUFFIX)
        }
        row.details = json.dumps(details, ensure_ascii=False) if details else None
        row.updated_at = datetime.utcnow()

        db.commit()
        db.refresh(row)
        return row


def row_to_dict(row: TrackingRow) -> Dict[str, Any]:
    """Serialize a row for the API; detail payloads go out as JSON text"""
    result = {
        "date": row.date.isoformat(),
        "updated_at": row.updated_at.isoformat() if row.updated_at else None,
    }
    for key in CHECKLIST_KEYS:
        result[key] = bool(getattr(row, key))
    for key, payload in parse_data(row.details).items():
        result[key] = json.dumps(payload, ensure_ascii=False)
    return result
