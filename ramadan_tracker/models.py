from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, Text, UniqueConstraint
from datetime import datetime

from ramadan_tracker.database import Base


class StorageEntry(Base):
    """Local key/value storage. The whole record store lives under one key."""
    __tablename__ = "storage_entries"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class TrackingRow(Base):
    """Remote store of record: one row per user per calendar date"""
    __tablename__ = "tracking_rows"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_tracking_user_date"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False)

    # Checklist flags
    fasted = Column(Boolean, default=False)
    quran = Column(Boolean, default=False)
    dhikr = Column(Boolean, default=False)
    prayer = Column(Boolean, default=False)
    masjid = Column(Boolean, default=False)

    # Per-category detail payloads (JSON object keyed by "<category>_data")
    details = Column(Text, nullable=True)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
