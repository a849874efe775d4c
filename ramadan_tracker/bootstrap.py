"""
Wiring for a tracker session.
Builds the record store, tracker and (optionally) sync coordinator from
explicit arguments or TRACKER_* environment variables.
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ramadan_tracker.database import Base, SessionLocal, engine
from ramadan_tracker.repositories.storage_repository import SqlStorageBackend
from ramadan_tracker.services.date_service import DateService
from ramadan_tracker.services.record_store import DailyRecordStore
from ramadan_tracker.services.remote_client import RemoteTrackingClient
from ramadan_tracker.services.sync_service import SyncCoordinator
from ramadan_tracker.services.tracker_service import TrackerService

logger = logging.getLogger("ramadan_tracker.bootstrap")


@dataclass
class TrackerSession:
    store: DailyRecordStore
    tracker: TrackerService
    sync: Optional[SyncCoordinator] = None


def create_session(
    backend=None,
    remote=None,
    date_service: Optional[DateService] = None,
    remote_url: Optional[str] = None,
    api_key: Optional[str] = None,
    user_id: Optional[str] = None,
) -> TrackerSession:
    """
    Build a tracker session.

    Args:
        backend: Storage backend (SQL storage on the default engine when omitted)
        remote: Remote client (built from remote_url / TRACKER_REMOTE_URL when omitted)
        date_service: Calendar resolver
        remote_url: Base URL of the remote tracking store
        api_key: API key sent to the remote store
        user_id: Identity sent to the remote store

    Returns:
        TrackerSession; sync is None when no remote is configured
    """
    if backend is None:
        try:
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError as e:
            logger.warning(f"Tracker storage unavailable, continuing in memory: {e}")
        backend = SqlStorageBackend(SessionLocal)

    store = DailyRecordStore(backend)
    tracker = TrackerService(store, date_service)

    if remote is None:
        remote_url = remote_url or os.getenv("TRACKER_REMOTE_URL")
        if remote_url:
            remote = RemoteTrackingClient(
                base_url=remote_url,
                api_key=api_key or os.getenv("TRACKER_API_KEY", ""),
                user_id=user_id or os.getenv("TRACKER_USER_ID", ""),
            )

    sync = SyncCoordinator(store, remote) if remote is not None else None
    if sync is None:
        logger.info("No remote tracking store configured, running local-only")

    return TrackerSession(store=store, tracker=tracker, sync=sync)
