from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from datetime import date
import logging
import os
from pathlib import Path

from ramadan_tracker.database import engine, get_db, Base
from ramadan_tracker import models  # Import all models to register them with Base
from ramadan_tracker.schemas import TrackingRowUpdate, TrackingPutResponse
from ramadan_tracker.auth import verify_api_key, get_current_user_id
from ramadan_tracker.repositories.tracking_repository import TrackingRowRepository, row_to_dict
from ramadan_tracker.constants import (
    DEFAULT_LOG_DIRECTORY_PROD,
    DEFAULT_LOG_DIRECTORY_DEV,
    CORS_ALLOWED_ORIGINS,
)

LOG_DIR = os.getenv("TRACKER_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("TRACKER_LOG_FILE", "tracker.log")


def resolve_log_path(log_dir: str, log_file: str) -> Path:
    """Tracker log file path; unwritable system dirs fall back to ./logs"""
    for candidate in (log_dir, DEFAULT_LOG_DIRECTORY_DEV):
        try:
            Path(candidate).mkdir(parents=True, exist_ok=True)
        except PermissionError:
            continue
        return Path(candidate) / log_file
    raise PermissionError(f"No writable log directory for {log_file}")


log_path = resolve_log_path(LOG_DIR, LOG_FILE)

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger("ramadan_tracker")

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Ramadan Tracker API",
    description="Store of record for daily checklist tracking",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    logger.info(f"Ramadan Tracker API started. Logging to: {log_path}")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down Ramadan Tracker API")


# Health check (no auth required)
@app.get("/")
async def root():
    return {"message": "Ramadan Tracker API", "status": "active"}


@app.get("/api/tracking", dependencies=[Depends(verify_api_key)])
def get_all_tracking(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get every tracking row for the current user, oldest first"""
    rows = TrackingRowRepository.get_all(db, user_id)
    return [row_to_dict(row) for row in rows]


@app.get("/api/tracking/{target_date}", dependencies=[Depends(verify_api_key)])
def get_tracking_for_date(
    target_date: date,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get the tracking row for one date (null when absent)"""
    row = TrackingRowRepository.get_by_date(db, user_id, target_date)
    return row_to_dict(row) if row else None


@app.put(
    "/api/tracking/{target_date}",
    response_model=TrackingPutResponse,
    dependencies=[Depends(verify_api_key)]
)
def put_tracking_for_date(
    target_date: date,
    body: TrackingRowUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Upsert the full record for one date"""
    payload = body.model_dump()
    payload.pop("date", None)
    try:
        TrackingRowRepository.upsert(db, user_id, target_date, payload)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Tracking upsert failed for {user_id} on {target_date}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store tracking row"
        )
    return {"success": True, "date": target_date}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("ramadan_tracker.main:app", host="0.0.0.0", port=8000, reload=False)
