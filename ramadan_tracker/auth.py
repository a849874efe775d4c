from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader
import os
import secrets

# Shared key for device clients of /api/tracking
API_KEY = os.getenv("TRACKER_API_KEY", "change-me")

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)
user_id_header = APIKeyHeader(name="X-User-Id", auto_error=False)


async def verify_api_key(api_key: str = Security(api_key_header)):
    """Reject tracking requests without the shared device key"""
    if not api_key or not secrets.compare_digest(api_key.encode(), API_KEY.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Tracking API key missing or wrong"
        )
    return api_key


async def get_current_user_id(user_id: str = Security(user_id_header)):
    """Identity of the authenticated session, set by the auth gateway"""
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )
    return user_id
