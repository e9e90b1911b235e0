"""
Journey Planner Backend - Auth Helpers

Sign-in is delegated to Supabase Auth. The frontend forwards the session's
access token as `Authorization: Bearer <jwt>`; the `sub` claim is the user id.
"""

import jwt
from fastapi import HTTPException, Request

from journey_planner.config import log, settings


def get_current_user_id(request: Request) -> str | None:
    """
    Return the authenticated user's ID, or None if anonymous or the token is invalid.
    """
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None

    try:
        payload = jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=[settings.auth_jwt_algorithm],
            options={"verify_aud": False},
        )
    except jwt.PyJWTError as e:
        log("WARN", "rejected bearer token", path=request.url.path, error=str(e))
        return None

    user_id = payload.get("sub")
    return str(user_id) if user_id else None


def require_user_id(request: Request) -> str:
    """FastAPI dependency: the caller's user id, or 401."""
    user_id = get_current_user_id(request)
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id
