"""
Journey Planner Backend - Journey API

POST  /api/journeys        create a journey from an ordered location list
GET   /api/journeys        list the caller's journeys, newest first
GET   /api/journeys/{id}   fetch one journey
PATCH /api/journeys/{id}   partial update of name and/or locations

Every route requires a signed-in caller. A journey owned by someone else is
reported as 404, never 403.
"""

import json
import uuid

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from journey_planner import db
from journey_planner.auth import require_user_id
from journey_planner.config import DEFAULT_JOURNEY_NAME, log
from journey_planner.models import CreateJourneyRequest, Journey, UpdateJourneyRequest

router = APIRouter(prefix="/api/journeys", tags=["journeys"])


async def _read_json(request: Request):
    """Parse the request body. Read only after auth has passed."""
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Request body must be valid JSON")


def _is_journey_id(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="Journey not found")


def _internal_error() -> HTTPException:
    return HTTPException(status_code=500, detail="Internal Server Error")


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.post("")
async def create_journey(request: Request, user_id: str = Depends(require_user_id)) -> Journey:
    """
    POST /api/journeys

    Body: { "locations": Location[] } (non-empty)
    Returns the stored journey, named "Vi vu".
    """
    body = await _read_json(request)
    try:
        payload = CreateJourneyRequest.model_validate(body)
    except ValidationError as e:
        log("WARN", "create journey rejected", owner_id=user_id, errors=e.error_count())
        raise HTTPException(status_code=400, detail="Invalid locations data")

    try:
        row = await db.create_journey(
            user_id,
            [loc.model_dump(exclude_none=True) for loc in payload.locations],
            name=DEFAULT_JOURNEY_NAME,
        )
    except db.DatabaseError as e:
        raise _internal_error() from e
    return Journey.model_validate(row)


@router.get("")
async def list_journeys(user_id: str = Depends(require_user_id)) -> list[Journey]:
    """
    GET /api/journeys

    Returns the caller's journeys ordered by created_at desc.
    """
    try:
        rows = await db.list_journeys(user_id)
    except db.DatabaseError as e:
        raise _internal_error() from e
    return [Journey.model_validate(r) for r in rows]


@router.get("/{journey_id}")
async def get_journey(journey_id: str, user_id: str = Depends(require_user_id)) -> Journey:
    """
    GET /api/journeys/{journey_id}

    Returns 404 if the journey does not exist or is not the caller's.
    """
    if not _is_journey_id(journey_id):
        raise _not_found()
    try:
        row = await db.get_journey(journey_id, user_id)
    except db.DatabaseError as e:
        raise _internal_error() from e
    if row is None:
        raise _not_found()
    return Journey.model_validate(row)


@router.patch("/{journey_id}")
async def update_journey(
    journey_id: str,
    request: Request,
    user_id: str = Depends(require_user_id),
) -> Journey:
    """
    PATCH /api/journeys/{journey_id}

    Body: { "name"?: str, "locations"?: Location[] }
    Omitted fields keep their stored value. Same 404 rule as GET.
    """
    if not _is_journey_id(journey_id):
        raise _not_found()

    body = await _read_json(request)
    try:
        payload = UpdateJourneyRequest.model_validate(body)
    except ValidationError as e:
        log("WARN", "update journey rejected", journey_id=journey_id, errors=e.error_count())
        raise HTTPException(status_code=400, detail="Invalid journey update")

    try:
        if payload.name is None and payload.locations is None:
            row = await db.get_journey(journey_id, user_id)
        else:
            row = await db.update_journey(
                journey_id,
                user_id,
                name=payload.name,
                locations=(
                    [loc.model_dump(exclude_none=True) for loc in payload.locations]
                    if payload.locations is not None
                    else None
                ),
            )
    except db.DatabaseError as e:
        raise _internal_error() from e

    if row is None:
        raise _not_found()
    return Journey.model_validate(row)
