"""
Journey Planner Backend - Directions API (POST /api/directions)

Validates the coordinate list before anything leaves the process, then relays
OpenRouteService's answer (success or error) with its own status code.
"""

import json

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from journey_planner import routing
from journey_planner.config import settings
from journey_planner.limiter import limiter
from journey_planner.models import DirectionsRequest

router = APIRouter(prefix="/api/directions", tags=["directions"])


@router.post("")
@limiter.limit(settings.directions_rate_limit)
async def get_directions(request: Request) -> JSONResponse:
    """
    POST /api/directions

    Body: { "coordinates": [[lon, lat], ...] } with at least two pairs.
    Returns the route GeoJSON.
    """
    try:
        payload = DirectionsRequest.model_validate(await request.json())
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError):
        raise HTTPException(status_code=400, detail="At least two coordinates are required")

    try:
        status_code, body = await routing.fetch_route([list(pair) for pair in payload.coordinates])
    except routing.RoutingNotConfigured as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    except routing.RoutingError as e:
        raise HTTPException(status_code=500, detail="Failed to fetch directions") from e

    return JSONResponse(content=body, status_code=status_code)
