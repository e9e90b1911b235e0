"""
Journey Planner Backend - Place Search API (GET /api/search?q=...)

Thin proxy over journey_planner.geocoding. Blank queries answer [] at once.
"""

from fastapi import APIRouter, HTTPException, Request

from journey_planner import geocoding
from journey_planner.config import settings
from journey_planner.limiter import limiter
from journey_planner.models import SearchResult

router = APIRouter(prefix="/api/search", tags=["search"])


@router.get("")
@limiter.limit(settings.search_rate_limit)
async def search_places(request: Request, q: str = "") -> list[SearchResult]:
    """
    GET /api/search?q=<text>

    Returns: [{ name, display_name, lat, lon }]
    """
    if not q.strip():
        return []

    try:
        return await geocoding.search_places(q)
    except geocoding.GeocodingNotConfigured as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    except geocoding.GeocodingError as e:
        raise HTTPException(status_code=502, detail="Search failed") from e
