"""
Journey Planner Backend - Place Search

MapTiler geocoding, reshaped into SearchResult rows for the search dropdown.
Uses httpx.
"""

import time
from urllib.parse import quote

import httpx

from journey_planner.config import MAPTILER_GEOCODING_URL, generate_error_code, log, settings
from journey_planner.models import SearchResult


class GeocodingError(Exception):
    pass


class GeocodingNotConfigured(GeocodingError):
    pass


DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; JourneyPlanner/1.0)"


def _to_search_result(feature: dict) -> SearchResult:
    """Reshape one GeoJSON feature. center is [lon, lat]."""
    center = feature.get("center") or [0, 0]
    return SearchResult(
        name=feature.get("text_vi") or feature.get("text", ""),
        display_name=feature.get("place_name", ""),
        lat=str(center[1]),
        lon=str(center[0]),
    )


async def search_places(query: str) -> list[SearchResult]:
    """Geocode free text into candidates.

    Blank queries return [] without touching the network.
    Raises GeocodingError on network failure or a non-success status.
    """
    query = query.strip()
    if not query:
        return []

    if not settings.maptiler_api_key:
        raise GeocodingNotConfigured("MapTiler API key not configured")

    log("INFO", "search started", provider="maptiler", query=query)
    start = time.monotonic()
    try:
        async with httpx.AsyncClient(timeout=10.0, headers={"User-Agent": DEFAULT_USER_AGENT}) as client:
            response = await client.get(
                f"{MAPTILER_GEOCODING_URL}/{quote(query, safe='')}.json",
                params={"key": settings.maptiler_api_key, "language": "vi"},
            )
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        code = generate_error_code()
        log("ERROR", "search failed", provider="maptiler", query=query, error=str(e), error_code=code)
        raise GeocodingError(str(e)) from e

    results = [_to_search_result(f) for f in data.get("features", [])]
    log("INFO", "search completed", provider="maptiler", results_count=len(results), duration_ms=int((time.monotonic() - start) * 1000))
    return results
