"""
Journey Planner Backend - Route Directions

Forwards an ordered coordinate list to OpenRouteService (cycling profile)
and hands back whatever it answers.
"""

import time

import httpx

from journey_planner.config import OPEN_ROUTE_SERVICE_URL, generate_error_code, log, settings


class RoutingError(Exception):
    pass


class RoutingNotConfigured(RoutingError):
    pass


async def fetch_route(coordinates: list[list[float]]) -> tuple[int, dict]:
    """
    POST coordinates ([lon, lat] pairs) to OpenRouteService.

    Returns (status_code, json_body) for both success and upstream error
    responses, so the caller can relay upstream errors as-is.
    Raises RoutingNotConfigured without a key, RoutingError on network failure
    or an unreadable body.
    """
    if not settings.open_route_service_key:
        raise RoutingNotConfigured("OpenRouteService API key not configured")

    start = time.monotonic()
    try:
        async with httpx.AsyncClient(timeout=20.0) as client:
            response = await client.post(
                OPEN_ROUTE_SERVICE_URL,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": settings.open_route_service_key,
                },
                json={"coordinates": coordinates},
            )
        body = response.json()
    except (httpx.HTTPError, ValueError) as e:
        code = generate_error_code()
        log("ERROR", "directions request failed", points=len(coordinates), error=str(e), error_code=code)
        raise RoutingError(str(e)) from e

    if response.is_success:
        log("INFO", "directions fetched", points=len(coordinates), duration_ms=int((time.monotonic() - start) * 1000))
    else:
        log("WARN", "directions upstream error", status=response.status_code, points=len(coordinates))
    return response.status_code, body
