"""
Journey Planner Client - HTTP API

Async wrapper over every backend endpoint. One instance per signed-in
session; the bearer token is attached to every request.
"""

import uuid
from typing import Any

import httpx

from journey_planner.config import log
from journey_planner.models import Journey, Location, SearchResult


class ApiError(Exception):
    """Non-success response from the backend."""

    def __init__(self, status_code: int, detail: Any):
        super().__init__(f"HTTP {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class JourneyApiClient:
    def __init__(
        self,
        base_url: str,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 15.0,
    ):
        headers = {}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            transport=transport,
            timeout=timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "JourneyApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        headers = {"X-Request-Id": uuid.uuid4().hex}
        response = await self._client.request(method, url, headers=headers, **kwargs)
        if not response.is_success:
            try:
                detail = response.json()
            except ValueError:
                detail = response.text
            log("WARN", "api request failed", method=method, url=url, status=response.status_code)
            raise ApiError(response.status_code, detail)
        return response.json()

    # -------------------------------------------------------------------------
    # Journeys
    # -------------------------------------------------------------------------

    async def create_journey(self, locations: list[Location]) -> Journey:
        data = await self._request(
            "POST",
            "/api/journeys",
            json={"locations": [loc.model_dump(exclude_none=True) for loc in locations]},
        )
        return Journey.model_validate(data)

    async def list_journeys(self) -> list[Journey]:
        data = await self._request("GET", "/api/journeys")
        return [Journey.model_validate(j) for j in data]

    async def get_journey(self, journey_id: str) -> Journey:
        data = await self._request("GET", f"/api/journeys/{journey_id}")
        return Journey.model_validate(data)

    async def update_journey(
        self,
        journey_id: str,
        name: str | None = None,
        locations: list[Location] | None = None,
    ) -> Journey:
        """PATCH only the fields given."""
        body: dict[str, Any] = {}
        if name is not None:
            body["name"] = name
        if locations is not None:
            body["locations"] = [loc.model_dump(exclude_none=True) for loc in locations]
        data = await self._request("PATCH", f"/api/journeys/{journey_id}", json=body)
        return Journey.model_validate(data)

    # -------------------------------------------------------------------------
    # Proxies
    # -------------------------------------------------------------------------

    async def search(self, query: str) -> list[SearchResult]:
        if not query.strip():
            return []
        data = await self._request("GET", "/api/search", params={"q": query})
        return [SearchResult.model_validate(r) for r in data]

    async def get_directions(self, coordinates: list[tuple[float, float]]) -> dict:
        """coordinates are (lon, lat) pairs. Returns route GeoJSON."""
        return await self._request(
            "POST",
            "/api/directions",
            json={"coordinates": [list(c) for c in coordinates]},
        )
