"""
Journey Planner Client - Map View

Markers, popups and the route line derived from the map state.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from journey_planner.client.api import ApiError, JourneyApiClient
from journey_planner.client.state import MapContext
from journey_planner.config import generate_error_code, log
from journey_planner.models import ClickedPlace, LocationProperties


@dataclass(frozen=True)
class Marker:
    id: str
    position: tuple[float, float]  # (lat, lon)
    label: str
    properties: Optional[LocationProperties] = None


class MapView:
    def __init__(self, context: MapContext, api: JourneyApiClient):
        self.context = context
        self.api = api
        self.open_popup_ids: set[str] = set()
        self.route: Optional[dict] = None

    @property
    def markers(self) -> list[Marker]:
        """One marker per location that has real coordinates."""
        return [
            Marker(id=loc.id, position=(loc.lat, loc.lon), label=loc.name, properties=loc.properties)
            for loc in self.context.locations
            if not loc.is_unset()
        ]

    # -------------------------------------------------------------------------
    # Popups
    # -------------------------------------------------------------------------

    def click_marker(self, marker_id: str) -> None:
        """Toggle this marker's popup. Several popups may be open at once."""
        if marker_id in self.open_popup_ids:
            self.open_popup_ids.discard(marker_id)
        else:
            self.open_popup_ids.add(marker_id)

    def close_popup(self, marker_id: str) -> None:
        self.open_popup_ids.discard(marker_id)

    def click_background(self) -> None:
        self.open_popup_ids = set()

    def update_properties(self, location_id: str, notes: str | None, links: list[str]) -> None:
        """Save the notes/links edited in a marker's popup."""
        cleaned = [link.strip() for link in links if link.strip()]
        self.context.update_location_properties(
            location_id,
            LocationProperties(notes=notes or None, links=cleaned),
        )

    def click_place(self, place: ClickedPlace) -> None:
        self.context.set_clicked_place(place)

    # -------------------------------------------------------------------------
    # Route
    # -------------------------------------------------------------------------

    async def refresh_route(self) -> Optional[dict]:
        """Fetch the route through the current markers; None with fewer than two."""
        coordinates = [(m.position[1], m.position[0]) for m in self.markers]
        if len(coordinates) < 2:
            self.route = None
            return None

        try:
            self.route = await self.api.get_directions(coordinates)
        except (ApiError, httpx.HTTPError) as e:
            code = generate_error_code()
            log("ERROR", "route fetch failed", points=len(coordinates), error=str(e), error_code=code)
            self.route = None
        return self.route
