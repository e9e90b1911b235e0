"""
Journey Planner Client - Map Screen

Wires one MapContext into the search panel, map view, place details card and
journey drawer, and loads a saved journey into it.

    screen = MapScreen(api, navigate=router.push, journey_id="...")
    await screen.load()
"""

from typing import Callable

import httpx

from journey_planner.client.api import ApiError, JourneyApiClient
from journey_planner.client.drawer import JourneyDrawer
from journey_planner.client.map_view import MapView
from journey_planner.client.notify import Toaster
from journey_planner.client.place_details import PlaceDetails
from journey_planner.client.search_panel import SearchPanel
from journey_planner.client.state import MapContext
from journey_planner.config import SEARCH_DEBOUNCE_SECONDS, generate_error_code, log
from journey_planner.models import Location


def update_locations(context: MapContext, locations: list[Location]) -> None:
    """Replace the list and fly to the last location unless it is still at 0/0."""
    context.set_locations(locations)
    if locations and not locations[-1].is_unset():
        last = locations[-1]
        context.set_center((last.lat, last.lon))


class MapScreen:
    def __init__(
        self,
        api: JourneyApiClient,
        navigate: Callable[[str], None],
        journey_id: str | None = None,
        context: MapContext | None = None,
        toaster: Toaster | None = None,
        debounce_seconds: float = SEARCH_DEBOUNCE_SECONDS,
    ):
        self.api = api
        self.journey_id = journey_id
        self.context = context or MapContext()
        self.toaster = toaster or Toaster()

        self.panel = SearchPanel(
            self.context,
            api,
            self.toaster,
            on_update_locations=lambda locs: update_locations(self.context, locs),
            journey_id=journey_id,
            navigate=navigate,
            debounce_seconds=debounce_seconds,
        )
        self.map_view = MapView(self.context, api)
        self.place_details = PlaceDetails(self.context)
        self.drawer = JourneyDrawer(api, self.toaster, navigate)

    async def load(self) -> None:
        """
        No journey id: start from a fresh map.
        Otherwise replace the state with the saved journey and center on its first stop.
        """
        if not self.journey_id:
            self.context.reset_map()
            return

        try:
            journey = await self.api.get_journey(self.journey_id)
        except (ApiError, httpx.HTTPError) as e:
            code = generate_error_code()
            log("ERROR", "load journey failed", journey_id=self.journey_id, error=str(e), error_code=code)
            self.toaster.error("Không thể tải hành trình")
            return

        if journey.name:
            self.context.set_journey_name(journey.name)
        if journey.locations:
            self.context.set_locations(journey.locations)
            first = journey.locations[0]
            if not first.is_unset():
                self.context.set_center((first.lat, first.lon))
        self.context.set_clicked_place(None)
        log("INFO", "journey loaded", journey_id=self.journey_id, locations=len(journey.locations))

    def close(self) -> None:
        self.panel.close()
