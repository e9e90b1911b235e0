"""
Journey Planner Client - Place Details

Card for the place last clicked on the map: add it to the journey or dismiss it.
"""

from typing import Optional
from urllib.parse import urlencode

from journey_planner.client.state import MapContext, new_location_id
from journey_planner.models import ClickedPlace, Location

GOOGLE_MAPS_SEARCH_URL = "https://www.google.com/maps/search/"


class PlaceDetails:
    def __init__(self, context: MapContext):
        self.context = context

    @property
    def place(self) -> Optional[ClickedPlace]:
        return self.context.state.clicked_place

    @property
    def category_label(self) -> Optional[str]:
        if self.place is None or not self.place.type:
            return None
        return self.place.type.replace("_", " ")

    @property
    def google_maps_url(self) -> Optional[str]:
        if self.place is None:
            return None
        query = urlencode({"api": 1, "query": f"{self.place.lat},{self.place.lon}"})
        return f"{GOOGLE_MAPS_SEARCH_URL}?{query}"

    def add_to_journey(self) -> Optional[Location]:
        place = self.place
        if place is None:
            return None
        location = Location(id=new_location_id(), name=place.name, lat=place.lat, lon=place.lon)
        self.context.set_locations([*self.context.locations, location])
        self.context.set_clicked_place(None)
        return location

    def dismiss(self) -> None:
        self.context.set_clicked_place(None)
