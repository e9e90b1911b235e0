"""
Single source of truth for all Pydantic models (requests, responses, shared types).
The map client in journey_planner.client uses the same definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from journey_planner.config import DEFAULT_JOURNEY_NAME


# -----------------------------------------------------------------------------
# Shared Types
# -----------------------------------------------------------------------------


class LocationProperties(BaseModel):
    notes: Optional[str] = None
    links: list[str] = []


class Location(BaseModel):
    id: str = Field(..., min_length=1, description="Client-generated, unique within a journey")
    name: str = ""
    lat: float
    lon: float
    properties: Optional[LocationProperties] = None

    def is_unset(self) -> bool:
        """True for the 0/0 placeholder a freshly added search row starts with."""
        return self.lat == 0 and self.lon == 0


class SearchResult(BaseModel):
    """Geocoded candidate shown in a search row's dropdown. Coordinates stay as text."""
    name: str
    display_name: str
    lat: str
    lon: str


class ClickedPlace(BaseModel):
    """A place the user clicked on the map, waiting to be added as a Location."""
    name: str
    address: Optional[str] = None
    lat: float
    lon: float
    type: Optional[str] = None


# -----------------------------------------------------------------------------
# Request Models
# -----------------------------------------------------------------------------


class CreateJourneyRequest(BaseModel):
    locations: list[Location] = Field(..., min_length=1)


class UpdateJourneyRequest(BaseModel):
    """Partial update. A field left as None is not written."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    locations: Optional[list[Location]] = Field(None, min_length=1)


class DirectionsRequest(BaseModel):
    coordinates: list[tuple[float, float]] = Field(..., min_length=2, description="[lon, lat] pairs")


# -----------------------------------------------------------------------------
# Journey Response Models
# -----------------------------------------------------------------------------


class Journey(BaseModel):
    id: str
    owner_id: str
    name: str = DEFAULT_JOURNEY_NAME
    locations: list[Location] = []
    created_at: datetime
    updated_at: datetime
