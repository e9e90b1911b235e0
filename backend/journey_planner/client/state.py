"""
Journey Planner Client - Map State

MapState is an immutable snapshot of everything the map screen edits.
Mutators are plain functions from one snapshot to the next; MapContext owns
the current snapshot and is handed to every component that needs it.
"""

import secrets
import string
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Optional

from journey_planner.config import (
    DEFAULT_CENTER,
    DEFAULT_LOCATION_ID,
    DEFAULT_LOCATION_NAME,
)
from journey_planner.models import ClickedPlace, Location, LocationProperties

Center = tuple[float, float]  # (lat, lon)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_location_id() -> str:
    """Random 9-character base36 id, unique enough within one journey."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))


def initial_location() -> Location:
    return Location(
        id=DEFAULT_LOCATION_ID,
        name=DEFAULT_LOCATION_NAME,
        lat=DEFAULT_CENTER[0],
        lon=DEFAULT_CENTER[1],
    )


@dataclass(frozen=True)
class MapState:
    locations: tuple[Location, ...] = field(default_factory=lambda: (initial_location(),))
    center: Center = DEFAULT_CENTER
    journey_name: str = ""
    clicked_place: Optional[ClickedPlace] = None


# -----------------------------------------------------------------------------
# Pure mutators
# -----------------------------------------------------------------------------


def set_locations(state: MapState, locations: Iterable[Location]) -> MapState:
    return replace(state, locations=tuple(locations))


def set_center(state: MapState, center: Center) -> MapState:
    return replace(state, center=(float(center[0]), float(center[1])))


def set_journey_name(state: MapState, name: str) -> MapState:
    return replace(state, journey_name=name)


def set_clicked_place(state: MapState, place: Optional[ClickedPlace]) -> MapState:
    return replace(state, clicked_place=place)


def update_location_properties(state: MapState, location_id: str, properties: LocationProperties) -> MapState:
    return replace(
        state,
        locations=tuple(
            loc.model_copy(update={"properties": properties}) if loc.id == location_id else loc
            for loc in state.locations
        ),
    )


def reset_map(state: MapState) -> MapState:
    return MapState()


# -----------------------------------------------------------------------------
# Container
# -----------------------------------------------------------------------------


Listener = Callable[[MapState, MapState], None]


class MapContext:
    """
    Owns the current MapState. Components read `state` and call the mutator
    methods; subscribers get (old, new) after every change.
    """

    def __init__(self, state: MapState | None = None):
        self._state = state or MapState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> MapState:
        return self._state

    @property
    def locations(self) -> tuple[Location, ...]:
        return self._state.locations

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, new_state: MapState) -> None:
        old_state = self._state
        if new_state == old_state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            listener(old_state, new_state)

    def set_locations(self, locations: Iterable[Location]) -> None:
        self._commit(set_locations(self._state, locations))

    def set_center(self, center: Center) -> None:
        self._commit(set_center(self._state, center))

    def set_journey_name(self, name: str) -> None:
        self._commit(set_journey_name(self._state, name))

    def set_clicked_place(self, place: Optional[ClickedPlace]) -> None:
        self._commit(set_clicked_place(self._state, place))

    def update_location_properties(self, location_id: str, properties: LocationProperties) -> None:
        self._commit(update_location_properties(self._state, location_id, properties))

    def reset_map(self) -> None:
        self._commit(reset_map(self._state))
