"""
Journey Planner Client - Search Panel

One search row per location, keyed by location id (never by position).

Row lifecycle:
    idle -> typing            keystroke (restarts the row's debounce timer)
    typing -> loading         timer fires with non-empty text
    typing -> idle            timer fires with blank text
    loading -> showing_results  response for the row's latest request
    loading -> idle           request failed
    showing_results -> selected  candidate picked
    any -> idle               outside click, or the row is removed

Each keystroke bumps the row's request counter. A response is applied only if
the counter still matches the one it was issued with, so an older response
that lands late is dropped instead of overwriting newer results. Rows are
independent of each other.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import httpx
from pydantic import ValidationError

from journey_planner.client.api import ApiError, JourneyApiClient
from journey_planner.client.notify import Toaster
from journey_planner.client.state import MapContext, MapState, new_location_id
from journey_planner.config import SEARCH_DEBOUNCE_SECONDS, generate_error_code, log
from journey_planner.models import Journey, Location, SearchResult


class RowState(str, Enum):
    IDLE = "idle"
    TYPING = "typing"
    LOADING = "loading"
    SHOWING_RESULTS = "showing_results"
    SELECTED = "selected"


@dataclass
class SearchRow:
    id: str
    query: str = ""
    state: RowState = RowState.IDLE
    request_seq: int = 0
    synced_name: str = ""  # location name the query was last copied from
    timer: Optional[asyncio.TimerHandle] = None

    @property
    def loading(self) -> bool:
        return self.state is RowState.LOADING


class SearchPanel:
    def __init__(
        self,
        context: MapContext,
        api: JourneyApiClient,
        toaster: Toaster,
        on_update_locations: Callable[[list[Location]], None],
        journey_id: str | None = None,
        navigate: Callable[[str], None] | None = None,
        debounce_seconds: float = SEARCH_DEBOUNCE_SECONDS,
    ):
        self.context = context
        self.api = api
        self.toaster = toaster
        self.on_update_locations = on_update_locations
        self.journey_id = journey_id
        self.navigate = navigate
        self.debounce_seconds = debounce_seconds

        self.rows: dict[str, SearchRow] = {}
        self.active_results: Optional[tuple[str, list[SearchResult]]] = None
        self.is_saving = False
        self._tasks: set[asyncio.Task] = set()

        self._sync_rows(context.locations)
        self._unsubscribe = context.subscribe(self._on_state_change)

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def row_ids(self) -> list[str]:
        """Row ids in location order."""
        return [loc.id for loc in self.context.locations]

    @property
    def is_only_row(self) -> bool:
        return len(self.context.locations) <= 1

    def results_for(self, row_id: str) -> Optional[list[SearchResult]]:
        """The dropdown items for this row, or None if its dropdown is closed."""
        if self.active_results and self.active_results[0] == row_id:
            return self.active_results[1]
        return None

    # -------------------------------------------------------------------------
    # Location list sync
    # -------------------------------------------------------------------------

    def _on_state_change(self, old: MapState, new: MapState) -> None:
        if old.locations != new.locations:
            self._sync_rows(new.locations)

    def _sync_rows(self, locations) -> None:
        ids = {loc.id for loc in locations}
        for row_id in list(self.rows):
            if row_id not in ids:
                self._drop_row(row_id)

        for loc in locations:
            row = self.rows.get(loc.id)
            if row is None:
                self.rows[loc.id] = SearchRow(id=loc.id, query=loc.name, synced_name=loc.name)
            elif row.synced_name != loc.name:
                row.query = loc.name
                row.synced_name = loc.name

    def _drop_row(self, row_id: str) -> None:
        row = self.rows.pop(row_id)
        self._cancel_timer(row)
        row.state = RowState.IDLE
        if self.active_results and self.active_results[0] == row_id:
            self.active_results = None

    # -------------------------------------------------------------------------
    # Typing and searching
    # -------------------------------------------------------------------------

    @staticmethod
    def _cancel_timer(row: SearchRow) -> None:
        if row.timer is not None:
            row.timer.cancel()
            row.timer = None

    def on_query_change(self, row_id: str, value: str) -> None:
        """Keystroke in a row. Must be called from the running event loop."""
        row = self.rows.get(row_id)
        if row is None:
            return
        row.query = value
        row.request_seq += 1
        row.state = RowState.TYPING
        self._cancel_timer(row)
        loop = asyncio.get_running_loop()
        row.timer = loop.call_later(self.debounce_seconds, self._fire, row_id, row.request_seq)

    def _fire(self, row_id: str, seq: int) -> None:
        row = self.rows.get(row_id)
        if row is None or row.request_seq != seq:
            return
        row.timer = None

        query = row.query
        if not query.strip():
            row.state = RowState.IDLE
            if self.active_results and self.active_results[0] == row_id:
                self.active_results = None
            return

        row.state = RowState.LOADING
        task = asyncio.ensure_future(self._perform_search(row_id, seq, query))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _perform_search(self, row_id: str, seq: int, query: str) -> None:
        error: Exception | None = None
        results: list[SearchResult] = []
        try:
            results = await self.api.search(query)
        except (ApiError, httpx.HTTPError, ValidationError, ValueError) as e:
            error = e

        row = self.rows.get(row_id)
        if row is None or row.request_seq != seq:
            log("DEBUG", "stale search response dropped", row_id=row_id, seq=seq)
            return

        if error is not None:
            code = generate_error_code()
            log("ERROR", "search request failed", row_id=row_id, query=query, error=str(error), error_code=code)
            row.state = RowState.IDLE
            return

        if self.active_results and self.active_results[0] != row_id:
            previous = self.rows.get(self.active_results[0])
            if previous is not None and previous.state is RowState.SHOWING_RESULTS:
                previous.state = RowState.IDLE
        self.active_results = (row_id, results)
        row.state = RowState.SHOWING_RESULTS

    async def wait_idle(self) -> None:
        """Wait until no row has a pending timer or an in-flight search."""
        while True:
            if self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
                continue
            if any(row.timer is not None for row in self.rows.values()):
                await asyncio.sleep(self.debounce_seconds / 4)
                continue
            return

    # -------------------------------------------------------------------------
    # Row actions
    # -------------------------------------------------------------------------

    def select(self, row_id: str, result: SearchResult) -> None:
        """Pick a candidate: overwrite that location and close the dropdown."""
        row = self.rows.get(row_id)
        if row is None:
            return
        name = result.name or result.display_name
        locations = [
            loc.model_copy(update={"lat": float(result.lat), "lon": float(result.lon), "name": name})
            if loc.id == row_id
            else loc
            for loc in self.context.locations
        ]
        self._cancel_timer(row)
        row.request_seq += 1
        row.query = name
        row.synced_name = name
        row.state = RowState.SELECTED
        self.active_results = None
        self.on_update_locations(locations)

    def click_outside(self) -> None:
        """
        A click anywhere outside the panel closes the open dropdown and
        abandons pending searches, so no dropdown opens afterwards.
        """
        for row in self.rows.values():
            if row.state in (RowState.TYPING, RowState.LOADING, RowState.SHOWING_RESULTS):
                self._cancel_timer(row)
                row.request_seq += 1
                row.state = RowState.IDLE
        self.active_results = None

    def add_row(self) -> str:
        """Append an empty location at 0/0. Returns its id."""
        location = Location(id=new_location_id(), name="", lat=0, lon=0)
        self.on_update_locations([*self.context.locations, location])
        return location.id

    def remove_row(self, row_id: str) -> None:
        """Remove a location; the last remaining one cannot be removed."""
        if self.is_only_row:
            return
        self.on_update_locations([loc for loc in self.context.locations if loc.id != row_id])

    # -------------------------------------------------------------------------
    # Save
    # -------------------------------------------------------------------------

    async def save(self) -> Optional[Journey]:
        """
        Existing journey: PATCH its locations.
        New journey: POST it, then navigate to its page.
        """
        locations = list(self.context.locations)
        if not locations:
            return None

        self.is_saving = True
        try:
            if self.journey_id:
                journey = await self.api.update_journey(self.journey_id, locations=locations)
            else:
                journey = await self.api.create_journey(locations)
        except (ApiError, httpx.HTTPError) as e:
            code = generate_error_code()
            log("ERROR", "save journey failed", journey_id=self.journey_id, error=str(e), error_code=code)
            self.toaster.error("Đã có lỗi xảy ra khi lưu.")
            return None
        finally:
            self.is_saving = False

        self.toaster.success("Lưu hành trình thành công!")
        if not self.journey_id and self.navigate is not None:
            self.navigate(f"/map/{journey.id}")
        return journey

    def close(self) -> None:
        """Stop listening to the context and abandon pending work."""
        self._unsubscribe()
        for row in self.rows.values():
            self._cancel_timer(row)
        for task in list(self._tasks):
            task.cancel()
