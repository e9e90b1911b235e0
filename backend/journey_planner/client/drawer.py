"""
Journey Planner Client - Journey Drawer

Side drawer listing the caller's saved journeys, with inline rename.
"""

from dataclasses import dataclass
from typing import Callable

import httpx

from journey_planner.client.api import ApiError, JourneyApiClient
from journey_planner.client.notify import Toaster
from journey_planner.config import log
from journey_planner.models import Journey


@dataclass(frozen=True)
class JourneyCard:
    id: str
    name: str
    created: str  # dd/MM/yyyy
    location_count: int


def journey_card(journey: Journey) -> JourneyCard:
    return JourneyCard(
        id=journey.id,
        name=journey.name,
        created=journey.created_at.strftime("%d/%m/%Y"),
        location_count=len(journey.locations),
    )


class JourneyDrawer:
    def __init__(self, api: JourneyApiClient, toaster: Toaster, navigate: Callable[[str], None]):
        self.api = api
        self.toaster = toaster
        self.navigate = navigate
        self.is_open = False
        self.is_loading = False
        self.journeys: list[Journey] = []

    @property
    def cards(self) -> list[JourneyCard]:
        return [journey_card(j) for j in self.journeys]

    async def open(self) -> None:
        """Open the drawer and (re)load the list."""
        self.is_open = True
        await self.fetch_journeys()

    def close(self) -> None:
        self.is_open = False

    async def fetch_journeys(self) -> None:
        self.is_loading = True
        try:
            self.journeys = await self.api.list_journeys()
        except (ApiError, httpx.HTTPError) as e:
            log("ERROR", "fetch journeys failed", error=str(e))
            self.toaster.error("Không thể tải danh sách hành trình")
        finally:
            self.is_loading = False

    async def rename(self, journey_id: str, new_name: str) -> None:
        """
        PATCH the journey's name. A name equal to the current one is a no-op.
        Re-raises on failure so the edit form stays open.
        """
        current = next((j for j in self.journeys if j.id == journey_id), None)
        if current is not None and current.name == new_name:
            return

        try:
            await self.api.update_journey(journey_id, name=new_name)
        except (ApiError, httpx.HTTPError) as e:
            log("ERROR", "rename journey failed", journey_id=journey_id, error=str(e))
            self.toaster.error("Lỗi khi cập nhật tên")
            raise

        self.journeys = [
            j.model_copy(update={"name": new_name}) if j.id == journey_id else j
            for j in self.journeys
        ]
        self.toaster.success("Đã cập nhật tên hành trình")

    def select(self, journey_id: str) -> None:
        self.navigate(f"/map/{journey_id}")
        self.close()
