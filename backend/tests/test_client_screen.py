"""
Journey Planner Client - Map Screen and Journey Drawer Tests
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from journey_planner.client.api import ApiError
from journey_planner.client.drawer import JourneyDrawer, journey_card
from journey_planner.client.notify import Toaster
from journey_planner.client.screen import MapScreen, update_locations
from journey_planner.client.state import MapContext
from journey_planner.config import DEFAULT_CENTER
from journey_planner.models import ClickedPlace, Journey, Location


def journey(journey_id: str = "j-1", name: str = "Đà Lạt", locations=None, created_at=None) -> Journey:
    ts = created_at or datetime(2026, 3, 7, 9, 30, tzinfo=timezone.utc)
    return Journey(
        id=journey_id,
        owner_id="u",
        name=name,
        locations=locations if locations is not None else [Location(id="a", name="Hồ Xuân Hương", lat=11.94, lon=108.44)],
        created_at=ts,
        updated_at=ts,
    )


@pytest.fixture
def navigations():
    return []


# -----------------------------------------------------------------------------
# MapScreen.load
# -----------------------------------------------------------------------------


class TestLoad:
    @pytest.mark.asyncio
    async def test_no_journey_id_resets_map(self, navigations):
        ctx = MapContext()
        ctx.set_journey_name("leftover")
        ctx.set_locations([Location(id="x", name="X", lat=1, lon=2)])
        api = AsyncMock()
        screen = MapScreen(api, navigate=navigations.append, context=ctx)

        await screen.load()
        screen.close()

        assert ctx.state.journey_name == ""
        assert [l.id for l in ctx.locations] == ["initial"]
        assert ctx.state.center == DEFAULT_CENTER
        api.get_journey.assert_not_called()

    @pytest.mark.asyncio
    async def test_loads_journey_and_centers_on_first_stop(self, navigations):
        stops = [
            Location(id="a", name="Hồ Xuân Hương", lat=11.94, lon=108.44),
            Location(id="b", name="Ga Đà Lạt", lat=11.942, lon=108.455),
        ]
        api = AsyncMock()
        api.get_journey.return_value = journey(locations=stops)
        screen = MapScreen(api, navigate=navigations.append, journey_id="j-1")
        screen.context.set_clicked_place(ClickedPlace(name="Old", lat=1, lon=1))

        await screen.load()
        screen.close()

        api.get_journey.assert_awaited_once_with("j-1")
        assert screen.context.state.journey_name == "Đà Lạt"
        assert [l.id for l in screen.context.locations] == ["a", "b"]
        assert screen.context.state.center == (11.94, 108.44)
        assert screen.context.state.clicked_place is None
        assert screen.panel.rows["b"].query == "Ga Đà Lạt"

    @pytest.mark.asyncio
    async def test_unset_first_stop_keeps_center(self, navigations):
        api = AsyncMock()
        api.get_journey.return_value = journey(locations=[Location(id="a", name="", lat=0, lon=0)])
        screen = MapScreen(api, navigate=navigations.append, journey_id="j-1")

        await screen.load()
        screen.close()

        assert screen.context.state.center == DEFAULT_CENTER
        assert [l.id for l in screen.context.locations] == ["a"]

    @pytest.mark.asyncio
    async def test_failure_keeps_state_and_toasts(self, navigations):
        api = AsyncMock()
        api.get_journey.side_effect = ApiError(404, {"detail": "Journey not found"})
        screen = MapScreen(api, navigate=navigations.append, journey_id="j-1")

        await screen.load()
        screen.close()

        assert [l.id for l in screen.context.locations] == ["initial"]
        assert screen.toaster.toasts[-1].level == "error"


class TestUpdateLocations:
    def test_centers_on_last_location(self):
        ctx = MapContext()

        update_locations(ctx, [Location(id="a", lat=10, lon=106), Location(id="b", lat=16.0, lon=108.2)])

        assert ctx.state.center == (16.0, 108.2)

    def test_unset_last_location_keeps_center(self):
        ctx = MapContext()

        update_locations(ctx, [Location(id="a", lat=16.0, lon=108.2), Location(id="b", lat=0, lon=0)])

        assert ctx.state.center == DEFAULT_CENTER


# -----------------------------------------------------------------------------
# Toaster
# -----------------------------------------------------------------------------


class TestToaster:
    def test_success_and_error_are_recorded_and_logged(self, capsys):
        toaster = Toaster()

        toaster.success("Lưu hành trình thành công!")
        toaster.error("Đã có lỗi xảy ra khi lưu.")

        assert [(t.level, t.message) for t in toaster.toasts] == [
            ("success", "Lưu hành trình thành công!"),
            ("error", "Đã có lỗi xảy ra khi lưu."),
        ]
        out = capsys.readouterr().out
        assert "[INFO] toast shown | kind=success" in out
        assert "[WARN] toast shown | kind=error" in out

    def test_keeps_only_the_most_recent(self):
        toaster = Toaster(max_toasts=2)

        for i in range(3):
            toaster.error(f"e{i}")

        assert [t.message for t in toaster.toasts] == ["e1", "e2"]


# -----------------------------------------------------------------------------
# JourneyDrawer
# -----------------------------------------------------------------------------


class TestJourneyDrawer:
    def test_card_formats_date_and_count(self):
        card = journey_card(journey(created_at=datetime(2026, 3, 7, tzinfo=timezone.utc)))

        assert card.created == "07/03/2026"
        assert card.location_count == 1

    @pytest.mark.asyncio
    async def test_open_fetches_list(self, navigations):
        api = AsyncMock()
        api.list_journeys.return_value = [journey("j-2", "B"), journey("j-1", "A")]
        drawer = JourneyDrawer(api, Toaster(), navigations.append)

        await drawer.open()

        assert drawer.is_open
        assert not drawer.is_loading
        assert [c.name for c in drawer.cards] == ["B", "A"]

    @pytest.mark.asyncio
    async def test_fetch_failure_toasts(self, navigations):
        api = AsyncMock()
        api.list_journeys.side_effect = ApiError(500, {"detail": "Internal Server Error"})
        toaster = Toaster()
        drawer = JourneyDrawer(api, toaster, navigations.append)

        await drawer.open()

        assert drawer.journeys == []
        assert toaster.toasts[-1].message == "Không thể tải danh sách hành trình"

    @pytest.mark.asyncio
    async def test_rename_updates_entry(self, navigations):
        api = AsyncMock()
        api.list_journeys.return_value = [journey("j-1", "Old")]
        toaster = Toaster()
        drawer = JourneyDrawer(api, toaster, navigations.append)
        await drawer.open()

        await drawer.rename("j-1", "New")

        api.update_journey.assert_awaited_once_with("j-1", name="New")
        assert drawer.journeys[0].name == "New"
        assert toaster.toasts[-1].level == "success"

    @pytest.mark.asyncio
    async def test_rename_to_same_name_is_noop(self, navigations):
        api = AsyncMock()
        api.list_journeys.return_value = [journey("j-1", "Same")]
        drawer = JourneyDrawer(api, Toaster(), navigations.append)
        await drawer.open()

        await drawer.rename("j-1", "Same")

        api.update_journey.assert_not_called()

    @pytest.mark.asyncio
    async def test_rename_failure_reraises(self, navigations):
        api = AsyncMock()
        api.list_journeys.return_value = [journey("j-1", "Old")]
        api.update_journey.side_effect = ApiError(400, {"detail": "Invalid journey update"})
        toaster = Toaster()
        drawer = JourneyDrawer(api, toaster, navigations.append)
        await drawer.open()

        with pytest.raises(ApiError):
            await drawer.rename("j-1", "")

        assert drawer.journeys[0].name == "Old"
        assert toaster.toasts[-1].message == "Lỗi khi cập nhật tên"

    def test_select_navigates_and_closes(self, navigations):
        drawer = JourneyDrawer(AsyncMock(), Toaster(), navigations.append)
        drawer.is_open = True

        drawer.select("j-9")

        assert navigations == ["/map/j-9"]
        assert not drawer.is_open
