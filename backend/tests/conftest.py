"""
Journey Planner Backend - Shared Test Fixtures

Provides mocked versions of external services (database, auth tokens)
for deterministic, fast unit tests.
"""

import os
import sys
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
from unittest.mock import AsyncMock

import jwt
import pytest
from httpx import ASGITransport, AsyncClient

# Ensure the package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))


# -----------------------------------------------------------------------------
# Environment Setup (before importing app modules)
# -----------------------------------------------------------------------------

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-supabase-key")
os.environ.setdefault("AUTH_JWT_SECRET", "test-jwt-secret-with-enough-length-32b")
os.environ.setdefault("OPEN_ROUTE_SERVICE_KEY", "test-ors-key")
os.environ.setdefault("MAPTILER_API_KEY", "test-maptiler-key")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:3000")


USER_A = "11111111-1111-1111-1111-111111111111"
USER_B = "22222222-2222-2222-2222-222222222222"


# -----------------------------------------------------------------------------
# Auth Fixtures
# -----------------------------------------------------------------------------


def make_token(user_id: str, secret: str | None = None, expires_in: int = 3600) -> str:
    """Sign a Supabase-style access token for user_id."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "aud": "authenticated",
        "iat": now,
        "exp": now + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, secret or os.environ["AUTH_JWT_SECRET"], algorithm="HS256")


@pytest.fixture
def auth_headers() -> dict:
    """Authorization headers for USER_A."""
    return {"Authorization": f"Bearer {make_token(USER_A)}"}


@pytest.fixture
def other_auth_headers() -> dict:
    """Authorization headers for USER_B."""
    return {"Authorization": f"Bearer {make_token(USER_B)}"}


# -----------------------------------------------------------------------------
# Mock Data Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def sample_locations() -> list[dict]:
    return [
        {"id": "a", "name": "Chợ Bến Thành", "lat": 10.7725, "lon": 106.698},
        {
            "id": "b",
            "name": "Nhà thờ Đức Bà",
            "lat": 10.7798,
            "lon": 106.6990,
            "properties": {"notes": "Mass at 9am", "links": ["https://example.com/cathedral"]},
        },
    ]


@pytest.fixture
def maptiler_response() -> dict:
    """Trimmed MapTiler geocoding response."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "text": "Ben Thanh Market",
                "text_vi": "Chợ Bến Thành",
                "place_name": "Chợ Bến Thành, Quận 1, Thành phố Hồ Chí Minh, Việt Nam",
                "center": [106.698, 10.7725],
            },
            {
                "text": "Ben Thanh Station",
                "place_name": "Ben Thanh Station, District 1, Ho Chi Minh City, Vietnam",
                "center": [106.6977, 10.7713],
            },
        ],
    }


# -----------------------------------------------------------------------------
# Database Mocking Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def mock_db(monkeypatch):
    """
    Mock all journey database operations with in-memory storage.

    Returns the storage dict for inspection: {"journeys": {id: row}}.
    """
    storage: dict = {"journeys": {}}
    clock = {"now": datetime(2026, 1, 1, tzinfo=timezone.utc)}

    def tick() -> str:
        clock["now"] += timedelta(minutes=1)
        return clock["now"].isoformat()

    async def mock_create_journey(owner_id: str, locations: list[dict], name: str = "Vi vu") -> dict:
        journey_id = str(uuid.uuid4())
        ts = tick()
        row = {
            "id": journey_id,
            "owner_id": owner_id,
            "name": name,
            "locations": locations,
            "created_at": ts,
            "updated_at": ts,
        }
        storage["journeys"][journey_id] = row
        return dict(row)

    async def mock_list_journeys(owner_id: str) -> list[dict]:
        rows = [dict(j) for j in storage["journeys"].values() if j["owner_id"] == owner_id]
        return sorted(rows, key=lambda j: j["created_at"], reverse=True)

    async def mock_get_journey(journey_id: str, owner_id: str) -> Optional[dict]:
        row = storage["journeys"].get(journey_id)
        if row is None or row["owner_id"] != owner_id:
            return None
        return dict(row)

    async def mock_update_journey(
        journey_id: str,
        owner_id: str,
        name: str | None = None,
        locations: list[dict] | None = None,
    ) -> Optional[dict]:
        row = storage["journeys"].get(journey_id)
        if row is None or row["owner_id"] != owner_id:
            return None
        if name is not None:
            row["name"] = name
        if locations is not None:
            row["locations"] = locations
        row["updated_at"] = tick()
        return dict(row)

    monkeypatch.setattr("journey_planner.db.create_journey", AsyncMock(side_effect=mock_create_journey))
    monkeypatch.setattr("journey_planner.db.list_journeys", AsyncMock(side_effect=mock_list_journeys))
    monkeypatch.setattr("journey_planner.db.get_journey", AsyncMock(side_effect=mock_get_journey))
    monkeypatch.setattr("journey_planner.db.update_journey", AsyncMock(side_effect=mock_update_journey))

    return storage


@pytest.fixture
def seed_journey(mock_db):
    """Insert a journey directly into the mock store. Returns its row."""
    def _seed(owner_id: str, locations: list[dict], name: str = "Vi vu", created_at: str | None = None) -> dict:
        journey_id = str(uuid.uuid4())
        ts = created_at or datetime(2025, 6, 1, tzinfo=timezone.utc).isoformat()
        row = {
            "id": journey_id,
            "owner_id": owner_id,
            "name": name,
            "locations": locations,
            "created_at": ts,
            "updated_at": ts,
        }
        mock_db["journeys"][journey_id] = row
        return dict(row)

    return _seed


# -----------------------------------------------------------------------------
# HTTP Client Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
async def client():
    """Async HTTP client for testing FastAPI endpoints."""
    from journey_planner.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def app():
    """Get the FastAPI app instance."""
    from journey_planner.main import app
    return app


# -----------------------------------------------------------------------------
# Rate Limiter Reset Fixture
# -----------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Start every test with empty per-IP counters."""
    from journey_planner.limiter import limiter
    limiter.reset()
    yield
    limiter.reset()
