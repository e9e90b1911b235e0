"""
Journey Planner Backend - Central Configuration

All environment variables and map defaults live here.
Import `settings`, `log`, and `generate_error_code` from this module.
Do not read `os.environ` anywhere else.
"""

import uuid
from datetime import datetime, timezone

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All environment variables. Loaded from .env or the process environment."""

    # Database
    supabase_url: str
    supabase_service_key: str

    # Auth (Supabase Auth issues HS256 JWTs signed with the project secret)
    auth_jwt_secret: str
    auth_jwt_algorithm: str = "HS256"

    # External map services
    open_route_service_key: str = ""  # Required by POST /api/directions
    maptiler_api_key: str = ""        # Required by GET /api/search

    # App
    environment: str = "development"  # "development" | "production"
    cors_origins: str = "http://localhost:3000"  # Comma-separated for multiple origins
    search_rate_limit: str = "60/minute"
    directions_rate_limit: str = "30/minute"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton - import this everywhere
settings = Settings()


# ──────────────────────────────────────────────────────
# Logging Utilities
# ──────────────────────────────────────────────────────

def generate_error_code() -> str:
    """Generate a short, user-friendly error reference code.

    Format: 'JP-' followed by 6 uppercase hex characters.
    Example: 'JP-3F8A2C'

    The same code is logged on the backend and can be quoted by the user,
    so the team can grep logs for it.
    """
    return f"JP-{uuid.uuid4().hex[:6].upper()}"


def log(level: str, message: str, **context) -> None:
    """Structured print-based logger.

    Every log line follows the format:
        [ISO_TIMESTAMP] [LEVEL] message | key1=value1 key2=value2

    Args:
        level: One of "DEBUG", "INFO", "WARN", "ERROR".
        message: Human-readable description of what happened.
        **context: Arbitrary key-value pairs. Include journey_id when available.

    Usage:
        log("INFO", "journey created", journey_id="abc-123", locations=3)
        log("ERROR", "db write failed", operation="create_journey",
            error_code="JP-3F8A2C", error=str(e))
    """
    ts = datetime.now(timezone.utc).isoformat()
    ctx = " ".join(f"{k}={v}" for k, v in context.items())
    print(f"[{ts}] [{level}] {message} | {ctx}", flush=True)


# ──────────────────────────────────────────────────────
# Map Defaults
# ──────────────────────────────────────────────────────

DEFAULT_JOURNEY_NAME = "Vi vu"

# (lat, lon) of Ho Chi Minh City
DEFAULT_CENTER: tuple[float, float] = (10.762622, 106.660172)
DEFAULT_LOCATION_ID = "initial"
DEFAULT_LOCATION_NAME = "Thành phố Hồ chí Minh"

SEARCH_DEBOUNCE_SECONDS = 1.0

MAPTILER_GEOCODING_URL = "https://api.maptiler.com/geocoding"
OPEN_ROUTE_SERVICE_URL = "https://api.openrouteservice.org/v2/directions/cycling-regular/geojson"
