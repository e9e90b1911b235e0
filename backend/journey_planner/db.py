"""
Journey Planner Backend - Database Operations

All Supabase/PostgreSQL operations on the journeys table.
Every query is filtered by owner_id as well as id; a journey that belongs to
somebody else behaves exactly like one that does not exist.
"""

from datetime import datetime, timezone
from typing import Optional

from supabase import Client, create_client

from journey_planner.config import DEFAULT_JOURNEY_NAME, generate_error_code, log, settings

# ─────────────────────────────────────────────────────────────────────────────
# Supabase Client (singleton)
# ─────────────────────────────────────────────────────────────────────────────

_supabase: Client | None = None

JOURNEYS_TABLE = "journeys"


def get_supabase() -> Client:
    """Return the Supabase client singleton. Creates it on first call."""
    global _supabase
    if _supabase is None:
        _supabase = create_client(settings.supabase_url, settings.supabase_service_key)
    return _supabase


class DatabaseError(Exception):
    """A Supabase call failed. Carries the error code that was logged."""

    def __init__(self, operation: str, error_code: str):
        super().__init__(f"{operation} failed ({error_code})")
        self.operation = operation
        self.error_code = error_code


def _fail(operation: str, error: Exception, **context) -> DatabaseError:
    code = generate_error_code()
    log("ERROR", "db operation failed", operation=operation, error=str(error), error_code=code, **context)
    return DatabaseError(operation, code)


def _first_row(data) -> Optional[dict]:
    if not data:
        return None
    row = data[0] if isinstance(data, list) else data
    return dict(row)


# ─────────────────────────────────────────────────────────────────────────────
# Journeys
# ─────────────────────────────────────────────────────────────────────────────


async def create_journey(owner_id: str, locations: list[dict], name: str = DEFAULT_JOURNEY_NAME) -> dict:
    """
    Insert a new journey owned by owner_id.
    Returns the stored row (id and timestamps filled in by the database).
    """
    try:
        sb = get_supabase()
        data = {
            "owner_id": owner_id,
            "name": name,
            "locations": locations,
        }
        response = sb.table(JOURNEYS_TABLE).insert(data).execute()
        row = _first_row(response.data)
    except Exception as e:
        raise _fail("create_journey", e, owner_id=owner_id) from e

    if row is None:
        raise _fail("create_journey", RuntimeError("insert returned no row"), owner_id=owner_id)
    log("INFO", "journey created", journey_id=row.get("id"), owner_id=owner_id, locations=len(locations))
    return row


async def list_journeys(owner_id: str) -> list[dict]:
    """List the owner's journeys, newest first."""
    try:
        sb = get_supabase()
        response = (
            sb.table(JOURNEYS_TABLE)
            .select("*")
            .eq("owner_id", owner_id)
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        raise _fail("list_journeys", e, owner_id=owner_id) from e
    return [dict(j) for j in (response.data or [])]


async def get_journey(journey_id: str, owner_id: str) -> Optional[dict]:
    """
    Get one journey by id AND owner.
    Returns None when no row matches either condition.
    """
    try:
        sb = get_supabase()
        response = (
            sb.table(JOURNEYS_TABLE)
            .select("*")
            .eq("id", journey_id)
            .eq("owner_id", owner_id)
            .maybe_single()
            .execute()
        )
    except Exception as e:
        raise _fail("get_journey", e, journey_id=journey_id) from e
    # maybe_single().execute() returns None when no rows match in supabase-py v2
    if response is None:
        return None
    return _first_row(response.data)


async def update_journey(
    journey_id: str,
    owner_id: str,
    name: str | None = None,
    locations: list[dict] | None = None,
) -> Optional[dict]:
    """
    Patch a journey. Only the fields that are not None are written.
    Returns the updated row, or None if id+owner matched nothing.
    """
    data: dict = {"updated_at": datetime.now(timezone.utc).isoformat()}
    if name is not None:
        data["name"] = name
    if locations is not None:
        data["locations"] = locations

    try:
        sb = get_supabase()
        response = (
            sb.table(JOURNEYS_TABLE)
            .update(data)
            .eq("id", journey_id)
            .eq("owner_id", owner_id)
            .execute()
        )
    except Exception as e:
        raise _fail("update_journey", e, journey_id=journey_id) from e

    row = _first_row(response.data)
    if row is not None:
        log("INFO", "journey updated", journey_id=journey_id, fields=",".join(k for k in data if k != "updated_at"))
    return row
