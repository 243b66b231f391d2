"""Supabase connection and query helpers for the cancellation tables."""

import threading
from datetime import datetime, timezone

from supabase import Client, create_client

from cancellation_flow.config import (
    CANCELLATIONS_TABLE, SUBSCRIPTIONS_TABLE, SUPABASE_SERVICE_KEY, SUPABASE_URL,
)

_client: Client | None = None
_client_lock = threading.Lock()


def get_client() -> Client:
    """Return the Supabase client singleton (thread-safe)."""
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                if not SUPABASE_URL or not SUPABASE_SERVICE_KEY:
                    raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set")
                _client = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
    return _client


# ---------------------------------------------------------------------------
# Generic helpers
# ---------------------------------------------------------------------------

def _table(name: str):
    """Return a table query builder."""
    return get_client().table(name)


def insert(table: str, data: dict) -> dict:
    """Insert a row and return it."""
    result = _table(table).insert(data).execute()
    return result.data[0] if result.data else {}


def update(table: str, data: dict, match: dict) -> list[dict]:
    """Update rows matching conditions. Returns the updated rows."""
    q = _table(table).update(data)
    for k, v in match.items():
        q = q.eq(k, v)
    result = q.execute()
    return result.data or []


def select(table: str, columns: str = "*", match: dict | None = None,
           limit: int | None = None) -> list[dict]:
    """Select rows with optional filtering."""
    q = _table(table).select(columns)
    if match:
        for k, v in match.items():
            q = q.eq(k, v)
    if limit:
        q = q.limit(limit)
    result = q.execute()
    return result.data or []


def select_one(table: str, columns: str = "*", match: dict | None = None) -> dict | None:
    """Select a single row."""
    rows = select(table, columns, match, limit=1)
    return rows[0] if rows else None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Cancellations
# ---------------------------------------------------------------------------

def get_cancellation(user_id: str, subscription_id: str) -> dict | None:
    """Get the cancellation row for an identity pair."""
    return select_one(CANCELLATIONS_TABLE, match={
        "user_id": user_id,
        "subscription_id": subscription_id,
    })


def insert_cancellation(user_id: str, subscription_id: str, variant: str) -> dict:
    """Create the cancellation row carrying the assigned variant.

    The table is unique on (user_id, subscription_id); a second insert for
    the same pair raises postgrest's APIError with code 23505.
    """
    return insert(CANCELLATIONS_TABLE, {
        "user_id": user_id,
        "subscription_id": subscription_id,
        "downsell_variant": variant,
        "created_at": _now(),
    })


def claim_cancellation_variant(user_id: str, subscription_id: str, variant: str) -> list[dict]:
    """Set the variant on an existing row only while it has none.

    Returns the updated rows; empty when another writer set it first.
    """
    result = (
        _table(CANCELLATIONS_TABLE)
        .update({"downsell_variant": variant})
        .eq("user_id", user_id)
        .eq("subscription_id", subscription_id)
        .is_("downsell_variant", "null")
        .execute()
    )
    return result.data or []


def update_cancellation(user_id: str, subscription_id: str, data: dict) -> list[dict]:
    """Update the cancellation row for an identity pair."""
    return update(CANCELLATIONS_TABLE, data, {
        "user_id": user_id,
        "subscription_id": subscription_id,
    })


# ---------------------------------------------------------------------------
# Subscriptions
# ---------------------------------------------------------------------------

SUBSCRIPTION_STATUSES = ("active", "pending_cancellation", "cancelled")


def set_subscription_status(subscription_id: str, status: str) -> list[dict]:
    """Set a subscription's status and bump updated_at."""
    if status not in SUBSCRIPTION_STATUSES:
        raise ValueError(f"Unknown subscription status: {status}")
    return update(SUBSCRIPTIONS_TABLE, {
        "status": status,
        "updated_at": _now(),
    }, {"id": subscription_id})
