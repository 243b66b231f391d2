"""Variant assignment: assign-once A/B bucket per (user, subscription).

The variant lives on the cancellation row, which is unique on
(user_id, subscription_id). First request draws a variant and inserts the
row; every later request reads it back. Two concurrent first requests may
both try to insert. The loser gets a duplicate-key error and re-reads the
winner's row, so all callers converge on the first persisted variant. A row
that exists without a variant is claimed with an update that only matches
while the column is still null.
"""

import logging
import secrets
from enum import Enum

from postgrest.exceptions import APIError

from cancellation_flow import supabase_client as db
from cancellation_flow.errors import AssignmentStorageError, InvalidIdentity

logger = logging.getLogger(__name__)

# Postgres unique_violation
_UNIQUE_VIOLATION = "23505"


class Variant(str, Enum):
    A = "A"
    B = "B"


def validate_identity(user_id, subscription_id) -> tuple[str, str]:
    """Raise InvalidIdentity unless both ids are non-blank strings."""
    if not isinstance(user_id, str) or not user_id.strip():
        raise InvalidIdentity("Missing user_id or subscription_id")
    if not isinstance(subscription_id, str) or not subscription_id.strip():
        raise InvalidIdentity("Missing user_id or subscription_id")
    return user_id, subscription_id


def draw_variant() -> Variant:
    """One bit from the OS CSPRNG: 0 -> A, 1 -> B."""
    return Variant.B if secrets.randbits(1) else Variant.A


def get_or_assign_variant(user_id: str, subscription_id: str) -> Variant:
    """Return the stored variant for the pair, assigning one on first request."""
    validate_identity(user_id, subscription_id)

    row = _read_row(user_id, subscription_id)
    if row is not None:
        existing = _stored_variant(row)
        if existing is not None:
            return existing

    variant = draw_variant()
    if row is not None:
        # Row predates assignment (e.g. created by hand); claim it while still empty
        try:
            claimed = db.claim_cancellation_variant(user_id, subscription_id, variant.value)
        except Exception as e:
            raise AssignmentStorageError(f"Failed to persist variant: {e}") from e
        if not claimed:
            return _reread_winner(user_id, subscription_id)
        logger.info("Assigned variant %s to existing row %s/%s",
                    variant.value, user_id, subscription_id)
        return variant

    try:
        db.insert_cancellation(user_id, subscription_id, variant.value)
    except APIError as e:
        if e.code != _UNIQUE_VIOLATION:
            raise AssignmentStorageError(f"Failed to persist variant: {e.message}") from e
        return _reread_winner(user_id, subscription_id)
    except Exception as e:
        raise AssignmentStorageError(f"Failed to persist variant: {e}") from e

    logger.info("Assigned variant %s to %s/%s", variant.value, user_id, subscription_id)
    return variant


def _reread_winner(user_id: str, subscription_id: str) -> Variant:
    # Lost the race: the first writer's variant stands
    logger.info("Concurrent variant assignment for %s/%s, re-reading", user_id, subscription_id)
    persisted = _stored_variant(_read_row(user_id, subscription_id))
    if persisted is None:
        raise AssignmentStorageError("Variant missing after concurrent assignment")
    return persisted


def _read_row(user_id: str, subscription_id: str) -> dict | None:
    try:
        return db.get_cancellation(user_id, subscription_id)
    except Exception as e:
        raise AssignmentStorageError(f"Failed to read variant: {e}") from e


def _stored_variant(row: dict | None) -> Variant | None:
    if not row or not row.get("downsell_variant"):
        return None
    try:
        return Variant(row["downsell_variant"])
    except ValueError as e:
        raise AssignmentStorageError(
            f"Stored variant {row['downsell_variant']!r} is not A or B"
        ) from e
