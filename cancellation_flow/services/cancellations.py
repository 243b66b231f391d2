"""Cancellation outcomes: persist what the user decided at the end of the flow."""

import logging

from cancellation_flow import supabase_client as db
from cancellation_flow.services.variant_assignment import get_or_assign_variant

logger = logging.getLogger(__name__)


def record_outcome(
    user_id: str,
    subscription_id: str,
    accepted_downsell: bool,
    reason: str | None = None,
) -> dict:
    """Store the outcome on the pair's cancellation row.

    The row is created (with its variant) if the flow never fetched one.
    Declining the downsell marks the subscription pending_cancellation.
    Returns the updated cancellation row.
    """
    variant = get_or_assign_variant(user_id, subscription_id)

    rows = db.update_cancellation(user_id, subscription_id, {
        "accepted_downsell": accepted_downsell,
        "reason": reason,
    })

    if not accepted_downsell:
        db.set_subscription_status(subscription_id, "pending_cancellation")

    logger.info(
        "Recorded cancellation outcome for %s/%s: variant=%s accepted_downsell=%s",
        user_id, subscription_id, variant.value, accepted_downsell,
    )
    return rows[0] if rows else {}
