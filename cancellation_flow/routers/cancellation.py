"""Cancellation endpoint: variant lookup and outcome reporting.

POST /api/cancellation
  { user_id, subscription_id, get_variant: true }
      -> { success: true, variant: "A" | "B" }
  { user_id, subscription_id, accepted_downsell: bool, reason?: str }
      -> { success: true }
"""

import logging
import time
from collections import defaultdict

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from cancellation_flow.config import RATE_LIMIT, RATE_WINDOW
from cancellation_flow.errors import InvalidIdentity
from cancellation_flow.services.cancellations import record_outcome
from cancellation_flow.services.variant_assignment import get_or_assign_variant

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

# In-memory rate limiter: {ip: [timestamp, ...]}
_rate_buckets: dict[str, list[float]] = defaultdict(list)


def _check_rate_limit(request: Request) -> None:
    """Raise 429 if IP exceeds rate limit. Simple sliding window."""
    ip = request.client.host if request.client else "unknown"
    now = time.monotonic()
    bucket = _rate_buckets[ip]
    cutoff = now - RATE_WINDOW
    _rate_buckets[ip] = bucket = [t for t in bucket if t > cutoff]
    if len(bucket) >= RATE_LIMIT:
        raise HTTPException(status_code=429, detail="Rate limit exceeded")
    bucket.append(now)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"success": False, "message": message}, status_code=status_code)


@router.post("/cancellation")
async def cancellation(request: Request):
    _check_rate_limit(request)

    try:
        body = await request.json()
    except ValueError:
        return _error(400, "Invalid JSON body")
    if not isinstance(body, dict):
        return _error(400, "Invalid JSON body")

    user_id = body.get("user_id")
    subscription_id = body.get("subscription_id")

    try:
        if not user_id or not subscription_id:
            return _error(400, "Missing user_id or subscription_id")

        if body.get("get_variant"):
            variant = get_or_assign_variant(user_id, subscription_id)
            return {"success": True, "variant": variant.value}

        accepted_downsell = body.get("accepted_downsell")
        if not isinstance(accepted_downsell, bool):
            return _error(400, "accepted_downsell must be boolean")

        reason = body.get("reason")
        if reason is not None and not isinstance(reason, str):
            return _error(400, "reason must be string")

        record_outcome(user_id, subscription_id, accepted_downsell, reason or None)
        return {"success": True}

    except InvalidIdentity as e:
        return _error(400, str(e))
    except Exception:
        logger.exception("Cancellation request failed for %s/%s", user_id, subscription_id)
        return _error(500, "Internal server error")
