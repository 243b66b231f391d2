"""HTTP client for POST /api/cancellation: used by flows that run apart from the backend."""

import logging

import requests

from cancellation_flow.config import CANCELLATION_API_URL, HTTP_TIMEOUT
from cancellation_flow.errors import AssignmentStorageError, SubmissionFailure
from cancellation_flow.services.variant_assignment import Variant

logger = logging.getLogger(__name__)

CANCELLATION_PATH = "/api/cancellation"


class CancellationApiClient:
    """Thin blocking client. Run it in a thread from async code."""

    def __init__(self, base_url: str = CANCELLATION_API_URL, timeout: float = HTTP_TIMEOUT,
                 session: requests.Session | None = None):
        self.url = base_url.rstrip("/") + CANCELLATION_PATH
        self.timeout = timeout
        self._http = session or requests.Session()

    def fetch_variant(self, user_id: str, subscription_id: str) -> Variant:
        """Ask the backend for the pair's variant (assigned on first call)."""
        try:
            resp = self._http.post(self.url, json={
                "user_id": user_id,
                "subscription_id": subscription_id,
                "get_variant": True,
            }, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise AssignmentStorageError(f"Variant request failed: {e}") from e

        if not data.get("success"):
            raise AssignmentStorageError(data.get("message") or "Failed to fetch variant")
        try:
            return Variant(data.get("variant"))
        except ValueError as e:
            raise AssignmentStorageError(f"Unexpected variant {data.get('variant')!r}") from e

    def post_outcome(self, user_id: str, subscription_id: str,
                     accepted: bool, reason: str | None = None) -> None:
        """Report the outcome. Raises SubmissionFailure on any transport error."""
        payload = {
            "user_id": user_id,
            "subscription_id": subscription_id,
            "accepted_downsell": accepted,
        }
        if reason is not None:
            payload["reason"] = reason
        try:
            resp = self._http.post(self.url, json=payload, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise SubmissionFailure(f"Cancellation submit failed: {e}") from e
        logger.debug("Submitted cancellation outcome for %s/%s", user_id, subscription_id)
