"""Flow session: holds the single mutable reference to one open flow.

The shell creates a session when the cancellation wizard opens, awaits
open(), then calls dispatch() for each user action and renders from
session.state. Submissions produced by the machine go to the gateway
without being awaited.
"""

import asyncio
import logging
from typing import Callable

from cancellation_flow.errors import AssignmentStorageError
from cancellation_flow.flow import (
    Action,
    FlowState,
    apply,
    can_go_back,
    enabled_actions,
    initial_state,
    is_terminal,
    progress,
)
from cancellation_flow.services.submission_gateway import SubmissionGateway
from cancellation_flow.services.variant_assignment import Variant, validate_identity

logger = logging.getLogger(__name__)

LOADING = "loading"
READY = "ready"
UNAVAILABLE = "unavailable"
CLOSED = "closed"

# fetch_variant(user_id, subscription_id) -> Variant, blocking
VariantFetcher = Callable[[str, str], Variant]


class FlowSession:

    def __init__(self, user_id: str, subscription_id: str,
                 fetch_variant: VariantFetcher, gateway: SubmissionGateway):
        self.user_id, self.subscription_id = validate_identity(user_id, subscription_id)
        if (gateway.user_id, gateway.subscription_id) != (self.user_id, self.subscription_id):
            raise ValueError(
                f"Gateway reports for {gateway.user_id}/{gateway.subscription_id}, "
                f"not {self.user_id}/{self.subscription_id}"
            )
        self._fetch_variant = fetch_variant
        self.gateway = gateway
        self.status = LOADING
        self.variant: Variant | None = None
        self.error: str | None = None
        self.state: FlowState = initial_state()
        self.completed = False

    async def open(self) -> str:
        """Resolve the variant and start the gateway. Returns the new status."""
        try:
            self.variant = await asyncio.to_thread(
                self._fetch_variant, self.user_id, self.subscription_id,
            )
        except AssignmentStorageError as e:
            return self._fail(str(e))
        except Exception as e:
            logger.exception("Variant fetch crashed for %s/%s", self.user_id, self.subscription_id)
            return self._fail(f"Network error: {e}")

        if self.status == CLOSED:
            return self.status
        self.gateway.start()
        self.status = READY
        logger.info("Cancellation flow opened for %s/%s (variant %s)",
                    self.user_id, self.subscription_id, self.variant.value)
        return self.status

    def _fail(self, message: str) -> str:
        logger.warning("Cancellation flow unavailable for %s/%s: %s",
                       self.user_id, self.subscription_id, message)
        self.error = message
        if self.status != CLOSED:
            self.status = UNAVAILABLE
        return self.status

    def dispatch(self, action: Action) -> FlowState:
        """Apply a user action and forward any submission it triggers."""
        if self.status != READY:
            return self.state
        result = apply(self.state, action)
        if result.state.step is not self.state.step:
            logger.debug("Flow %s/%s: %s -> %s", self.user_id, self.subscription_id,
                         self.state.step.value, result.state.step.value)
        self.state = result.state
        if result.submission is not None:
            self.gateway.submit(result.submission.accepted, result.submission.reason)
        return self.state

    def enabled_actions(self) -> list[Action]:
        if self.status != READY:
            return []
        return enabled_actions(self.state)

    def can_go_back(self) -> bool:
        return self.status == READY and can_go_back(self.state)

    def progress(self) -> tuple[int, int]:
        return progress(self.state)

    @property
    def finished(self) -> bool:
        return is_terminal(self.state.step)

    async def close(self) -> None:
        """Close the wizard. Outstanding reports are allowed to complete."""
        self.completed = self.status == READY and self.finished
        self.status = CLOSED
        await self.gateway.aclose()
        logger.info("Cancellation flow closed for %s/%s at %s (completed=%s)",
                    self.user_id, self.subscription_id, self.state.step.value, self.completed)
