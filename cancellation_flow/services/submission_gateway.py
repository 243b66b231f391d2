"""Submission gateway: one-way, fire-and-forget outcome reporting.

The state machine emits SubmissionRequested events; the session hands them
to submit(), which only enqueues. A single worker task drains the queue and
calls the blocking sender in a thread. Failures are logged and dropped:
no retries, nothing is reported back into the flow.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

from cancellation_flow.services.variant_assignment import validate_identity

logger = logging.getLogger(__name__)

# sender(user_id, subscription_id, accepted, reason)
Sender = Callable[[str, str, bool, "str | None"], None]


@dataclass(frozen=True)
class _Report:
    accepted: bool
    reason: str | None


class SubmissionGateway:

    def __init__(self, user_id: str, subscription_id: str, sender: Sender):
        self.user_id, self.subscription_id = validate_identity(user_id, subscription_id)
        self._sender = sender
        self._queue: asyncio.Queue[_Report] = asyncio.Queue()
        self._worker: asyncio.Task | None = None
        self.sent = 0
        self.failed = 0

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        """Spawn the worker on the running loop. Idempotent."""
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(self._run())

    def submit(self, accepted: bool, reason: str | None = None) -> None:
        """Queue a report. Never blocks, never raises for delivery problems."""
        self._queue.put_nowait(_Report(accepted, reason))

    async def aclose(self) -> None:
        """Let queued reports finish, then stop the worker."""
        if self._worker is None:
            return
        await self._queue.join()
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None

    async def _run(self) -> None:
        while True:
            report = await self._queue.get()
            try:
                await asyncio.to_thread(
                    self._sender,
                    self.user_id,
                    self.subscription_id,
                    report.accepted,
                    report.reason,
                )
                self.sent += 1
            except Exception:
                self.failed += 1
                logger.exception(
                    "Cancellation submit failed for %s/%s (accepted=%s)",
                    self.user_id, self.subscription_id, report.accepted,
                )
            finally:
                self._queue.task_done()
