"""User actions accepted by the state machine, and the events it emits."""

from dataclasses import dataclass
from typing import Any, Union

from cancellation_flow.flow.state import FlowState


@dataclass(frozen=True)
class Answer:
    """Yes/no answer that also advances (job-question, visa-support)."""
    value: bool


@dataclass(frozen=True)
class Submit:
    pass


@dataclass(frozen=True)
class Next:
    pass


@dataclass(frozen=True)
class Accept:
    """Accept or decline the retention offer."""
    accepted: bool


@dataclass(frozen=True)
class Back:
    pass


@dataclass(frozen=True)
class Edit:
    """A widget on the current step produced a new value for a field."""
    field: str
    value: Any


Action = Union[Answer, Submit, Next, Accept, Back, Edit]


@dataclass(frozen=True)
class SubmissionRequested:
    """Outcome report the machine asks the submission gateway to send."""
    accepted: bool
    reason: str | None = None


@dataclass(frozen=True)
class TransitionResult:
    state: FlowState
    submission: SubmissionRequested | None = None


ACCEPTED_OFFER_REASON = "Accepted retention offer"
VISA_FLOW_REASON = "Completed visa support flow"


def accepted_offer() -> SubmissionRequested:
    return SubmissionRequested(accepted=True, reason=ACCEPTED_OFFER_REASON)


def price_reason(max_price: str) -> str:
    return f"Too expensive - willing to pay: ${max_price}"


def feedback_reason(reason: str | None, feedback: str) -> str:
    return f"{reason}: {feedback}"
