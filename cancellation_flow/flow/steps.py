"""Step graph: the closed set of wizard steps and the static tables over it."""

from enum import Enum


class Step(str, Enum):
    JOB_QUESTION = "job-question"
    SURVEY = "survey"
    FEEDBACK = "feedback"
    CONGRATULATIONS = "congratulations"
    VISA_SUPPORT = "visa-support"
    VISA_YES = "visa-yes"
    VISA_NO = "visa-no"
    SUCCESS = "success"
    SUCCESS_ALT = "success-alt"
    RETENTION_OFFER = "retention-offer"
    RETENTION_ACCEPTED = "retention-accepted"
    RETENTION_SURVEY = "retention-survey"
    RETENTION_REASON = "retention-reason"
    RETENTION_PRICE = "retention-price"
    RETENTION_PLATFORM = "retention-platform"
    RETENTION_JOBS = "retention-jobs"
    RETENTION_MOVE = "retention-move"
    RETENTION_OTHER = "retention-other"
    RETENTION_FINAL = "retention-final"


INITIAL_STEP = Step.JOB_QUESTION

TERMINAL_STEPS = frozenset({
    Step.SUCCESS,
    Step.SUCCESS_ALT,
    Step.RETENTION_ACCEPTED,
    Step.RETENTION_FINAL,
})

VISA_DETAIL_STEPS = frozenset({Step.VISA_YES, Step.VISA_NO})

# Free-text follow-ups reached by reason routing (everything except price)
REASON_FEEDBACK_STEPS = frozenset({
    Step.RETENTION_PLATFORM,
    Step.RETENTION_JOBS,
    Step.RETENTION_MOVE,
    Step.RETENTION_OTHER,
})

# Steps that show the "Get 50% off" button
OFFER_STEPS = frozenset({Step.RETENTION_OFFER, Step.RETENTION_SURVEY, Step.RETENTION_REASON}) \
    | REASON_FEEDBACK_STEPS

# Not the inverse of the forward graph. Steps missing here have no back target.
BACK_TARGETS: dict[Step, Step] = {
    Step.SURVEY: Step.JOB_QUESTION,
    Step.FEEDBACK: Step.SURVEY,
    Step.CONGRATULATIONS: Step.FEEDBACK,
    Step.VISA_SUPPORT: Step.CONGRATULATIONS,
    Step.VISA_YES: Step.VISA_SUPPORT,
    Step.VISA_NO: Step.VISA_SUPPORT,
    Step.RETENTION_SURVEY: Step.RETENTION_OFFER,
    Step.RETENTION_REASON: Step.RETENTION_SURVEY,
    Step.RETENTION_PRICE: Step.RETENTION_REASON,
}

# ---------------------------------------------------------------------------
# Answer options
# ---------------------------------------------------------------------------

ROLE_OPTIONS = ("0", "1-5", "6-20", "20+")
INTERVIEW_OPTIONS = ("0", "1-2", "3-5", "5+")

TOO_EXPENSIVE = "Too expensive"
CANCELLATION_REASONS = (
    TOO_EXPENSIVE,
    "Platform not helpful",
    "Not enough relevant jobs",
    "Decided not to move",
    "Other",
)

REASON_ROUTES: dict[str, Step] = {
    TOO_EXPENSIVE: Step.RETENTION_PRICE,
    "Platform not helpful": Step.RETENTION_PLATFORM,
    "Not enough relevant jobs": Step.RETENTION_JOBS,
    "Decided not to move": Step.RETENTION_MOVE,
    "Other": Step.RETENTION_OTHER,
}

# Progress indicator: "step N of 3"
PROGRESS_TOTAL = 3


def back_target(step: Step) -> Step | None:
    """Where Back leads from a step, or None."""
    return BACK_TARGETS.get(step)


def is_terminal(step: Step) -> bool:
    return step in TERMINAL_STEPS


def route_reason(reason: str | None) -> Step:
    """Next step for a cancellation reason.

    Unset or unknown reasons fall through to retention-final. Submit on
    retention-reason already requires a reason, so the fallback only
    fires for states built outside the machine.
    """
    if reason and reason in REASON_ROUTES:
        return REASON_ROUTES[reason]
    return Step.RETENTION_FINAL
