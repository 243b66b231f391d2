"""Cancellation flow state machine.

Pure functions over FlowState:
- apply() computes the next state and at most one SubmissionRequested
- transition() is apply() without the event
- is_enabled() / enabled_actions() expose the guards to the shell

Disallowed actions (failing guard, wrong step, terminal step, unknown
action) return the state unchanged. Nothing here raises for user input,
performs I/O or logs.
"""

from typing import Callable

from cancellation_flow.flow import guards
from cancellation_flow.flow.actions import (
    VISA_FLOW_REASON,
    Accept,
    Action,
    Answer,
    Back,
    Edit,
    Next,
    Submit,
    SubmissionRequested,
    TransitionResult,
    accepted_offer,
    feedback_reason,
    price_reason,
)
from cancellation_flow.flow.fields import FIELDS, accepts, apply_edit
from cancellation_flow.flow.state import FlowState, with_step
from cancellation_flow.flow.steps import (
    OFFER_STEPS,
    PROGRESS_TOTAL,
    REASON_FEEDBACK_STEPS,
    VISA_DETAIL_STEPS,
    Step,
    back_target,
    route_reason,
)

# Guard for Submit on each step that has one. Steps missing here ignore Submit.
SUBMIT_GUARDS: dict[Step, Callable[[FlowState], bool]] = {
    Step.SURVEY: guards.survey_valid,
    Step.FEEDBACK: guards.feedback_valid,
    Step.VISA_YES: guards.visa_details_valid,
    Step.VISA_NO: guards.visa_details_valid,
    Step.RETENTION_SURVEY: guards.retention_survey_valid,
    Step.RETENTION_REASON: guards.reason_selected,
    Step.RETENTION_PRICE: guards.price_valid,
    **{step: guards.reason_feedback_valid for step in REASON_FEEDBACK_STEPS},
}

ANSWER_STEPS = frozenset({Step.JOB_QUESTION, Step.VISA_SUPPORT})

# Candidate actions enabled_actions() checks. Edits are reported separately.
_CANDIDATES = (
    Answer(True), Answer(False), Submit(), Next(), Accept(True), Accept(False), Back(),
)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def can_go_back(state: FlowState) -> bool:
    return back_target(state.step) is not None


def is_enabled(state: FlowState, action: Action) -> bool:
    """Whether action would do anything from state."""
    step = state.step
    if isinstance(action, Back):
        return can_go_back(state)
    if isinstance(action, Edit):
        if not isinstance(action.field, str):
            return False
        spec = FIELDS.get(action.field)
        return spec is not None and step in spec.steps and accepts(spec, action.value)
    if isinstance(action, Answer):
        return step in ANSWER_STEPS and isinstance(action.value, bool)
    if isinstance(action, Accept):
        if step not in OFFER_STEPS or not isinstance(action.accepted, bool):
            return False
        # Declining only exists on the offer screen itself
        return action.accepted or step is Step.RETENTION_OFFER
    if isinstance(action, Next):
        return step is Step.CONGRATULATIONS and guards.lawyer_answered(state)
    if isinstance(action, Submit):
        guard = SUBMIT_GUARDS.get(step)
        return guard is not None and guard(state)
    return False


def enabled_actions(state: FlowState) -> list[Action]:
    """Navigation actions currently permitted from state."""
    return [a for a in _CANDIDATES if is_enabled(state, a)]


def progress(state: FlowState) -> tuple[int, int]:
    """(completed, total) for the progress indicator."""
    return state.completed_steps, PROGRESS_TOTAL


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def go_back(state: FlowState) -> FlowState:
    """Follow the static back map. Returning to visa-support clears has_lawyer."""
    target = back_target(state.step)
    if target is None:
        return state
    if target is Step.VISA_SUPPORT:
        return with_step(state, target, has_lawyer=None)
    return with_step(state, target)


def apply(state: FlowState, action: Action) -> TransitionResult:
    """Next state for action, plus the submission it triggers (if any)."""
    if not is_enabled(state, action):
        return TransitionResult(state)

    if isinstance(action, Edit):
        return TransitionResult(apply_edit(state, action.field, action.value))
    if isinstance(action, Back):
        return TransitionResult(go_back(state))
    if isinstance(action, Answer):
        return TransitionResult(_answer(state, action.value))
    if isinstance(action, Accept):
        return _accept(state, action.accepted)
    if isinstance(action, Next):
        return TransitionResult(with_step(state, Step.VISA_SUPPORT, completed_steps=3))
    return _submit(state)


def transition(state: FlowState, action: Action) -> FlowState:
    return apply(state, action).state


def _answer(state: FlowState, value: bool) -> FlowState:
    if state.step is Step.JOB_QUESTION:
        return with_step(state, Step.SURVEY if value else Step.RETENTION_OFFER, has_job=value)
    return with_step(state, Step.VISA_YES if value else Step.VISA_NO, has_lawyer=value)


def _accept(state: FlowState, accepted: bool) -> TransitionResult:
    if accepted:
        return TransitionResult(
            with_step(state, Step.RETENTION_ACCEPTED, completed_steps=0),
            accepted_offer(),
        )
    return TransitionResult(with_step(state, Step.RETENTION_SURVEY, completed_steps=1))


def _submit(state: FlowState) -> TransitionResult:
    step = state.step
    retention = state.retention

    if step is Step.SURVEY:
        return TransitionResult(with_step(state, Step.FEEDBACK, completed_steps=1))
    if step is Step.FEEDBACK:
        return TransitionResult(with_step(state, Step.CONGRATULATIONS, completed_steps=2))
    if step in VISA_DETAIL_STEPS:
        return TransitionResult(
            with_step(state, Step.SUCCESS if state.has_lawyer else Step.SUCCESS_ALT),
            SubmissionRequested(accepted=False, reason=VISA_FLOW_REASON),
        )
    if step is Step.RETENTION_SURVEY:
        return TransitionResult(with_step(state, Step.RETENTION_REASON, completed_steps=2))
    if step is Step.RETENTION_REASON:
        next_step = route_reason(retention.cancellation_reason)
        return TransitionResult(with_step(state, next_step, completed_steps=3))
    if step is Step.RETENTION_PRICE:
        return TransitionResult(
            with_step(state, Step.RETENTION_FINAL, completed_steps=3),
            SubmissionRequested(accepted=False, reason=price_reason(retention.max_price)),
        )
    if step in REASON_FEEDBACK_STEPS:
        return TransitionResult(
            with_step(state, Step.RETENTION_FINAL, completed_steps=3),
            SubmissionRequested(
                accepted=False,
                reason=feedback_reason(retention.cancellation_reason, retention.reason_feedback),
            ),
        )
    return TransitionResult(state)
