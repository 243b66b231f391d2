"""Validation predicates gating forward actions.

Each predicate is pure and reads only the state it is given. The machine
applies them before moving forward, and the shell queries the same
functions to decide which buttons are enabled.
"""

from cancellation_flow.flow.state import FlowState

MIN_FEEDBACK_LENGTH = 25


def survey_valid(state: FlowState) -> bool:
    s = state.survey
    return (
        s.found_job_via_platform is not None
        and bool(s.roles_applied)
        and bool(s.companies_emailed)
        and bool(s.companies_interviewed)
    )


def retention_survey_valid(state: FlowState) -> bool:
    r = state.retention
    return bool(r.roles_applied) and bool(r.companies_emailed) and bool(r.companies_interviewed)


def feedback_valid(state: FlowState) -> bool:
    return len(state.feedback) >= MIN_FEEDBACK_LENGTH


def reason_feedback_valid(state: FlowState) -> bool:
    return len(state.retention.reason_feedback) >= MIN_FEEDBACK_LENGTH


def lawyer_answered(state: FlowState) -> bool:
    return state.has_lawyer is not None


def visa_details_valid(state: FlowState) -> bool:
    return bool(state.visa_type.strip())


def reason_selected(state: FlowState) -> bool:
    return bool(state.retention.cancellation_reason)


def price_valid(state: FlowState) -> bool:
    # The input widget limits the range to 0-1000; only presence is checked here.
    return bool(state.retention.max_price.strip())
