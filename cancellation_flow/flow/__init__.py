"""Cancellation flow state machine: exports the public API."""

from cancellation_flow.flow.actions import (
    Accept,
    Action,
    Answer,
    Back,
    Edit,
    Next,
    Submit,
    SubmissionRequested,
    TransitionResult,
)
from cancellation_flow.flow.guards import MIN_FEEDBACK_LENGTH
from cancellation_flow.flow.machine import (
    apply,
    can_go_back,
    enabled_actions,
    go_back,
    is_enabled,
    progress,
    transition,
)
from cancellation_flow.flow.state import FlowState, RetentionAnswers, SurveyAnswers, initial_state
from cancellation_flow.flow.steps import (
    CANCELLATION_REASONS,
    INITIAL_STEP,
    INTERVIEW_OPTIONS,
    ROLE_OPTIONS,
    TERMINAL_STEPS,
    Step,
    back_target,
    is_terminal,
)
