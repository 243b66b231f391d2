"""Flow state: the immutable value the state machine reads and replaces."""

from dataclasses import dataclass, field, replace

from cancellation_flow.flow.steps import INITIAL_STEP, Step


@dataclass(frozen=True)
class SurveyAnswers:
    """Answers collected on the survey step (job path)."""
    found_job_via_platform: bool | None = None
    roles_applied: str | None = None
    companies_emailed: str | None = None
    companies_interviewed: str | None = None


@dataclass(frozen=True)
class RetentionAnswers:
    """Answers collected on the retention path."""
    roles_applied: str | None = None
    companies_emailed: str | None = None
    companies_interviewed: str | None = None
    cancellation_reason: str | None = None
    max_price: str = ""
    reason_feedback: str = ""


@dataclass(frozen=True)
class FlowState:
    step: Step = INITIAL_STEP
    has_job: bool | None = None
    survey: SurveyAnswers = field(default_factory=SurveyAnswers)
    feedback: str = ""
    has_lawyer: bool | None = None
    visa_type: str = ""
    retention: RetentionAnswers = field(default_factory=RetentionAnswers)
    completed_steps: int = 0

    def to_dict(self) -> dict:
        """Plain dict for logging and for shells that render from JSON."""
        return {
            "step": self.step.value,
            "has_job": self.has_job,
            "survey": {
                "found_job_via_platform": self.survey.found_job_via_platform,
                "roles_applied": self.survey.roles_applied,
                "companies_emailed": self.survey.companies_emailed,
                "companies_interviewed": self.survey.companies_interviewed,
            },
            "feedback": self.feedback,
            "has_lawyer": self.has_lawyer,
            "visa_type": self.visa_type,
            "retention": {
                "roles_applied": self.retention.roles_applied,
                "companies_emailed": self.retention.companies_emailed,
                "companies_interviewed": self.retention.companies_interviewed,
                "cancellation_reason": self.retention.cancellation_reason,
                "max_price": self.retention.max_price,
                "reason_feedback": self.retention.reason_feedback,
            },
            "completed_steps": self.completed_steps,
        }


def initial_state() -> FlowState:
    """Fresh state for a newly opened flow."""
    return FlowState()


def with_step(state: FlowState, step: Step, completed_steps: int | None = None, **changes) -> FlowState:
    """Copy of state moved to step, optionally updating the progress counter."""
    if completed_steps is not None:
        changes["completed_steps"] = completed_steps
    return replace(state, step=step, **changes)
