"""Editable fields: which step owns each field and which values it accepts."""

from dataclasses import dataclass, replace
from typing import Any

from cancellation_flow.flow.state import FlowState
from cancellation_flow.flow.steps import (
    CANCELLATION_REASONS,
    INTERVIEW_OPTIONS,
    REASON_FEEDBACK_STEPS,
    ROLE_OPTIONS,
    VISA_DETAIL_STEPS,
    Step,
)


@dataclass(frozen=True)
class FieldSpec:
    steps: frozenset
    kind: str                     # "bool", "option" or "text"
    options: tuple = ()
    section: str | None = None    # "survey", "retention" or None for top level
    attr: str = ""


FIELDS: dict[str, FieldSpec] = {
    "found_job_via_platform": FieldSpec(frozenset({Step.SURVEY}), "bool",
                                        section="survey", attr="found_job_via_platform"),
    "roles_applied": FieldSpec(frozenset({Step.SURVEY}), "option", ROLE_OPTIONS,
                               section="survey", attr="roles_applied"),
    "companies_emailed": FieldSpec(frozenset({Step.SURVEY}), "option", ROLE_OPTIONS,
                                   section="survey", attr="companies_emailed"),
    "companies_interviewed": FieldSpec(frozenset({Step.SURVEY}), "option", INTERVIEW_OPTIONS,
                                       section="survey", attr="companies_interviewed"),
    "feedback": FieldSpec(frozenset({Step.FEEDBACK}), "text", attr="feedback"),
    "has_lawyer": FieldSpec(frozenset({Step.CONGRATULATIONS}), "bool", attr="has_lawyer"),
    "visa_type": FieldSpec(VISA_DETAIL_STEPS, "text", attr="visa_type"),
    "retention_roles_applied": FieldSpec(frozenset({Step.RETENTION_SURVEY}), "option", ROLE_OPTIONS,
                                         section="retention", attr="roles_applied"),
    "retention_companies_emailed": FieldSpec(frozenset({Step.RETENTION_SURVEY}), "option",
                                             ROLE_OPTIONS, section="retention",
                                             attr="companies_emailed"),
    "retention_companies_interviewed": FieldSpec(frozenset({Step.RETENTION_SURVEY}), "option",
                                                 INTERVIEW_OPTIONS, section="retention",
                                                 attr="companies_interviewed"),
    "cancellation_reason": FieldSpec(frozenset({Step.RETENTION_REASON}), "option",
                                     CANCELLATION_REASONS, section="retention",
                                     attr="cancellation_reason"),
    "max_price": FieldSpec(frozenset({Step.RETENTION_PRICE}), "text",
                           section="retention", attr="max_price"),
    "reason_feedback": FieldSpec(REASON_FEEDBACK_STEPS, "text",
                                 section="retention", attr="reason_feedback"),
}


def fields_for(step: Step) -> list[str]:
    """Names of the fields the given step lets the user edit."""
    return [name for name, spec in FIELDS.items() if step in spec.steps]


def accepts(spec: FieldSpec, value: Any) -> bool:
    """Whether value is acceptable for the field. None clears bool/option fields."""
    if spec.kind == "text":
        return isinstance(value, str)
    if value is None:
        return True
    if spec.kind == "bool":
        return isinstance(value, bool)
    return isinstance(value, str) and value in spec.options


def apply_edit(state: FlowState, name: str, value: Any) -> FlowState:
    """Return state with the field set, or state itself if the edit is not allowed."""
    spec = FIELDS.get(name) if isinstance(name, str) else None
    if spec is None or state.step not in spec.steps or not accepts(spec, value):
        return state
    if spec.section is None:
        return replace(state, **{spec.attr: value})
    section = getattr(state, spec.section)
    return replace(state, **{spec.section: replace(section, **{spec.attr: value})})
