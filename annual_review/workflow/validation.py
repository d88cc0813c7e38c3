"""
Payload models for objective items and evaluations, plus the checks that
gate persistence.

Checks collect every problem before anything is written; a payload with one
missing field is rejected as a whole with the full list of field errors.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, Field

from .errors import FieldError, ValidationFailed
from .statuses import ObjectiveType

MIN_SCORE = 1
MAX_SCORE = 5

SELF_EVALUATION_REQUIRED = ("employee_comment", "achievements", "learnings")
COACH_EVALUATION_REQUIRED = ("coach_comment", "strengths")


class ObjectiveItem(BaseModel):
    skill_id: str
    skill_description: str = ""
    theme_name: str = ""
    smart_objective: str = ""
    specific: str = ""
    measurable: str = ""
    achievable: str = ""
    relevant: str = ""
    time_bound: str = ""
    is_custom: bool = False
    objective_type: ObjectiveType = ObjectiveType.CAREER


class SelfEvaluationItem(BaseModel):
    objective_id: str = ""
    skill_description: str = ""
    employee_score: int = 3
    employee_comment: str = ""
    achievements: str = ""
    difficulties: str = ""
    learnings: str = ""
    next_steps: str = ""


class SelfEvaluationPayload(BaseModel):
    evaluations: list[SelfEvaluationItem] = Field(default_factory=list)
    employee_global_comment: str = ""
    employee_global_score: int = 3


class CoachEvaluationItem(BaseModel):
    objective_id: str = ""
    skill_description: str = ""
    coach_score: int = 3
    coach_comment: str = ""
    strengths: str = ""
    areas_for_improvement: str = ""
    development_recommendations: str = ""


class CoachEvaluationPayload(BaseModel):
    coach_evaluations: list[CoachEvaluationItem] = Field(default_factory=list)
    coach_global_comment: str = ""
    coach_global_score: int = 3


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _score_error(field: str, score: int) -> FieldError | None:
    if MIN_SCORE <= score <= MAX_SCORE:
        return None
    return FieldError(field, f"score must be between {MIN_SCORE} and {MAX_SCORE}")


def _coverage_errors(field: str, given: Sequence[str], expected: Sequence[str]) -> list[FieldError]:
    errors: list[FieldError] = []
    if len(given) != len(expected):
        errors.append(FieldError(field, f"expected {len(expected)} entries, got {len(given)}"))

    known = set(expected)
    seen: set[str] = set()
    for i, objective_id in enumerate(given):
        if objective_id not in known:
            errors.append(FieldError(f"{field}[{i}].objective_id", "does not match an objective item"))
        elif objective_id in seen:
            errors.append(FieldError(f"{field}[{i}].objective_id", "objective item evaluated twice"))
        seen.add(objective_id)
    return errors


def check_objective_items(items: Sequence[ObjectiveItem]) -> None:
    errors: list[FieldError] = []
    if not items:
        errors.append(FieldError("objectives", "at least one objective item is required"))

    seen: set[str] = set()
    for i, item in enumerate(items):
        if _blank(item.skill_id):
            errors.append(FieldError(f"objectives[{i}].skill_id", "required"))
        elif item.skill_id in seen:
            errors.append(FieldError(f"objectives[{i}].skill_id", "duplicate skill"))
        seen.add(item.skill_id)

    if errors:
        raise ValidationFailed(errors)


def check_self_evaluation(payload: SelfEvaluationPayload, skill_ids: Sequence[str]) -> None:
    errors = _coverage_errors("evaluations", [e.objective_id for e in payload.evaluations], skill_ids)

    for i, item in enumerate(payload.evaluations):
        for name in SELF_EVALUATION_REQUIRED:
            if _blank(getattr(item, name)):
                errors.append(FieldError(f"evaluations[{i}].{name}", "required"))
        score_error = _score_error(f"evaluations[{i}].employee_score", item.employee_score)
        if score_error:
            errors.append(score_error)

    if _blank(payload.employee_global_comment):
        errors.append(FieldError("employee_global_comment", "required"))
    score_error = _score_error("employee_global_score", payload.employee_global_score)
    if score_error:
        errors.append(score_error)

    if errors:
        raise ValidationFailed(errors)


def check_coach_evaluation(payload: CoachEvaluationPayload, objective_ids: Sequence[str]) -> None:
    errors = _coverage_errors("coach_evaluations", [e.objective_id for e in payload.coach_evaluations], objective_ids)

    for i, item in enumerate(payload.coach_evaluations):
        for name in COACH_EVALUATION_REQUIRED:
            if _blank(getattr(item, name)):
                errors.append(FieldError(f"coach_evaluations[{i}].{name}", "required"))
        score_error = _score_error(f"coach_evaluations[{i}].coach_score", item.coach_score)
        if score_error:
            errors.append(score_error)

    if _blank(payload.coach_global_comment):
        errors.append(FieldError("coach_global_comment", "required"))
    score_error = _score_error("coach_global_score", payload.coach_global_score)
    if score_error:
        errors.append(score_error)

    if errors:
        raise ValidationFailed(errors)
