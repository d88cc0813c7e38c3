from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class AnnualEvaluationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    annual_objective_id: int
    employee_id: int
    year: int
    evaluations: list[dict[str, Any]]
    employee_global_comment: str | None
    employee_global_score: int | None
    status: str
    submitted_at: datetime | None


class AnnualCoachEvaluationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    annual_evaluation_id: int
    annual_objective_id: int
    coach_id: int
    employee_id: int
    year: int
    coach_evaluations: list[dict[str, Any]]
    coach_global_comment: str | None
    coach_global_score: int | None
    status: str
    completed_at: datetime | None


class CoachingSummaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    coachee_count: int
    objectives_by_status: dict[str, int]
    pending_reviews: int
    average_employee_score: float | None
    average_coach_score: float | None
