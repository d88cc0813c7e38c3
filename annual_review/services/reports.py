"""
Read accessors and dashboard aggregates.

Everything here is a plain query: filtering by employee or by a coach's
coachees, counts per status and average global scores.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from annual_review.models.objectives import AnnualCoachEvaluation, AnnualEvaluation, AnnualObjective
from annual_review.models.people import UserProfile
from annual_review.workflow.statuses import EvaluationStatus


@dataclass(frozen=True)
class CoachingSummary:
    coachee_count: int
    objectives_by_status: dict[str, int] = field(default_factory=dict)
    pending_reviews: int = 0
    average_employee_score: float | None = None
    average_coach_score: float | None = None


def coachee_ids(db: Session, coach_id: int) -> list[int]:
    stmt = select(UserProfile.id).where(UserProfile.coach_id == coach_id).order_by(UserProfile.id)
    return list(db.scalars(stmt).all())


def objectives_for_employee(db: Session, employee_id: int, year: int | None = None) -> list[AnnualObjective]:
    stmt = select(AnnualObjective).where(AnnualObjective.employee_id == employee_id)
    if year is not None:
        stmt = stmt.where(AnnualObjective.year == year)
    stmt = stmt.order_by(AnnualObjective.created_at.desc(), AnnualObjective.id.desc())
    return list(db.scalars(stmt).all())


def objectives_for_coach(db: Session, coach_id: int) -> list[AnnualObjective]:
    ids = coachee_ids(db, coach_id)
    if not ids:
        return []
    stmt = (
        select(AnnualObjective)
        .where(AnnualObjective.employee_id.in_(ids))
        .order_by(AnnualObjective.created_at.desc(), AnnualObjective.id.desc())
    )
    return list(db.scalars(stmt).all())


def evaluations_pending_review(db: Session, coach_id: int) -> list[AnnualEvaluation]:
    ids = coachee_ids(db, coach_id)
    if not ids:
        return []
    stmt = (
        select(AnnualEvaluation)
        .where(
            AnnualEvaluation.employee_id.in_(ids),
            AnnualEvaluation.status == EvaluationStatus.SUBMITTED.value,
        )
        .order_by(AnnualEvaluation.submitted_at.desc(), AnnualEvaluation.id.desc())
    )
    return list(db.scalars(stmt).all())


def objective_status_counts(db: Session, employee_ids: list[int]) -> dict[str, int]:
    if not employee_ids:
        return {}
    stmt = (
        select(AnnualObjective.status, func.count(AnnualObjective.id))
        .where(AnnualObjective.employee_id.in_(employee_ids))
        .group_by(AnnualObjective.status)
    )
    return {status: int(count) for status, count in db.execute(stmt).all()}


def coaching_summary(db: Session, coach_id: int) -> CoachingSummary:
    ids = coachee_ids(db, coach_id)
    if not ids:
        return CoachingSummary(coachee_count=0)

    avg_employee = db.scalar(
        select(func.avg(AnnualEvaluation.employee_global_score)).where(AnnualEvaluation.employee_id.in_(ids))
    )
    avg_coach = db.scalar(
        select(func.avg(AnnualCoachEvaluation.coach_global_score)).where(
            AnnualCoachEvaluation.employee_id.in_(ids),
            AnnualCoachEvaluation.coach_id == coach_id,
        )
    )

    return CoachingSummary(
        coachee_count=len(ids),
        objectives_by_status=objective_status_counts(db, ids),
        pending_reviews=len(evaluations_pending_review(db, coach_id)),
        average_employee_score=round(float(avg_employee), 2) if avg_employee is not None else None,
        average_coach_score=round(float(avg_coach), 2) if avg_coach is not None else None,
    )
