from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from annual_review.db.session import get_db
from annual_review.models.objectives import AnnualEvaluation, AnnualObjective
from annual_review.schemas.evaluations import AnnualEvaluationOut, CoachingSummaryOut
from annual_review.schemas.objectives import AnnualObjectiveOut
from annual_review.security.dependencies import get_caller
from annual_review.services import reports
from annual_review.services.reports import CoachingSummary
from annual_review.workflow.context import Caller

router = APIRouter(prefix="/coaching", tags=["coaching"])


@router.get("/objectives", response_model=list[AnnualObjectiveOut])
def coachee_objectives(caller: Caller = Depends(get_caller), db: Session = Depends(get_db)) -> list[AnnualObjective]:
    return reports.objectives_for_coach(db, caller.user_id)


@router.get("/evaluations", response_model=list[AnnualEvaluationOut])
def pending_reviews(caller: Caller = Depends(get_caller), db: Session = Depends(get_db)) -> list[AnnualEvaluation]:
    return reports.evaluations_pending_review(db, caller.user_id)


@router.get("/summary", response_model=CoachingSummaryOut)
def summary(caller: Caller = Depends(get_caller), db: Session = Depends(get_db)) -> CoachingSummary:
    return reports.coaching_summary(db, caller.user_id)
