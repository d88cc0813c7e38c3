from __future__ import annotations

from fastapi import APIRouter, Depends

from annual_review.models.objectives import AnnualCoachEvaluation, AnnualEvaluation
from annual_review.routers.deps import get_workflow
from annual_review.schemas.evaluations import AnnualCoachEvaluationOut, AnnualEvaluationOut
from annual_review.security.dependencies import get_caller
from annual_review.workflow.context import Caller
from annual_review.workflow.engine import ObjectiveWorkflow
from annual_review.workflow.validation import CoachEvaluationPayload

router = APIRouter(prefix="/evaluations", tags=["evaluations"])


@router.get("/{id}", response_model=AnnualEvaluationOut)
def get_evaluation(
    id: int, caller: Caller = Depends(get_caller), workflow: ObjectiveWorkflow = Depends(get_workflow)
) -> AnnualEvaluation:
    return workflow.get_evaluation(id, caller)


@router.post("/{id}/coach-evaluation", response_model=AnnualCoachEvaluationOut)
def submit_coach_evaluation(
    id: int,
    body: CoachEvaluationPayload,
    caller: Caller = Depends(get_caller),
    workflow: ObjectiveWorkflow = Depends(get_workflow),
) -> AnnualCoachEvaluation:
    return workflow.submit_coach_evaluation(id, body, caller)


@router.get("/{id}/coach-evaluation", response_model=AnnualCoachEvaluationOut | None)
def get_coach_evaluation(
    id: int, caller: Caller = Depends(get_caller), workflow: ObjectiveWorkflow = Depends(get_workflow)
) -> AnnualCoachEvaluation | None:
    return workflow.coach_evaluation_for(id, caller)
