from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from annual_review.db.session import get_db
from annual_review.models.objectives import AnnualEvaluation, AnnualObjective
from annual_review.routers.deps import get_workflow
from annual_review.schemas.evaluations import AnnualEvaluationOut
from annual_review.schemas.objectives import (
    AnnualObjectiveCreate,
    AnnualObjectiveOut,
    EvaluableOut,
    ObjectiveItemsUpdate,
)
from annual_review.security.dependencies import get_caller
from annual_review.services import reports
from annual_review.workflow.context import Caller
from annual_review.workflow.engine import ObjectiveWorkflow
from annual_review.workflow.validation import SelfEvaluationPayload

router = APIRouter(prefix="/objectives", tags=["objectives"])


@router.post("", response_model=AnnualObjectiveOut, status_code=status.HTTP_201_CREATED)
def create_objective(
    body: AnnualObjectiveCreate,
    caller: Caller = Depends(get_caller),
    workflow: ObjectiveWorkflow = Depends(get_workflow),
) -> AnnualObjective:
    return workflow.create_objective(
        employee_id=body.employee_id if body.employee_id is not None else caller.user_id,
        year=body.year,
        items=body.objectives,
        caller=caller,
        career_pathway_id=body.career_pathway_id,
        career_level_id=body.career_level_id,
    )


@router.get("", response_model=list[AnnualObjectiveOut])
def list_objectives(
    employee_id: int | None = None,
    year: int | None = None,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> list[AnnualObjective]:
    # Rows outside the caller's reach are filtered out by annual_review.db.filters.
    return reports.objectives_for_employee(db, employee_id if employee_id is not None else caller.user_id, year)


@router.get("/{id}", response_model=AnnualObjectiveOut)
def get_objective(
    id: int,
    caller: Caller = Depends(get_caller),
    workflow: ObjectiveWorkflow = Depends(get_workflow),
) -> AnnualObjective:
    return workflow.get_objective(id, caller)


@router.put("/{id}/items", response_model=AnnualObjectiveOut)
def update_items(
    id: int,
    body: ObjectiveItemsUpdate,
    caller: Caller = Depends(get_caller),
    workflow: ObjectiveWorkflow = Depends(get_workflow),
) -> AnnualObjective:
    return workflow.update_objective_items(id, body.objectives, caller)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_objective(
    id: int,
    caller: Caller = Depends(get_caller),
    workflow: ObjectiveWorkflow = Depends(get_workflow),
) -> Response:
    workflow.delete_objective(id, caller)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{id}/submit", response_model=AnnualObjectiveOut)
def submit_objectives(
    id: int, caller: Caller = Depends(get_caller), workflow: ObjectiveWorkflow = Depends(get_workflow)
) -> AnnualObjective:
    return workflow.submit_objective_items(id, caller)


@router.post("/{id}/validate", response_model=AnnualObjectiveOut)
def validate_objectives(
    id: int, caller: Caller = Depends(get_caller), workflow: ObjectiveWorkflow = Depends(get_workflow)
) -> AnnualObjective:
    return workflow.validate_objective(id, caller)


@router.post("/{id}/reject", response_model=AnnualObjectiveOut)
def reject_objectives(
    id: int, caller: Caller = Depends(get_caller), workflow: ObjectiveWorkflow = Depends(get_workflow)
) -> AnnualObjective:
    return workflow.reject_objective(id, caller)


@router.post("/{id}/reopen", response_model=AnnualObjectiveOut)
def reopen_objectives(
    id: int, caller: Caller = Depends(get_caller), workflow: ObjectiveWorkflow = Depends(get_workflow)
) -> AnnualObjective:
    return workflow.reopen_objective(id, caller)


@router.post("/{id}/open-evaluation", response_model=AnnualObjectiveOut)
def open_self_evaluation(
    id: int, caller: Caller = Depends(get_caller), workflow: ObjectiveWorkflow = Depends(get_workflow)
) -> AnnualObjective:
    return workflow.open_self_evaluation(id, caller)


@router.get("/{id}/evaluable", response_model=EvaluableOut)
def evaluable(
    id: int, caller: Caller = Depends(get_caller), workflow: ObjectiveWorkflow = Depends(get_workflow)
) -> EvaluableOut:
    objective = workflow.get_objective(id, caller)
    return EvaluableOut(objective_id=objective.id, evaluable=workflow.is_evaluable(objective, caller))


@router.post("/{id}/self-evaluation", response_model=AnnualEvaluationOut)
def submit_self_evaluation(
    id: int,
    body: SelfEvaluationPayload,
    caller: Caller = Depends(get_caller),
    workflow: ObjectiveWorkflow = Depends(get_workflow),
) -> AnnualEvaluation:
    return workflow.submit_self_evaluation(id, body, caller)


@router.get("/{id}/self-evaluation", response_model=AnnualEvaluationOut | None)
def get_self_evaluation(
    id: int, caller: Caller = Depends(get_caller), workflow: ObjectiveWorkflow = Depends(get_workflow)
) -> AnnualEvaluation | None:
    return workflow.evaluation_for_objective(id, caller)
