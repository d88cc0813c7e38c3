"""
Annual objective workflow engine.

Drives one employee's objective set for a year through its lifecycle:

    draft -> submitted -> approved -> waiting_auto_evaluation -> evaluated
    submitted -> rejected -> draft

and owns the two records hanging off it: the employee's self-evaluation and
the coach's evaluation of it. Every operation:

1. loads the rows it needs,
2. asks the rule table whether the caller may act in the current status,
3. validates the payload (all fields, all items) before writing anything,
4. writes every affected row inside one store transaction.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Any

from annual_review.models.notifications import Notification
from annual_review.models.objectives import AnnualCoachEvaluation, AnnualEvaluation, AnnualObjective
from annual_review.models.people import UserProfile

from .context import Caller, Subject
from .errors import Conflict, InvalidState, NotFound
from .rules import WorkflowRules
from .statuses import CoachEvaluationStatus, EvaluationStatus, NotificationAction, Operation
from .validation import (
    CoachEvaluationPayload,
    ObjectiveItem,
    SelfEvaluationPayload,
    check_coach_evaluation,
    check_objective_items,
    check_self_evaluation,
)

if TYPE_CHECKING:
    from annual_review.db.store import RecordStore

logger = logging.getLogger(__name__)

OBJECTIVES_URL = "/annual-objectives"


class ObjectiveWorkflow:
    def __init__(
        self,
        store: RecordStore,
        rules: WorkflowRules,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.rules = rules
        self._now = clock or datetime.utcnow

    # ---- Objective set lifecycle -------------------------------------------------------

    def create_objective(
        self,
        employee_id: int,
        year: int,
        items: Sequence[ObjectiveItem],
        caller: Caller,
        career_pathway_id: int | None = None,
        career_level_id: int | None = None,
    ) -> AnnualObjective:
        with self.store.transaction():
            subject = self._subject(employee_id, self.rules.initial_state)
            status = self.rules.check(Operation.CREATE_OBJECTIVE, caller, subject)
            check_objective_items(items)

            if self.store.find_one(AnnualObjective, employee_id=employee_id, year=year) is not None:
                raise Conflict(f"Employee {employee_id} already has objectives for {year}")

            objective = self.store.insert(
                AnnualObjective(
                    employee_id=employee_id,
                    year=year,
                    career_pathway_id=career_pathway_id,
                    career_level_id=career_level_id,
                    objectives=[item.model_dump(mode="json") for item in items],
                    status=status,
                )
            )
            logger.info(
                "Workflow: created objective=%s employee=%s year=%s caller=%s",
                objective.id,
                employee_id,
                year,
                caller.user_id,
            )
        return objective

    def update_objective_items(
        self, objective_id: int, items: Sequence[ObjectiveItem], caller: Caller
    ) -> AnnualObjective:
        with self.store.transaction():
            objective = self.store.get(AnnualObjective, objective_id)
            self.rules.check(Operation.EDIT_OBJECTIVE, caller, self._objective_subject(objective))
            check_objective_items(items)
            self.store.update(
                AnnualObjective,
                objective.id,
                {"objectives": [item.model_dump(mode="json") for item in items], "updated_at": self._now()},
            )
            logger.info("Workflow: edited objective=%s items=%s caller=%s", objective.id, len(items), caller.user_id)
        return objective

    def delete_objective(self, objective_id: int, caller: Caller) -> None:
        """Hard delete. Evaluation rows that reference the objective are kept."""
        with self.store.transaction():
            objective = self.store.get(AnnualObjective, objective_id)
            self.rules.check(Operation.DELETE_OBJECTIVE, caller, self._objective_subject(objective))
            self.store.delete(AnnualObjective, objective.id)
            logger.info("Workflow: deleted objective=%s caller=%s", objective_id, caller.user_id)

    def submit_objective_items(self, objective_id: int, caller: Caller) -> AnnualObjective:
        return self._transition(Operation.SUBMIT_OBJECTIVES, objective_id, caller)

    def validate_objective(self, objective_id: int, caller: Caller) -> AnnualObjective:
        return self._transition(Operation.VALIDATE_OBJECTIVES, objective_id, caller)

    def reject_objective(self, objective_id: int, caller: Caller) -> AnnualObjective:
        return self._transition(Operation.REJECT_OBJECTIVES, objective_id, caller)

    def reopen_objective(self, objective_id: int, caller: Caller) -> AnnualObjective:
        return self._transition(Operation.REOPEN_OBJECTIVES, objective_id, caller)

    def open_self_evaluation(self, objective_id: int, caller: Caller) -> AnnualObjective:
        with self.store.transaction():
            objective = self._apply_transition(Operation.OPEN_SELF_EVALUATION, objective_id, caller)
            self.store.insert(
                Notification(
                    recipient_id=objective.employee_id,
                    sender_id=caller.user_id,
                    title="Annual self-evaluation required",
                    message=f"Your {objective.year} objectives are ready for your self-evaluation.",
                    type="action",
                    priority=2,
                    action_url=OBJECTIVES_URL,
                    action_type=NotificationAction.ANNUAL_EVALUATION_REQUIRED.value,
                    year=objective.year,
                    annual_objective_id=objective.id,
                )
            )
        return objective

    def is_evaluable(self, objective: AnnualObjective, caller: Caller) -> bool:
        """May the caller open the self-evaluation form for this objective set?"""
        return self.rules.is_permitted(Operation.EVALUATE, caller, self._objective_subject(objective))

    # ---- Evaluations -------------------------------------------------------------------

    def submit_self_evaluation(
        self, objective_id: int, payload: SelfEvaluationPayload, caller: Caller
    ) -> AnnualEvaluation:
        with self.store.transaction():
            objective = self.store.get(AnnualObjective, objective_id)
            target = self.rules.check(Operation.SUBMIT_SELF_EVALUATION, caller, self._objective_subject(objective))
            check_self_evaluation(payload, objective.skill_ids)

            now = self._now()
            descriptions = {str(item.get("skill_id")): item.get("skill_description", "") for item in objective.objectives}
            values: dict[str, Any] = {
                "annual_objective_id": objective.id,
                "employee_id": objective.employee_id,
                "year": objective.year,
                "evaluations": [
                    {**e.model_dump(), "skill_description": e.skill_description or descriptions.get(e.objective_id, "")}
                    for e in payload.evaluations
                ],
                "employee_global_comment": payload.employee_global_comment,
                "employee_global_score": payload.employee_global_score,
                "status": EvaluationStatus.SUBMITTED.value,
                "submitted_at": now,
            }

            existing = self.store.find_one(
                AnnualEvaluation,
                annual_objective_id=objective.id,
                employee_id=objective.employee_id,
                year=objective.year,
            )
            if existing is not None:
                evaluation = self.store.update(AnnualEvaluation, existing.id, values)
            else:
                evaluation = self.store.insert(AnnualEvaluation(**values))

            if target is not None and objective.status != target:
                self.store.update(AnnualObjective, objective.id, {"status": target, "updated_at": now})

            archived = self._archive_evaluation_required(objective.employee_id, objective.year, now)
            logger.info(
                "Workflow: self-evaluation submitted objective=%s evaluation=%s archived_notifications=%s caller=%s",
                objective.id,
                evaluation.id,
                archived,
                caller.user_id,
            )
        return evaluation

    def submit_coach_evaluation(
        self, evaluation_id: int, payload: CoachEvaluationPayload, caller: Caller
    ) -> AnnualCoachEvaluation:
        with self.store.transaction():
            evaluation = self.store.get(AnnualEvaluation, evaluation_id)
            objective = self.store.find_one(AnnualObjective, id=evaluation.annual_objective_id)
            if objective is None:
                raise NotFound(f"Objective for evaluation {evaluation_id} no longer exists")

            target = self.rules.check(Operation.SUBMIT_COACH_EVALUATION, caller, self._objective_subject(objective))
            if evaluation.status != EvaluationStatus.SUBMITTED.value:
                raise InvalidState(
                    f"Cannot review a self-evaluation while its status is {evaluation.status!r}",
                    details={"status": evaluation.status, "allowed": [EvaluationStatus.SUBMITTED.value]},
                )
            check_coach_evaluation(payload, [str(e.get("objective_id")) for e in evaluation.evaluations])

            now = self._now()
            values: dict[str, Any] = {
                "annual_evaluation_id": evaluation.id,
                "annual_objective_id": objective.id,
                "coach_id": caller.user_id,
                "employee_id": objective.employee_id,
                "year": objective.year,
                "coach_evaluations": [e.model_dump() for e in payload.coach_evaluations],
                "coach_global_comment": payload.coach_global_comment,
                "coach_global_score": payload.coach_global_score,
                "status": CoachEvaluationStatus.COMPLETED.value,
                "completed_at": now,
            }

            existing = self.store.find_one(
                AnnualCoachEvaluation, annual_evaluation_id=evaluation.id, coach_id=caller.user_id
            )
            if existing is not None:
                coach_evaluation = self.store.update(AnnualCoachEvaluation, existing.id, values)
            else:
                coach_evaluation = self.store.insert(AnnualCoachEvaluation(**values))

            self.store.update(AnnualEvaluation, evaluation.id, {"status": EvaluationStatus.REVIEWED.value})
            self.store.update(AnnualObjective, objective.id, {"status": target, "updated_at": now})

            coach = self.store.find_one(UserProfile, id=caller.user_id)
            coach_name = coach.full_name if coach is not None and coach.full_name else "your coach"
            self.store.insert(
                Notification(
                    recipient_id=objective.employee_id,
                    sender_id=caller.user_id,
                    title="Annual coach evaluation available",
                    message=(
                        f"Your coach {coach_name} has completed your {objective.year} annual evaluation. "
                        "You can read it with your annual objectives."
                    ),
                    type="info",
                    priority=2,
                    action_url=OBJECTIVES_URL,
                    action_type=NotificationAction.ANNUAL_COACH_EVALUATION_COMPLETED.value,
                    year=objective.year,
                    annual_objective_id=objective.id,
                    annual_evaluation_id=evaluation.id,
                )
            )
            logger.info(
                "Workflow: coach evaluation completed objective=%s evaluation=%s coach_evaluation=%s caller=%s",
                objective.id,
                evaluation.id,
                coach_evaluation.id,
                caller.user_id,
            )
        return coach_evaluation

    # ---- Reads -------------------------------------------------------------------------

    def get_objective(self, objective_id: int, caller: Caller) -> AnnualObjective:
        objective = self.store.get(AnnualObjective, objective_id)
        self.rules.check(Operation.VIEW, caller, self._objective_subject(objective))
        return objective

    def get_evaluation(self, evaluation_id: int, caller: Caller) -> AnnualEvaluation:
        evaluation = self.store.get(AnnualEvaluation, evaluation_id)
        self.rules.check(Operation.VIEW, caller, self._subject(evaluation.employee_id, evaluation.status))
        return evaluation

    def evaluation_for_objective(self, objective_id: int, caller: Caller) -> AnnualEvaluation | None:
        objective = self.get_objective(objective_id, caller)
        return self.store.find_one(
            AnnualEvaluation,
            annual_objective_id=objective.id,
            employee_id=objective.employee_id,
            year=objective.year,
        )

    def coach_evaluation_for(self, evaluation_id: int, caller: Caller) -> AnnualCoachEvaluation | None:
        evaluation = self.get_evaluation(evaluation_id, caller)
        return self.store.find_one(AnnualCoachEvaluation, annual_evaluation_id=evaluation.id)

    # ---- Helpers -----------------------------------------------------------------------

    def _subject(self, employee_id: int, status: str) -> Subject:
        owner = self.store.find_one(UserProfile, id=employee_id)
        if owner is None:
            raise NotFound(f"Employee {employee_id} not found")
        return Subject(employee_id=employee_id, status=status, coach_id=owner.coach_id)

    def _objective_subject(self, objective: AnnualObjective) -> Subject:
        return self._subject(objective.employee_id, objective.status)

    def _apply_transition(self, operation: Operation, objective_id: int, caller: Caller) -> AnnualObjective:
        objective = self.store.get(AnnualObjective, objective_id)
        previous = objective.status
        target = self.rules.check(operation, caller, self._objective_subject(objective))
        if target is None:
            raise InvalidState(f"{operation.value} is not a status transition")
        self.store.update(AnnualObjective, objective.id, {"status": target, "updated_at": self._now()})
        logger.info(
            "Workflow: %s objective=%s %s -> %s caller=%s",
            operation.value,
            objective.id,
            previous,
            target,
            caller.user_id,
        )
        return objective

    def _transition(self, operation: Operation, objective_id: int, caller: Caller) -> AnnualObjective:
        with self.store.transaction():
            return self._apply_transition(operation, objective_id, caller)

    def _archive_evaluation_required(self, employee_id: int, year: int, now: datetime) -> int:
        pending = self.store.find(
            Notification,
            recipient_id=employee_id,
            year=year,
            action_type=NotificationAction.ANNUAL_EVALUATION_REQUIRED.value,
            is_read=False,
            is_archived=False,
        )
        for notification in pending:
            self.store.update(Notification, notification.id, {"is_read": True, "is_archived": True, "read_at": now})
        return len(pending)
