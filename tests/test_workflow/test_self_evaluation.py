import pytest
from sqlalchemy import select

from annual_review.models.notifications import Notification
from annual_review.models.objectives import AnnualEvaluation, AnnualObjective
from annual_review.workflow.errors import Forbidden, InvalidState, ValidationFailed
from annual_review.workflow.validation import SelfEvaluationItem


def _evaluations(db_session):
    db_session.expire_all()
    return db_session.scalars(select(AnnualEvaluation)).all()


def test_submit_creates_submitted_evaluation(workflow, db_session, people, callers, objective_in, self_payload):
    objective = objective_in("waiting_auto_evaluation")

    evaluation = workflow.submit_self_evaluation(objective.id, self_payload(objective), callers.employee)

    assert evaluation.status == "submitted"
    assert evaluation.annual_objective_id == objective.id
    assert evaluation.employee_id == people.employee.id
    assert evaluation.year == 2025
    assert evaluation.employee_global_comment == "Good year"
    assert evaluation.employee_global_score == 4
    assert evaluation.submitted_at is not None
    assert [e["objective_id"] for e in evaluation.evaluations] == ["api-design", "mentoring", "k8s-training"]
    # Blank skill descriptions are filled from the objective items.
    assert evaluation.evaluations[0]["skill_description"] == "API design"

    db_session.expire_all()
    assert db_session.get(AnnualObjective, objective.id).status == "waiting_auto_evaluation"


def test_resubmission_updates_the_same_row(workflow, db_session, callers, objective_in, self_payload):
    objective = objective_in("waiting_auto_evaluation")

    first = workflow.submit_self_evaluation(objective.id, self_payload(objective, score=3), callers.employee)
    first_id, first_submitted_at = first.id, first.submitted_at

    second = workflow.submit_self_evaluation(
        objective.id, self_payload(objective, score=5, comment="Even better"), callers.employee
    )

    rows = _evaluations(db_session)
    assert len(rows) == 1
    assert second.id == first_id
    assert rows[0].employee_global_score == 5
    assert rows[0].employee_global_comment == "Even better"
    assert rows[0].submitted_at > first_submitted_at


def test_missing_fields_are_all_reported(workflow, db_session, callers, objective_in, self_payload):
    objective = objective_in("waiting_auto_evaluation")
    payload = self_payload(objective)
    payload.evaluations[1].achievements = ""
    payload.evaluations[2].learnings = "  "
    payload.evaluations[2].employee_score = 7
    payload.employee_global_comment = ""

    with pytest.raises(ValidationFailed) as exc_info:
        workflow.submit_self_evaluation(objective.id, payload, callers.employee)

    assert exc_info.value.fields == [
        "evaluations[1].achievements",
        "evaluations[2].learnings",
        "evaluations[2].employee_score",
        "employee_global_comment",
    ]
    assert _evaluations(db_session) == []


def test_invalid_resubmission_keeps_previous_row(workflow, db_session, callers, objective_in, self_payload):
    objective = objective_in("waiting_auto_evaluation")
    workflow.submit_self_evaluation(objective.id, self_payload(objective), callers.employee)

    payload = self_payload(objective, comment="")
    with pytest.raises(ValidationFailed):
        workflow.submit_self_evaluation(objective.id, payload, callers.employee)

    rows = _evaluations(db_session)
    assert len(rows) == 1
    assert rows[0].employee_global_comment == "Good year"


def test_every_objective_item_must_be_evaluated(workflow, callers, objective_in, self_payload):
    objective = objective_in("waiting_auto_evaluation")
    payload = self_payload(objective)
    payload.evaluations.pop()

    with pytest.raises(ValidationFailed) as exc_info:
        workflow.submit_self_evaluation(objective.id, payload, callers.employee)
    assert exc_info.value.fields == ["evaluations"]


def test_unknown_and_repeated_items_are_rejected(workflow, callers, objective_in, self_payload):
    objective = objective_in("waiting_auto_evaluation")
    payload = self_payload(objective)
    payload.evaluations[1] = SelfEvaluationItem(**{**payload.evaluations[0].model_dump()})
    payload.evaluations[2].objective_id = "cooking"

    with pytest.raises(ValidationFailed) as exc_info:
        workflow.submit_self_evaluation(objective.id, payload, callers.employee)
    assert exc_info.value.fields == ["evaluations[1].objective_id", "evaluations[2].objective_id"]


def test_only_owner_submits(workflow, db_session, callers, objective_in, self_payload):
    objective = objective_in("waiting_auto_evaluation")

    for caller in (callers.coach, callers.admin, callers.other):
        with pytest.raises(Forbidden):
            workflow.submit_self_evaluation(objective.id, self_payload(objective), caller)
    assert _evaluations(db_session) == []


@pytest.mark.parametrize("status", ["draft", "submitted", "approved"])
def test_submit_outside_evaluation_window(workflow, db_session, callers, objective_in, self_payload, status):
    objective = objective_in(status)

    with pytest.raises(InvalidState):
        workflow.submit_self_evaluation(objective.id, self_payload(objective), callers.employee)
    assert _evaluations(db_session) == []


def test_submit_archives_evaluation_required_notification(workflow, db_session, callers, objective_in, self_payload):
    objective = objective_in("waiting_auto_evaluation")

    workflow.submit_self_evaluation(objective.id, self_payload(objective), callers.employee)

    db_session.expire_all()
    (notification,) = db_session.scalars(select(Notification)).all()
    assert notification.is_read
    assert notification.is_archived
    assert notification.read_at is not None


def test_get_evaluation_visibility(workflow, callers, objective_in, self_payload):
    objective = objective_in("waiting_auto_evaluation")
    evaluation = workflow.submit_self_evaluation(objective.id, self_payload(objective), callers.employee)

    assert workflow.evaluation_for_objective(objective.id, callers.coach).id == evaluation.id
    assert workflow.get_evaluation(evaluation.id, callers.admin).id == evaluation.id
    with pytest.raises(Forbidden):
        workflow.get_evaluation(evaluation.id, callers.other)
