from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from annual_review.db.session import get_db
from annual_review.db.store import RecordStore
from annual_review.workflow.engine import ObjectiveWorkflow
from annual_review.workflow.rules import WorkflowRules


def get_workflow_rules(request: Request) -> WorkflowRules:
    rules = getattr(request.app.state, "workflow_rules", None)
    if rules is None:
        raise RuntimeError("Workflow rules not loaded. Did app startup run?")
    return rules


def get_workflow(
    db: Session = Depends(get_db),
    rules: WorkflowRules = Depends(get_workflow_rules),
) -> ObjectiveWorkflow:
    return ObjectiveWorkflow(RecordStore(db), rules)
