"""
Annual objective workflow: status machine, permission table and the
operations that move an objective set and its evaluations through it.

Callers pass an explicit `Caller` into every operation. Persistence goes
through a `RecordStore` (see `annual_review.db.store`).
"""

from .context import Caller, Subject
from .engine import ObjectiveWorkflow
from .errors import (
    Conflict,
    FieldError,
    Forbidden,
    InvalidState,
    NotFound,
    StoreUnavailable,
    Unauthenticated,
    ValidationFailed,
    WorkflowConfigError,
    WorkflowError,
)
from .rules import WorkflowRules, is_permitted, load_workflow_rules
from .statuses import (
    CoachEvaluationStatus,
    EvaluationStatus,
    ObjectiveStatus,
    ObjectiveType,
    Operation,
    UserRole,
)
from .validation import (
    CoachEvaluationItem,
    CoachEvaluationPayload,
    ObjectiveItem,
    SelfEvaluationItem,
    SelfEvaluationPayload,
)

__all__ = [
    "Caller",
    "Subject",
    "ObjectiveWorkflow",
    "WorkflowRules",
    "is_permitted",
    "load_workflow_rules",
    "WorkflowError",
    "Unauthenticated",
    "Forbidden",
    "NotFound",
    "InvalidState",
    "Conflict",
    "FieldError",
    "ValidationFailed",
    "StoreUnavailable",
    "WorkflowConfigError",
    "ObjectiveStatus",
    "EvaluationStatus",
    "CoachEvaluationStatus",
    "ObjectiveType",
    "Operation",
    "UserRole",
    "ObjectiveItem",
    "SelfEvaluationItem",
    "SelfEvaluationPayload",
    "CoachEvaluationItem",
    "CoachEvaluationPayload",
]
