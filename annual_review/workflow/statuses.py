from __future__ import annotations

from enum import Enum


class ObjectiveStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    WAITING_AUTO_EVALUATION = "waiting_auto_evaluation"
    EVALUATED = "evaluated"


class EvaluationStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    REVIEWED = "reviewed"


class CoachEvaluationStatus(str, Enum):
    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class ObjectiveType(str, Enum):
    CAREER = "career"
    SMART = "smart"
    FORMATION = "formation"
    CUSTOM = "custom"


class UserRole(str, Enum):
    EMPLOYEE = "employee"
    ADMIN = "admin"


class Relationship(str, Enum):
    """How a caller relates to the employee who owns an objective set."""

    OWNER = "owner"
    COACH = "coach"
    ADMIN = "admin"


class Operation(str, Enum):
    CREATE_OBJECTIVE = "create_objective"
    EDIT_OBJECTIVE = "edit_objective"
    DELETE_OBJECTIVE = "delete_objective"
    VIEW = "view"
    SUBMIT_OBJECTIVES = "submit_objectives"
    VALIDATE_OBJECTIVES = "validate_objectives"
    REJECT_OBJECTIVES = "reject_objectives"
    REOPEN_OBJECTIVES = "reopen_objectives"
    OPEN_SELF_EVALUATION = "open_self_evaluation"
    EVALUATE = "evaluate"
    SUBMIT_SELF_EVALUATION = "submit_self_evaluation"
    SUBMIT_COACH_EVALUATION = "submit_coach_evaluation"


class NotificationAction(str, Enum):
    ANNUAL_EVALUATION_REQUIRED = "annual_evaluation_required"
    ANNUAL_COACH_EVALUATION_COMPLETED = "annual_coach_evaluation_completed"
