"""
Error taxonomy for workflow operations.

Every error carries an HTTP-ish `status_code` and a stable `error_code` so the
FastAPI layer can render it without knowing the individual classes. None of
these are raised after a partial write: operations validate and authorize
before touching the store, and store failures roll the transaction back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class WorkflowError(Exception):
    status_code: int = 400
    error_code: str = "WORKFLOW_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class Unauthenticated(WorkflowError):
    status_code = 401
    error_code = "UNAUTHENTICATED"

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class Forbidden(WorkflowError):
    status_code = 403
    error_code = "FORBIDDEN"


class NotFound(WorkflowError):
    status_code = 404
    error_code = "NOT_FOUND"


class InvalidState(WorkflowError):
    status_code = 409
    error_code = "INVALID_STATE"


class Conflict(WorkflowError):
    status_code = 409
    error_code = "CONFLICT"


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class ValidationFailed(WorkflowError):
    status_code = 422
    error_code = "VALIDATION_FAILED"

    def __init__(self, errors: list[FieldError], message: str = "Required fields are missing or invalid") -> None:
        self.errors = list(errors)
        super().__init__(message, details={"fields": [e.to_dict() for e in self.errors]})

    @property
    def fields(self) -> list[str]:
        return [e.field for e in self.errors]


class StoreUnavailable(WorkflowError):
    status_code = 503
    error_code = "STORE_UNAVAILABLE"

    def __init__(self, message: str = "Record store is unavailable") -> None:
        super().__init__(message)


class WorkflowConfigError(ValueError):
    """Raised when the workflow rules YAML is invalid."""
