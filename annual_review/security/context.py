from __future__ import annotations

from dataclasses import dataclass

from annual_review.workflow.context import Caller
from annual_review.workflow.statuses import UserRole


@dataclass(frozen=True)
class AuthzContext:
    """
    Per-request authorization context.

    Attached to `request.state` by the security dependency and copied to
    `Session.info` so query filters can scope rows to the caller.
    """

    user_id: int
    role: str
    coachee_ids: frozenset[int]

    # Scope decision (driven by route config)
    scope_records: bool

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def visible_employee_ids(self) -> frozenset[int]:
        return self.coachee_ids | {self.user_id}

    @property
    def caller(self) -> Caller:
        return Caller(user_id=self.user_id, role=self.role)
