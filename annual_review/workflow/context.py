from __future__ import annotations

from dataclasses import dataclass

from .statuses import Relationship, UserRole


@dataclass(frozen=True)
class Caller:
    """
    Identity of whoever invokes a workflow operation.

    Passed explicitly into every call; the workflow never caches who the
    current user is.
    """

    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


@dataclass(frozen=True)
class Subject:
    """
    The parts of an objective set that permission decisions look at.

    `coach_id` is the owner's assigned coach, read from their profile at
    decision time rather than stored on the objective.
    """

    employee_id: int
    status: str
    coach_id: int | None = None


def relationships(caller: Caller, subject: Subject) -> frozenset[str]:
    rels: set[str] = set()
    if caller.user_id == subject.employee_id:
        rels.add(Relationship.OWNER.value)
    if subject.coach_id is not None and caller.user_id == subject.coach_id:
        rels.add(Relationship.COACH.value)
    if caller.is_admin:
        rels.add(Relationship.ADMIN.value)
    return frozenset(rels)
