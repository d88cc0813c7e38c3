from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from annual_review.db.base import Base
from annual_review.db.session import SessionLocal, engine
from annual_review.models import notifications, objectives  # noqa: F401  (register tables)
from annual_review.models.objectives import AnnualObjective
from annual_review.models.people import UserProfile
from annual_review.workflow.statuses import ObjectiveStatus, ObjectiveType


def init_db(seed: bool = True) -> None:
    """
    Create tables and, optionally, seed a small demo organisation.

    Seeding is skipped when any profile already exists.
    """

    Base.metadata.create_all(bind=engine)

    if not seed:
        return
    with SessionLocal() as db:
        if _has_seed_data(db):
            return
        _seed(db)


def _has_seed_data(db: Session) -> bool:
    return db.execute(select(UserProfile.id).limit(1)).first() is not None


def _seed(db: Session) -> None:
    admin = UserProfile(username="alice_admin", email="alice.admin@example.com", full_name="Alice Admin", role="admin")
    coach = UserProfile(username="carl_coach", email="carl.coach@example.com", full_name="Carl Coach", role="employee")
    db.add_all([admin, coach])
    db.flush()

    ed = UserProfile(
        username="ed_engineer",
        email="ed.engineer@example.com",
        full_name="Ed Engineer",
        role="employee",
        coach_id=coach.id,
    )
    fran = UserProfile(
        username="fran_finance",
        email="fran.finance@example.com",
        full_name="Fran Finance",
        role="employee",
        coach_id=coach.id,
    )
    db.add_all([ed, fran])
    db.flush()

    db.add(
        AnnualObjective(
            employee_id=ed.id,
            year=2025,
            status=ObjectiveStatus.DRAFT.value,
            objectives=[
                {
                    "skill_id": "python",
                    "skill_description": "Backend development",
                    "theme_name": "Engineering",
                    "smart_objective": "Ship the reporting API",
                    "specific": "Reporting API v1",
                    "measurable": "All endpoints covered by tests",
                    "achievable": "Two sprints",
                    "relevant": "Unblocks finance dashboards",
                    "time_bound": "End of Q2",
                    "is_custom": False,
                    "objective_type": ObjectiveType.CAREER.value,
                },
                {
                    "skill_id": "training-sql",
                    "skill_description": "Advanced SQL course",
                    "theme_name": "Training",
                    "smart_objective": "Complete the advanced SQL course",
                    "specific": "",
                    "measurable": "",
                    "achievable": "",
                    "relevant": "",
                    "time_bound": "End of Q3",
                    "is_custom": True,
                    "objective_type": ObjectiveType.FORMATION.value,
                },
            ],
        )
    )

    db.commit()
