"""
Pytest fixtures for the test suite.

Each test gets its own in-memory SQLite database. StaticPool keeps the single
connection alive so the ORM session and the API test client see the same
data.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from types import SimpleNamespace

import pytest
from fastapi import Request
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


TEST_DB_URL = "sqlite:///:memory:"
CONFIG_DIR = Path(__file__).resolve().parents[1] / "annual_review" / "config"


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite engine for each test."""
    from annual_review.db.session import build_engine

    return build_engine(TEST_DB_URL, poolclass=StaticPool)


@pytest.fixture
def tables(engine):
    """Create all ORM tables on the test engine."""
    from annual_review.db.base import Base
    from annual_review.models import notifications, objectives, people  # noqa: F401

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(tables):
    TestSession = sessionmaker(bind=tables, autocommit=False, autoflush=False, class_=Session)
    session = TestSession()
    yield session
    session.close()


@pytest.fixture
def workflow_rules():
    from annual_review.workflow.rules import load_workflow_rules

    return load_workflow_rules(CONFIG_DIR / "workflow_rules.yaml")


@pytest.fixture
def clock():
    """Deterministic clock: every call is one minute after the previous one."""
    state = {"now": datetime(2025, 12, 1, 9, 0, 0)}

    def _now() -> datetime:
        state["now"] += timedelta(minutes=1)
        return state["now"]

    return _now


@pytest.fixture
def workflow(db_session, workflow_rules, clock):
    from annual_review.db.store import RecordStore
    from annual_review.workflow.engine import ObjectiveWorkflow

    return ObjectiveWorkflow(RecordStore(db_session), workflow_rules, clock=clock)


@pytest.fixture
def people(db_session):
    """Admin, a coach, the coach's employee, and an unrelated employee."""
    from annual_review.models.people import UserProfile

    admin = UserProfile(username="ada", email="ada@example.com", full_name="Ada Admin", role="admin")
    coach = UserProfile(username="cole", email="cole@example.com", full_name="Cole Coach", role="employee")
    db_session.add_all([admin, coach])
    db_session.flush()

    employee = UserProfile(
        username="emma", email="emma@example.com", full_name="Emma Employee", role="employee", coach_id=coach.id
    )
    other = UserProfile(username="otto", email="otto@example.com", full_name="Otto Other", role="employee")
    db_session.add_all([employee, other])
    db_session.commit()

    return SimpleNamespace(admin=admin, coach=coach, employee=employee, other=other)


@pytest.fixture
def callers(people):
    from annual_review.workflow.context import Caller

    return SimpleNamespace(
        **{name: Caller(user_id=p.id, role=p.role) for name, p in vars(people).items()}
    )


@pytest.fixture
def objective_items():
    from annual_review.workflow.statuses import ObjectiveType
    from annual_review.workflow.validation import ObjectiveItem

    return [
        ObjectiveItem(
            skill_id="api-design",
            skill_description="API design",
            theme_name="Engineering",
            smart_objective="Publish the v2 API guidelines",
            time_bound="Q2",
        ),
        ObjectiveItem(
            skill_id="mentoring",
            skill_description="Mentoring",
            theme_name="Leadership",
            smart_objective="Mentor two new hires",
            is_custom=True,
            objective_type=ObjectiveType.CUSTOM,
        ),
        ObjectiveItem(
            skill_id="k8s-training",
            skill_description="Kubernetes training",
            theme_name="Training",
            smart_objective="Pass the CKAD exam",
            is_custom=True,
            objective_type=ObjectiveType.FORMATION,
        ),
    ]


@pytest.fixture
def self_payload():
    """Build a complete self-evaluation payload for an objective."""
    from annual_review.workflow.validation import SelfEvaluationItem, SelfEvaluationPayload

    def _build(objective, score: int = 4, comment: str = "Good year") -> SelfEvaluationPayload:
        return SelfEvaluationPayload(
            evaluations=[
                SelfEvaluationItem(
                    objective_id=item["skill_id"],
                    employee_score=score,
                    employee_comment=f"Worked on {item['skill_id']}",
                    achievements="Delivered",
                    learnings="Plenty",
                )
                for item in objective.objectives
            ],
            employee_global_comment=comment,
            employee_global_score=score,
        )

    return _build


@pytest.fixture
def coach_payload():
    """Build a complete coach evaluation payload for a self-evaluation."""
    from annual_review.workflow.validation import CoachEvaluationItem, CoachEvaluationPayload

    def _build(evaluation, score: int = 4) -> CoachEvaluationPayload:
        return CoachEvaluationPayload(
            coach_evaluations=[
                CoachEvaluationItem(
                    objective_id=e["objective_id"],
                    coach_score=score,
                    coach_comment="Solid work",
                    strengths="Ownership",
                )
                for e in evaluation.evaluations
            ],
            coach_global_comment="Strong year overall",
            coach_global_score=score,
        )

    return _build


@pytest.fixture
def objective_in(workflow, people, callers, objective_items):
    """
    Create the employee's 2025 objective set and walk it to a given status.

    Usage: objective_in("approved")
    """
    steps = [
        ("submitted", lambda o: workflow.submit_objective_items(o.id, callers.employee)),
        ("approved", lambda o: workflow.validate_objective(o.id, callers.employee)),
        ("waiting_auto_evaluation", lambda o: workflow.open_self_evaluation(o.id, callers.admin)),
    ]

    def _walk(status: str = "draft", year: int = 2025):
        objective = workflow.create_objective(people.employee.id, year, objective_items, callers.employee)
        if status == "draft":
            return objective
        for reached, step in steps:
            step(objective)
            if reached == status:
                return objective
        raise ValueError(f"unsupported status {status!r}")

    return _walk


@pytest.fixture
def client(tables, people, workflow_rules):
    """API client on the test database, config loaded from the bundled YAML."""
    from fastapi.testclient import TestClient

    from annual_review.db.session import attach_authz, get_db
    from annual_review.main import create_app
    from annual_review.security.config import load_security_config

    app = create_app(load_config=False)
    app.state.security_config = load_security_config(CONFIG_DIR / "security_config.yaml")
    app.state.workflow_rules = workflow_rules

    TestSession = sessionmaker(bind=tables, autocommit=False, autoflush=False, class_=Session)

    def override_get_db(request: Request):
        db = attach_authz(TestSession(), request)
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    def _headers(profile) -> dict[str, str]:
        return {"Authorization": f"Bearer {profile.id}"}

    return _headers
