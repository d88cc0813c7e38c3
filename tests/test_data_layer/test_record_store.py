"""
Tests for RecordStore: exact-match reads, flushed writes and the
all-or-nothing transaction block.
"""
from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from annual_review.db.store import RecordStore
from annual_review.models.objectives import AnnualObjective
from annual_review.models.people import UserProfile
from annual_review.workflow.errors import Conflict, NotFound, StoreUnavailable


def _objective(employee_id: int, year: int, status: str = "draft") -> AnnualObjective:
    return AnnualObjective(employee_id=employee_id, year=year, objectives=[{"skill_id": "s1"}], status=status)


def test_find_filters_on_exact_values(db_session, people):
    store = RecordStore(db_session)
    with store.transaction():
        store.insert(_objective(people.employee.id, 2024, status="evaluated"))
        store.insert(_objective(people.employee.id, 2025))
        store.insert(_objective(people.other.id, 2025))

    rows = store.find(AnnualObjective, employee_id=people.employee.id)
    assert [r.year for r in rows] == [2024, 2025]

    assert [r.employee_id for r in store.find(AnnualObjective, year=2025, status="draft")] == [
        people.employee.id,
        people.other.id,
    ]
    assert store.find(AnnualObjective, year=2023) == []
    assert store.find_one(AnnualObjective, year=2023) is None


def test_get_missing_row_raises_not_found(db_session, people):
    with pytest.raises(NotFound, match="AnnualObjective 999"):
        RecordStore(db_session).get(AnnualObjective, 999)


def test_update_patches_columns(db_session, people):
    store = RecordStore(db_session)
    with store.transaction():
        row = store.insert(_objective(people.employee.id, 2025))
        store.update(AnnualObjective, row.id, {"status": "submitted"})

    db_session.expire_all()
    assert db_session.get(AnnualObjective, row.id).status == "submitted"


def test_update_unknown_column_raises(db_session, people):
    store = RecordStore(db_session)
    with store.transaction():
        row = store.insert(_objective(people.employee.id, 2025))

    with pytest.raises(AttributeError):
        with store.transaction():
            store.update(AnnualObjective, row.id, {"colour": "blue"})


def test_failed_block_writes_nothing(db_session, people):
    store = RecordStore(db_session)

    with pytest.raises(RuntimeError):
        with store.transaction():
            row = store.insert(_objective(people.employee.id, 2025))
            store.update(UserProfile, people.employee.id, {"full_name": "Renamed"})
            assert row.id is not None
            raise RuntimeError("boom")

    db_session.expire_all()
    assert store.find(AnnualObjective) == []
    assert store.get(UserProfile, people.employee.id).full_name == "Emma Employee"


def test_unique_violation_becomes_conflict(db_session, people):
    store = RecordStore(db_session)
    with store.transaction():
        store.insert(_objective(people.employee.id, 2025))

    with pytest.raises(Conflict):
        with store.transaction():
            store.insert(_objective(people.employee.id, 2025))

    assert len(store.find(AnnualObjective)) == 1


def test_delete_removes_row(db_session, people):
    store = RecordStore(db_session)
    with store.transaction():
        row = store.insert(_objective(people.employee.id, 2025))
    row_id = row.id

    with store.transaction():
        store.delete(AnnualObjective, row_id)

    assert store.find_one(AnnualObjective, id=row_id) is None


def test_operational_error_becomes_store_unavailable(db_session, people, monkeypatch):
    store = RecordStore(db_session)

    def _broken(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr(db_session, "scalars", _broken)

    with pytest.raises(StoreUnavailable):
        store.find(AnnualObjective)
