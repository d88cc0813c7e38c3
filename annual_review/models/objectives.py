from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from annual_review.db.base import Base


class AnnualObjective(Base):
    __tablename__ = "annual_objectives"
    __table_args__ = (UniqueConstraint("employee_id", "year", name="uq_annual_objective_employee_year"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    employee_id: Mapped[int] = mapped_column(ForeignKey("user_profiles.id"), nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    # Reference data owned elsewhere; carried as opaque ids.
    career_pathway_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    career_level_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Ordered list of objective items (skill_id, SMART fields, objective_type...).
    objectives: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    status: Mapped[str] = mapped_column(String(40), default="draft", nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    @property
    def skill_ids(self) -> list[str]:
        return [str(item.get("skill_id", "")) for item in self.objectives or []]


class AnnualEvaluation(Base):
    __tablename__ = "annual_evaluations"
    __table_args__ = (
        UniqueConstraint("annual_objective_id", "employee_id", "year", name="uq_annual_evaluation_objective"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # Plain reference, no FK: deleting an objective leaves its evaluations in place.
    annual_objective_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    employee_id: Mapped[int] = mapped_column(ForeignKey("user_profiles.id"), nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    evaluations: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    employee_global_comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    employee_global_score: Mapped[int | None] = mapped_column(Integer, nullable=True)

    status: Mapped[str] = mapped_column(String(20), default="draft", nullable=False, index=True)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )


class AnnualCoachEvaluation(Base):
    __tablename__ = "annual_coach_evaluations"
    __table_args__ = (
        UniqueConstraint("annual_evaluation_id", "coach_id", name="uq_annual_coach_evaluation_coach"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    annual_evaluation_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    annual_objective_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    coach_id: Mapped[int] = mapped_column(ForeignKey("user_profiles.id"), nullable=False, index=True)
    employee_id: Mapped[int] = mapped_column(ForeignKey("user_profiles.id"), nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    coach_evaluations: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    coach_global_comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    coach_global_score: Mapped[int | None] = mapped_column(Integer, nullable=True)

    status: Mapped[str] = mapped_column(String(20), default="draft", nullable=False, index=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )
