from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from annual_review.workflow.validation import ObjectiveItem


class AnnualObjectiveCreate(BaseModel):
    employee_id: int | None = None  # defaults to the caller
    year: int
    objectives: list[ObjectiveItem] = Field(default_factory=list)
    career_pathway_id: int | None = None
    career_level_id: int | None = None


class ObjectiveItemsUpdate(BaseModel):
    objectives: list[ObjectiveItem] = Field(default_factory=list)


class AnnualObjectiveOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    year: int
    career_pathway_id: int | None
    career_level_id: int | None
    objectives: list[dict[str, Any]]
    status: str
    created_at: datetime
    updated_at: datetime


class EvaluableOut(BaseModel):
    objective_id: int
    evaluable: bool
