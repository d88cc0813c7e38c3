from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    recipient_id: int
    sender_id: int | None
    title: str
    message: str
    type: str
    priority: int
    action_url: str | None
    action_type: str | None
    year: int | None
    annual_objective_id: int | None
    annual_evaluation_id: int | None
    is_read: bool
    is_archived: bool
    read_at: datetime | None
    created_at: datetime


class NotificationListOut(BaseModel):
    unread: int
    items: list[NotificationOut]
