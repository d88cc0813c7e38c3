from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from annual_review.db.base import Base


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    recipient_id: Mapped[int] = mapped_column(ForeignKey("user_profiles.id"), nullable=False, index=True)
    sender_id: Mapped[int | None] = mapped_column(ForeignKey("user_profiles.id"), nullable=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(20), default="info", nullable=False)
    priority: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    action_url: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # What the notification is about; workflow bookkeeping filters on these.
    action_type: Mapped[str | None] = mapped_column(String(60), nullable=True, index=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    annual_objective_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    annual_evaluation_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    read_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
