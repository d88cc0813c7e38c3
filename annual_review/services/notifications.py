from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from annual_review.models.notifications import Notification
from annual_review.workflow.context import Caller
from annual_review.workflow.errors import Forbidden, NotFound

logger = logging.getLogger(__name__)


def list_notifications(db: Session, recipient_id: int, include_archived: bool = False) -> list[Notification]:
    stmt = select(Notification).where(Notification.recipient_id == recipient_id)
    if not include_archived:
        stmt = stmt.where(Notification.is_archived.is_(False))
    stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
    return list(db.scalars(stmt).all())


def unread_count(db: Session, recipient_id: int) -> int:
    stmt = select(func.count(Notification.id)).where(
        Notification.recipient_id == recipient_id,
        Notification.is_read.is_(False),
        Notification.is_archived.is_(False),
    )
    return int(db.scalar(stmt) or 0)


def _own_notification(db: Session, notification_id: int, caller: Caller) -> Notification:
    notification = db.get(Notification, notification_id)
    if notification is None:
        raise NotFound(f"Notification {notification_id} not found")
    if notification.recipient_id != caller.user_id:
        logger.info("Notifications: caller=%s denied access to notification=%s", caller.user_id, notification_id)
        raise Forbidden("Only the recipient can update a notification")
    return notification


def mark_read(db: Session, notification_id: int, caller: Caller) -> Notification:
    notification = _own_notification(db, notification_id, caller)
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = datetime.utcnow()
        db.commit()
    return notification


def archive(db: Session, notification_id: int, caller: Caller) -> Notification:
    notification = _own_notification(db, notification_id, caller)
    notification.is_archived = True
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = datetime.utcnow()
    db.commit()
    return notification
