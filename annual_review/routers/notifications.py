from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from annual_review.db.session import get_db
from annual_review.models.notifications import Notification
from annual_review.schemas.notifications import NotificationListOut, NotificationOut
from annual_review.security.dependencies import get_caller
from annual_review.services import notifications as notification_service
from annual_review.workflow.context import Caller

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListOut)
def list_notifications(
    include_archived: bool = False,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> NotificationListOut:
    items = notification_service.list_notifications(db, caller.user_id, include_archived=include_archived)
    return NotificationListOut(
        unread=notification_service.unread_count(db, caller.user_id),
        items=[NotificationOut.model_validate(n) for n in items],
    )


@router.post("/{id}/read", response_model=NotificationOut)
def mark_read(id: int, caller: Caller = Depends(get_caller), db: Session = Depends(get_db)) -> Notification:
    return notification_service.mark_read(db, id, caller)


@router.post("/{id}/archive", response_model=NotificationOut)
def archive(id: int, caller: Caller = Depends(get_caller), db: Session = Depends(get_db)) -> Notification:
    return notification_service.archive(db, id, caller)
