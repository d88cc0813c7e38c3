from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from annual_review.db.session import get_db
from annual_review.models.people import UserProfile
from annual_review.schemas.people import UserOut
from annual_review.security.dependencies import get_current_user

router = APIRouter(tags=["people"])


@router.get("/me", response_model=UserOut)
def me(user: UserProfile = Depends(get_current_user)) -> UserProfile:
    return user


@router.get("/admin/users", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db)) -> list[UserProfile]:
    return list(db.scalars(select(UserProfile).order_by(UserProfile.id)).all())
