from __future__ import annotations

import logging

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from annual_review.models.people import UserProfile
from annual_review.security.config import SecurityConfig
from annual_review.security.tokens import SessionTokenValidator, TokenError
from annual_review.settings import Settings
from annual_review.workflow.errors import Unauthenticated

logger = logging.getLogger(__name__)


def extract_bearer_token(request: Request, config: SecurityConfig) -> str | None:
    """
    Read `Authorization: Bearer <token>`.

    Returns None when the header is absent; a present but malformed header is
    an authentication failure.
    """

    header_name = config.auth.authorization_header
    bearer_prefix = config.auth.bearer_prefix

    raw = request.headers.get(header_name)
    if not raw:
        logger.info("Missing Authorization header path=%s method=%s", request.url.path, request.method)
        return None

    prefix = f"{bearer_prefix} "
    if not raw.startswith(prefix):
        logger.warning("Invalid Authorization header format path=%s method=%s", request.url.path, request.method)
        raise Unauthenticated(f"Invalid {header_name}. Expected '{bearer_prefix} <token>'.")

    token = raw[len(prefix) :].strip()
    if not token:
        logger.warning("Empty bearer token path=%s method=%s", request.url.path, request.method)
        raise Unauthenticated(f"Invalid {header_name}. Missing token after '{bearer_prefix}'.")
    return token


def resolve_user_id(token: str, config: SecurityConfig, settings: Settings) -> int:
    if config.auth.provider == "jwt":
        validator = SessionTokenValidator(
            secret=settings.jwt_secret or "",
            audience=settings.jwt_audience,
            leeway_seconds=settings.jwt_leeway_seconds,
        )
        try:
            return validator.validate(token).user_id
        except TokenError as exc:
            raise Unauthenticated(str(exc)) from exc

    # dummy provider: the token is the user id
    try:
        return int(token)
    except ValueError as exc:
        logger.warning("Bearer token not an int (dummy provider expects a user id)")
        raise Unauthenticated("Invalid bearer token (expected integer user id).") from exc


def load_user(db: Session, user_id: int) -> UserProfile:
    user = db.execute(select(UserProfile).where(UserProfile.id == user_id)).scalar_one_or_none()

    if user is None or not user.is_active:
        raise Unauthenticated("Invalid or inactive user")

    return user


def load_coachee_ids(db: Session, user_id: int) -> frozenset[int]:
    return frozenset(db.scalars(select(UserProfile.id).where(UserProfile.coach_id == user_id)).all())
