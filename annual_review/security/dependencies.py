from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from annual_review.db.session import attach_authz, get_db
from annual_review.models.people import UserProfile
from annual_review.security.auth import extract_bearer_token, load_coachee_ids, load_user, resolve_user_id
from annual_review.security.config import SecurityConfig
from annual_review.security.context import AuthzContext
from annual_review.settings import get_settings
from annual_review.workflow.context import Caller
from annual_review.workflow.errors import Forbidden, Unauthenticated


def get_security_config(request: Request) -> SecurityConfig:
    config = getattr(request.app.state, "security_config", None)
    if config is None:
        raise RuntimeError("Security config not loaded. Did app startup run?")
    return config


def get_current_user(request: Request) -> UserProfile:
    user = getattr(request.state, "user", None)
    if user is None:
        raise Unauthenticated()
    return user


def get_authz(request: Request) -> AuthzContext:
    authz = getattr(request.state, "authz", None)
    if authz is None:
        raise Unauthenticated()
    return authz


def get_caller(authz: AuthzContext = Depends(get_authz)) -> Caller:
    return authz.caller


def enforce_security(
    request: Request,
    config: SecurityConfig = Depends(get_security_config),
    db: Session = Depends(get_db),
) -> None:
    """
    Global security dependency (configuration-driven).

    Resolves the caller for every route whose rule needs authentication,
    checks required roles, and records whether list queries for this route
    must be scoped to the caller's own and coachees' rows.
    """

    rule = config.match(request.url.path, request.method)
    if not rule.auth_required:
        return

    token = extract_bearer_token(request, config)
    if token is None:
        raise Unauthenticated("Missing bearer token")

    user = load_user(db, resolve_user_id(token, config, get_settings()))
    request.state.user = user

    if rule.required_roles and user.role not in rule.required_roles:
        raise Forbidden(
            f"Insufficient role. Required one of: {sorted(rule.required_roles)}",
            details={"required_roles": sorted(rule.required_roles)},
        )

    authz = AuthzContext(
        user_id=user.id,
        role=user.role,
        coachee_ids=load_coachee_ids(db, user.id),
        scope_records=rule.scope_records,
    )
    request.state.authz = authz
    # The route shares this session; get_db ran before the caller was known.
    attach_authz(db, request)
