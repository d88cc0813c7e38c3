from __future__ import annotations

from collections.abc import Generator
from typing import Any

from fastapi import Request
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from annual_review.settings import get_settings


def build_engine(url: str, **kwargs: Any) -> Engine:
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, **kwargs)


engine = build_engine(get_settings().resolved_db_url())

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)


def attach_authz(db: Session, request: Request) -> Session:
    """
    Copy the request's `AuthzContext` (if any) to `Session.info["authz"]`,
    where `annual_review.db.filters` reads it to scope list queries.
    """

    authz = getattr(getattr(request, "state", None), "authz", None)
    if authz is not None:
        db.info["authz"] = authz
    return db


def get_db(request: Request) -> Generator[Session, None, None]:
    db = attach_authz(SessionLocal(), request)
    try:
        yield db
    finally:
        db.close()
