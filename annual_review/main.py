from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from annual_review.db import filters as _filters  # noqa: F401  (register SQLAlchemy filters)
from annual_review.db.init_db import init_db
from annual_review.logging_config import configure_app_logging
from annual_review.routers import coaching, evaluations, health, notifications, objectives, people
from annual_review.security.config import load_security_config
from annual_review.security.dependencies import enforce_security
from annual_review.settings import get_settings
from annual_review.workflow.errors import FieldError, ValidationFailed, WorkflowError
from annual_review.workflow.rules import load_workflow_rules

logger = logging.getLogger(__name__)


async def workflow_error_handler(request: Request, exc: WorkflowError) -> JSONResponse:
    body: dict[str, object] = {"error_code": exc.error_code, "detail": exc.message}
    if isinstance(exc, ValidationFailed):
        body["fields"] = [e.to_dict() for e in exc.errors]
    elif exc.details:
        body["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=body)


def _field_name(loc: tuple) -> str:
    # ("body", "evaluations", 0, "employee_score") -> "evaluations[0].employee_score"
    parts = loc[1:] if len(loc) > 1 and loc[0] in ("body", "query", "path") else loc
    name = ""
    for part in parts:
        if isinstance(part, int):
            name += f"[{part}]"
        else:
            name = f"{name}.{part}" if name else str(part)
    return name


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed request payloads in the same shape as workflow validation errors."""
    errors = [FieldError(_field_name(tuple(e.get("loc", ()))), e.get("msg", "invalid")) for e in exc.errors()]
    logger.info("Request validation failed path=%s fields=%s", request.url.path, [e.field for e in errors])
    return await workflow_error_handler(request, ValidationFailed(errors))


def create_app(load_config: bool = True) -> FastAPI:
    """
    Build the application.

    With `load_config=False` the lifespan skips config loading and schema
    init; callers (tests) then set `app.state.security_config` and
    `app.state.workflow_rules` themselves.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings = get_settings()
        configure_app_logging(settings.log_level)
        logger.info("App startup beginning")

        if load_config:
            app.state.security_config = load_security_config(settings.resolved_security_config_path())
            logger.info("Loaded security config: %s", settings.resolved_security_config_path())
            app.state.workflow_rules = load_workflow_rules(settings.resolved_workflow_rules_path())
            logger.info("Loaded workflow rules: %s", settings.resolved_workflow_rules_path())
            init_db(seed=settings.seed_demo_data)
            logger.info("Database initialized (tables ensured + seed if needed)")

        yield

    # Global dependency: authentication and record scoping for every route.
    app = FastAPI(title="Annual Review", dependencies=[Depends(enforce_security)], lifespan=lifespan)
    app.add_exception_handler(WorkflowError, workflow_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(health.router)
    app.include_router(people.router)
    app.include_router(objectives.router)
    app.include_router(evaluations.router)
    app.include_router(coaching.router)
    app.include_router(notifications.router)

    return app


app = create_app()
