"""CaseFlow — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from caseflow.adapters.persistence.database import engine
from caseflow.config import settings
from caseflow.domain.errors import (
    AssignmentError,
    Conflict,
    InvalidStateTransition,
    NoAvailableCaseworker,
    NotFound,
    Unauthorized,
    ValidationError,
)
from caseflow.infrastructure.api.routes_assignments import router as assignments_router
from caseflow.infrastructure.api.routes_caseworkers import router as caseworkers_router
from caseflow.infrastructure.api.routes_escalation import router as escalation_router
from caseflow.infrastructure.api.routes_health import router as health_router

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[AssignmentError], int] = {
    NotFound: 404,
    Conflict: 409,
    InvalidStateTransition: 409,
    NoAvailableCaseworker: 409,
    ValidationError: 400,
    Unauthorized: 403,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    try:
        async with engine.begin():
            pass  # Connection pool warmed up
        logger.info("Database connection established")
    except Exception as e:
        logger.warning("Database not available on startup: %s", e)
    yield
    await engine.dispose()


async def assignment_error_handler(request: Request, exc: AssignmentError) -> JSONResponse:
    status_code = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 500
    )
    if status_code == 500:
        logger.error("Unmapped assignment error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="CaseFlow — client assignment engine",
        description="Client-to-caseworker assignment, acceptance deadlines and escalation",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(AssignmentError, assignment_error_handler)

    # Register routers
    app.include_router(health_router, prefix="/api")
    app.include_router(assignments_router, prefix="/api")
    app.include_router(caseworkers_router, prefix="/api")
    app.include_router(escalation_router, prefix="/api")

    return app


app = create_app()
