"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.adapters.persistence.database import get_session
from caseflow.config import settings
from caseflow.infrastructure.api.dependencies import sweep_in_progress

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(session: AsyncSession = Depends(get_session)):
    """Database connectivity plus the escalation settings this process runs with."""
    try:
        await session.execute(text("SELECT 1"))
        database = "connected"
    except Exception as e:
        database = f"error: {e}"

    return {
        "status": "ok" if database == "connected" else "degraded",
        "database": database,
        "escalation": {
            "sweep_running": sweep_in_progress(),
            "acceptance_window_hours": settings.acceptance_window_hours,
            "max_auto_reassignment_attempts": settings.max_auto_reassignment_attempts,
        },
    }
