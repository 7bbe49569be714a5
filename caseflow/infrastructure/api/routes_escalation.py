"""Escalation endpoint — trigger one sweep on demand."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.adapters.persistence.database import get_session
from caseflow.application.use_cases.escalation_sweep import EscalationSweepUseCase
from caseflow.infrastructure.api.dependencies import get_sweep_uc

router = APIRouter(prefix="/escalation", tags=["escalation"])


@router.post("/sweep")
async def run_sweep(
    uc: EscalationSweepUseCase = Depends(get_sweep_uc),
    session: AsyncSession = Depends(get_session),
):
    """Reassign or flag every pending assignment past its acceptance deadline."""
    result = await uc.execute()
    await session.commit()
    return {"status": "skipped" if result.skipped else "ok", **asdict(result)}
