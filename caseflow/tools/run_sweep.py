"""Run the escalation sweep outside the API process.

Usage:
    python -m caseflow.tools.run_sweep               # one sweep, then exit
    python -m caseflow.tools.run_sweep --interval    # every SWEEP_INTERVAL_SECONDS
    python -m caseflow.tools.run_sweep --interval 600
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from caseflow.adapters.persistence.database import async_session_factory, engine
from caseflow.application.use_cases.escalation_sweep import SweepResult
from caseflow.config import settings
from caseflow.infrastructure.api.dependencies import build_sweep

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def run_once(lock: asyncio.Lock) -> SweepResult:
    """One sweep in its own transaction."""
    async with async_session_factory() as session:
        try:
            result = await build_sweep(session, lock).execute()
            await session.commit()
        except Exception:
            await session.rollback()
            raise
    return result


async def run_forever(interval: int) -> None:
    # Runs are sequential, so a slow sweep delays the next one instead of overlapping it.
    lock = asyncio.Lock()
    logger.info("Escalation sweep loop started (interval=%ds)", interval)
    while True:
        try:
            result = await run_once(lock)
            if result.skipped:
                logger.info("Sweep skipped: another sweep holds the lock")
        except Exception:
            logger.exception("Escalation sweep failed")
        await asyncio.sleep(interval)


async def _main(interval: int | None) -> None:
    try:
        if interval is None:
            result = await run_once(asyncio.Lock())
            logger.info(
                "Sweep finished: processed=%d reassigned=%d flagged=%d failed=%d skipped=%s",
                result.processed, result.reassigned, result.flagged,
                result.failed, result.skipped,
            )
        else:
            await run_forever(interval)
    finally:
        await engine.dispose()


def main():
    parser = argparse.ArgumentParser(description="Reassign or flag overdue assignments")
    parser.add_argument(
        "--interval", type=int, nargs="?", const=settings.sweep_interval_seconds, default=None,
        help="Keep running, sweeping every N seconds (default N: SWEEP_INTERVAL_SECONDS)",
    )
    args = parser.parse_args()

    if args.interval is not None and args.interval <= 0:
        parser.error("--interval must be positive")

    asyncio.run(_main(args.interval))


if __name__ == "__main__":
    main()
