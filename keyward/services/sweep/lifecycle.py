"""Sweep scheduler lifecycle management for the worker process."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog

from keyward.config import SweepConfig, get_settings
from keyward.db.session import get_async_session
from keyward.services.sweep.base import SweepTask
from keyward.services.sweep.scheduler import SweepScheduler
from keyward.services.sweep.tasks import ExpiredApiKeySweep

logger = structlog.get_logger()

# Global scheduler instance
_sweep_scheduler: SweepScheduler | None = None


class SessionPerCycleSweepScheduler(SweepScheduler):
    """Sweep scheduler that opens a fresh db session for each cycle.

    A long-running loop never reuses an identity map across cycles; the
    session commits when the cycle ends.
    """

    def __init__(self, config: SweepConfig) -> None:
        super().__init__(tasks=[], config=config)

    @asynccontextmanager
    async def _cycle_tasks(self) -> AsyncIterator[list[SweepTask]]:
        async with get_async_session() as db_session:
            yield [ExpiredApiKeySweep(db_session)]


async def init_sweep_scheduler() -> SweepScheduler:
    """Initialize the sweep scheduler.

    Called during worker startup, after database initialization. The
    scheduler is always created so a cycle can be triggered manually, but
    the background loop only starts if sweep.enabled=true.
    """
    global _sweep_scheduler

    sweep_config = get_settings().sweep

    logger.info(
        "sweep.init",
        enabled=sweep_config.enabled,
        interval_seconds=sweep_config.interval_seconds,
        run_on_startup=sweep_config.run_on_startup,
    )

    _sweep_scheduler = SessionPerCycleSweepScheduler(config=sweep_config)

    if not sweep_config.enabled:
        logger.info("sweep.background_disabled", reason="sweep.enabled=false")
        return _sweep_scheduler

    if sweep_config.run_on_startup:
        logger.info("sweep.run_on_startup.start")
        try:
            results = await _sweep_scheduler.run_once()
            logger.info(
                "sweep.run_on_startup.complete",
                affected=sum(r.affected_count for r in results),
                errors=sum(len(r.errors) for r in results),
            )
        except Exception as e:
            # Startup proceeds; the background loop retries next interval
            logger.exception("sweep.run_on_startup.failed", error=str(e))

    await _sweep_scheduler.start()

    return _sweep_scheduler


async def shutdown_sweep_scheduler() -> None:
    """Stop the sweep scheduler gracefully."""
    global _sweep_scheduler

    if _sweep_scheduler is not None:
        await _sweep_scheduler.stop()
        _sweep_scheduler = None


def get_sweep_scheduler() -> SweepScheduler | None:
    """Get the current sweep scheduler instance."""
    return _sweep_scheduler
