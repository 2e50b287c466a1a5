"""keyward worker entry point.

Initializes the database, seeds configured API keys and runs the expiry
sweep until SIGINT/SIGTERM.
"""

from __future__ import annotations

import asyncio
import signal

import structlog

from keyward import __version__
from keyward.config import get_settings
from keyward.db import close_db, get_async_session, init_db
from keyward.services.api_key import ApiKeyService
from keyward.services.sweep.lifecycle import init_sweep_scheduler, shutdown_sweep_scheduler

logger = structlog.get_logger()


async def startup() -> None:
    """Bring up the database, seeds and scheduler in order."""
    settings = get_settings()
    logger.info("keyward.startup", version=__version__, env=settings.app.env)

    await init_db()

    if settings.api_key.seeds:
        async with get_async_session() as db_session:
            created = await ApiKeyService(db_session).seed(settings.api_key.seeds)
        logger.info("keyward.seed.complete", created=len(created))

    await init_sweep_scheduler()


async def shutdown() -> None:
    """Tear down in reverse startup order."""
    logger.info("keyward.shutdown")
    await shutdown_sweep_scheduler()
    await close_db()


async def serve(stop: asyncio.Event | None = None) -> None:
    """Run until ``stop`` is set.

    Without an explicit event, SIGINT/SIGTERM set an internal one.
    """
    if stop is None:
        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop.set)
            except NotImplementedError:
                # Windows event loops do not support signal handlers
                logger.warning("keyward.signal_handler_unavailable", signal=sig.name)

    await startup()
    try:
        await stop.wait()
    finally:
        await shutdown()


def main() -> None:
    asyncio.run(serve())


if __name__ == "__main__":
    main()
