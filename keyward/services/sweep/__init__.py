"""Expiry sweep service for keyward.

Periodically deactivates API keys whose validity window has ended.

Usage:
    from keyward.services.sweep import SweepScheduler

    scheduler = SweepScheduler(...)
    await scheduler.start()
"""

from keyward.services.sweep.base import SweepResult, SweepTask
from keyward.services.sweep.scheduler import SweepScheduler

__all__ = [
    "SweepResult",
    "SweepScheduler",
    "SweepTask",
]
