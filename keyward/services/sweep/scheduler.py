"""Periodic runner for sweep tasks."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog

from keyward.services.sweep.base import SweepResult, SweepTask

if TYPE_CHECKING:
    from keyward.config import SweepConfig

logger = structlog.get_logger()


class SweepScheduler:
    """Runs sweep tasks in order, on demand or every ``interval_seconds``.

    A task that raises is logged and reported through its ``SweepResult``;
    the rest of the cycle still runs. Cycles never overlap: ``run_once``
    waits for an in-flight cycle, including one started by the background
    loop.

        scheduler = SweepScheduler([ExpiredApiKeySweep(db_session)], settings.sweep)
        await scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(
        self,
        tasks: list[SweepTask],
        config: "SweepConfig",
    ) -> None:
        self._tasks = list(tasks)
        self._config = config
        self._log = logger.bind(service="sweep_scheduler")

        self._task: asyncio.Task | None = None
        self._stopping = asyncio.Event()
        self._run_lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._task is not None

    @asynccontextmanager
    async def _cycle_tasks(self) -> AsyncIterator[list[SweepTask]]:
        """Provide the tasks for one cycle. Subclasses may build them per cycle."""
        yield self._tasks

    async def run_once(self) -> list[SweepResult]:
        """Run every task once and return their results in task order."""
        async with self._run_lock:
            self._log.info("sweep.cycle.start")

            async with self._cycle_tasks() as tasks:
                results = [await self._run_task(task) for task in tasks]

            self._log.info(
                "sweep.cycle.complete",
                total_affected=sum(r.affected_count for r in results),
                total_errors=sum(len(r.errors) for r in results),
            )
            return results

    async def _run_task(self, task: SweepTask) -> SweepResult:
        log = self._log.bind(task=task.name)
        log.info("sweep.task.start")

        try:
            result = await task.run()
        except Exception as e:
            log.exception("sweep.task.failed", error=str(e))
            result = SweepResult()
            result.add_error(f"Task failed: {e}")
        else:
            log.info(
                "sweep.task.complete",
                affected=result.affected_count,
                errors=len(result.errors),
            )

        result.task_name = task.name
        return result

    async def start(self) -> None:
        """Launch the background loop. No-op if it is already running."""
        if self._task is not None:
            self._log.warning("sweep.scheduler.already_running")
            return

        self._stopping.clear()
        self._task = asyncio.create_task(self._loop(), name="keyward-sweep")
        self._log.info(
            "sweep.scheduler.started",
            interval_seconds=self._config.interval_seconds,
        )

    async def stop(self) -> None:
        """Ask the loop to exit and wait for the current cycle to finish."""
        if self._task is None:
            return

        self._log.info("sweep.scheduler.stopping")
        self._stopping.set()
        try:
            await self._task
        finally:
            self._task = None
        self._log.info("sweep.scheduler.stopped")

    async def _loop(self) -> None:
        while not self._stopping.is_set():
            try:
                await self.run_once()
            except Exception as e:
                self._log.exception("sweep.scheduler.cycle_error", error=str(e))

            try:
                await asyncio.wait_for(
                    self._stopping.wait(),
                    timeout=self._config.interval_seconds,
                )
            except asyncio.TimeoutError:
                pass
