"""Unit tests for the sweep scheduler.

Tests scheduler lifecycle, run_once behavior and error isolation.
"""

from __future__ import annotations

import asyncio

import pytest

from keyward.config import SweepConfig
from keyward.services.sweep.base import SweepResult, SweepTask
from keyward.services.sweep.scheduler import SweepScheduler


class FakeSweepTask(SweepTask):
    """Fake sweep task for testing."""

    def __init__(self, name: str, affected: int = 0, errors: list[str] | None = None):
        self._name = name
        self._affected = affected
        self._errors = errors or []
        self.run_count = 0

    @property
    def name(self) -> str:
        return self._name

    async def run(self) -> SweepResult:
        self.run_count += 1
        result = SweepResult(affected_count=self._affected)
        for error in self._errors:
            result.add_error(error)
        return result


class RaisingSweepTask(SweepTask):
    """Sweep task that raises an exception."""

    def __init__(self, name: str, error: Exception):
        self._name = name
        self._error = error
        self.run_count = 0

    @property
    def name(self) -> str:
        return self._name

    async def run(self) -> SweepResult:
        self.run_count += 1
        raise self._error


@pytest.fixture
def sweep_config() -> SweepConfig:
    return SweepConfig(enabled=True, run_on_startup=False, interval_seconds=1)


class TestSweepResult:
    def test_success(self):
        result = SweepResult(task_name="t")
        assert result.success is True

        result.add_error("boom")
        assert result.success is False
        assert result.errors == ["boom"]


class TestSweepScheduler:
    """Tests for SweepScheduler."""

    @pytest.mark.asyncio
    async def test_run_once_executes_all_tasks(self, sweep_config):
        task1 = FakeSweepTask("task1", affected=2)
        task2 = FakeSweepTask("task2", affected=3)

        scheduler = SweepScheduler(tasks=[task1, task2], config=sweep_config)
        results = await scheduler.run_once()

        assert [r.task_name for r in results] == ["task1", "task2"]
        assert [r.affected_count for r in results] == [2, 3]
        assert task1.run_count == 1
        assert task2.run_count == 1

    @pytest.mark.asyncio
    async def test_run_once_continues_after_task_failure(self, sweep_config):
        task1 = FakeSweepTask("task1", affected=1)
        task2 = RaisingSweepTask("task2", RuntimeError("db down"))
        task3 = FakeSweepTask("task3", affected=2)

        scheduler = SweepScheduler(tasks=[task1, task2, task3], config=sweep_config)
        results = await scheduler.run_once()

        assert len(results) == 3
        assert results[1].task_name == "task2"
        assert results[1].success is False
        assert "db down" in results[1].errors[0]
        assert results[2].affected_count == 2
        assert task3.run_count == 1

    @pytest.mark.asyncio
    async def test_run_once_collects_errors(self, sweep_config):
        task = FakeSweepTask("task1", errors=["e1", "e2"])

        scheduler = SweepScheduler(tasks=[task], config=sweep_config)
        results = await scheduler.run_once()

        assert results[0].errors == ["e1", "e2"]

    @pytest.mark.asyncio
    async def test_concurrent_run_once_is_serialized(self, sweep_config):
        active = 0
        max_active = 0

        class SlowTask(FakeSweepTask):
            async def run(self) -> SweepResult:
                nonlocal active, max_active
                active += 1
                max_active = max(max_active, active)
                await asyncio.sleep(0.01)
                active -= 1
                return await super().run()

        task = SlowTask("slow")
        scheduler = SweepScheduler(tasks=[task], config=sweep_config)

        await asyncio.gather(scheduler.run_once(), scheduler.run_once())

        assert task.run_count == 2
        assert max_active == 1

    @pytest.mark.asyncio
    async def test_start_and_stop(self, sweep_config):
        task = FakeSweepTask("task1")
        scheduler = SweepScheduler(tasks=[task], config=sweep_config)

        await scheduler.start()
        assert scheduler.is_running is True

        # Let the first cycle run
        for _ in range(50):
            if task.run_count:
                break
            await asyncio.sleep(0.01)

        await scheduler.stop()

        assert scheduler.is_running is False
        assert task.run_count >= 1

    @pytest.mark.asyncio
    async def test_start_twice_is_noop(self, sweep_config):
        scheduler = SweepScheduler(tasks=[], config=sweep_config)

        await scheduler.start()
        first = scheduler._task
        await scheduler.start()

        assert scheduler._task is first
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self, sweep_config):
        scheduler = SweepScheduler(tasks=[], config=sweep_config)

        await scheduler.stop()

        assert scheduler.is_running is False

    @pytest.mark.asyncio
    async def test_stop_waits_for_in_flight_cycle(self, sweep_config):
        started = asyncio.Event()
        finished = False

        class SlowTask(FakeSweepTask):
            async def run(self) -> SweepResult:
                nonlocal finished
                started.set()
                await asyncio.sleep(0.05)
                finished = True
                return await super().run()

        scheduler = SweepScheduler(tasks=[SlowTask("slow")], config=sweep_config)

        await scheduler.start()
        await asyncio.wait_for(started.wait(), timeout=1)
        await scheduler.stop()

        assert finished is True
        assert scheduler.is_running is False
