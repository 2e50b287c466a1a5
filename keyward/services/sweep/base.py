"""Sweep task base classes and result structures."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class SweepResult:
    """Result of a sweep task execution.

    Attributes:
        task_name: Name of the sweep task
        affected_count: Number of records changed by the task
        errors: List of error messages
    """

    task_name: str = ""
    affected_count: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Whether the task completed without errors."""
        return len(self.errors) == 0

    def add_error(self, error: str) -> None:
        """Add an error message."""
        self.errors.append(error)


class SweepTask(ABC):
    """Abstract base class for periodic maintenance tasks over API keys."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the task name (for logging)."""
        ...

    @abstractmethod
    async def run(self) -> SweepResult:
        """Execute the task and summarize what it changed."""
        ...
