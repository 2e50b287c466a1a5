"""ExpiredApiKeySweep - deactivate API keys past their end date."""

from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from keyward.services.api_key import ApiKeyService
from keyward.services.sweep.base import SweepResult, SweepTask

logger = structlog.get_logger()


class ExpiredApiKeySweep(SweepTask):
    """Sweep task for expiring API keys.

    Trigger condition:
        api_key.is_active AND api_key.end_date <= now AND NOT api_key.deleted

    Action:
        Single bulk UPDATE setting is_active = false. Records are not
        deleted and can be re-activated.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        *,
        service: ApiKeyService | None = None,
    ) -> None:
        self._service = service or ApiKeyService(db_session)
        self._log = logger.bind(sweep_task="expired_api_key")

    @property
    def name(self) -> str:
        return "expired_api_key"

    async def run(self) -> SweepResult:
        """Execute the expiry sweep."""
        result = SweepResult(task_name=self.name)
        result.affected_count = await self._service.inactive_many_by_end_date()

        self._log.info(
            "sweep.expired_api_key.done",
            deactivated=result.affected_count,
        )
        return result
