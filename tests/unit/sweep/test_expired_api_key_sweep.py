"""Unit tests for ExpiredApiKeySweep against in-memory SQLite."""

from __future__ import annotations

from datetime import timedelta

import pytest

from keyward.services.api_key import ApiKeyService
from keyward.services.sweep.tasks import ExpiredApiKeySweep
from keyward.utils.datetime import utcnow


class TestExpiredApiKeySweep:
    @pytest.mark.asyncio
    async def test_deactivates_expired_keys(
        self, db_session, api_key_service: ApiKeyService
    ):
        now = utcnow()
        expired = await api_key_service.create(
            "expired", "default", now - timedelta(days=7), now - timedelta(days=1)
        )
        current = await api_key_service.create(
            "current", "default", now - timedelta(days=7), now + timedelta(days=1)
        )

        task = ExpiredApiKeySweep(db_session, service=api_key_service)
        result = await task.run()

        assert task.name == "expired_api_key"
        assert result.task_name == "expired_api_key"
        assert result.affected_count == 1
        assert result.success is True
        assert (await api_key_service.find_one_by_id(expired.doc.id)).is_active is False
        assert (await api_key_service.find_one_by_id(current.doc.id)).is_active is True

    @pytest.mark.asyncio
    async def test_nothing_to_do(self, db_session, api_key_service: ApiKeyService):
        await api_key_service.create("no-window", "default")

        result = await ExpiredApiKeySweep(db_session, service=api_key_service).run()

        assert result.affected_count == 0
