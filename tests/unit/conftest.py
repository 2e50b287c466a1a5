"""Shared fixtures for unit tests: in-memory SQLite and a configured service."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

import keyward.models  # noqa: F401
from keyward.config import ApiKeyConfig
from keyward.services.api_key import ApiKeyService


@pytest.fixture
async def db_session():
    """Create in-memory SQLite database and session."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async_session_factory = sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def api_key_service(db_session: AsyncSession) -> ApiKeyService:
    """ApiKeyService with an explicit "test" environment tag."""
    return ApiKeyService(db_session, env="test", config=ApiKeyConfig())
