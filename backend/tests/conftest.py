"""Shared test fixtures for all test groups."""

import os

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from prdforge.db.base import Base
from prdforge.generation.llm_fake import FakeLLMClient


def database_url_for(tmp_path) -> str:
    """TEST_DATABASE_URL when set, otherwise a throwaway SQLite file."""
    return os.getenv("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'prdforge_test.db'}")


@pytest.fixture
def fake_llm():
    """Fresh FakeLLMClient with happy_path scenario (default)."""
    return FakeLLMClient(scenario="happy_path")


@pytest.fixture
def fake_llm_failing():
    """FakeLLMClient with llm_failure scenario."""
    return FakeLLMClient(scenario="llm_failure")


@pytest.fixture
async def session_factory(tmp_path):
    """Session factory on a fresh schema, bound to the pytest-asyncio loop."""
    engine = create_async_engine(database_url_for(tmp_path), echo=False)

    import prdforge.db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
