"""Root conftest: shared test configuration."""

import os

import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Settings are read at import time; keep tests off real services
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_matchup.db")
os.environ.setdefault("PROCESS_NOW_KEY", "test-process-key")
os.environ.setdefault("BOT_TOKEN", "")

import matchup.infrastructure.models  # noqa: E402,F401
from matchup.infrastructure.db.session import Base  # noqa: E402


@pytest_asyncio.fixture
async def session_factory():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()
