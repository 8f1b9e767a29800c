"""Declarative base, JSON column type and the process-wide async engine."""

from sqlalchemy import JSON, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from prdforge.core.config import get_settings

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    pass


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _engine_options(db_url: str, echo: bool) -> dict:
    options: dict = {"echo": echo}
    # SQLite (aiosqlite) uses a static pool; pool tuning only applies to servers
    if make_url(db_url).get_backend_name() != "sqlite":
        options.update(pool_pre_ping=True, pool_size=5, max_overflow=10)
    return options


async def init_db(url: str | None = None, create_tables: bool = True) -> None:
    """Create the engine and session factory once per process.

    With ``create_tables`` the schema is created from model metadata, which
    is what tests and local SQLite runs rely on. Deployed databases are
    migrated with Alembic and may pass ``create_tables=False``.
    """
    global _engine, _session_factory

    if _engine is not None:
        return

    settings = get_settings()
    db_url = url or settings.database_url

    _engine = create_async_engine(db_url, **_engine_options(db_url, settings.debug))
    _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)

    if create_tables:
        import prdforge.db.models  # noqa: F401

        async with _engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Raises RuntimeError if init_db() has not been called."""
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _session_factory


async def ping_db() -> None:
    """Round-trip a trivial query; raises whatever the driver raises."""
    async with get_session_factory()() as session:
        await session.execute(text("SELECT 1"))
