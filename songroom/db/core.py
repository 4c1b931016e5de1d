"""
Single database core module for songroom.

All database access goes through this module:
- get_engine(): lazily created async SQLAlchemy engine
- get_async_db(): async session context manager
- init_db(): create tables on startup
- dispose_engine(): drop the engine (shutdown, tests switching DATABASE_URL)
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from ..settings import get_settings
from .models import Base

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    global _engine, _session_factory
    if _engine is None:
        settings = get_settings()
        url = settings.DATABASE_URL
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)

        kwargs = {"future": True, "echo": False}
        # Test-aware pool: NullPool keeps connections off any single event loop
        if settings.pool_disabled or url.startswith("sqlite"):
            kwargs["poolclass"] = NullPool
        else:
            kwargs.update(
                pool_size=10,
                max_overflow=20,
                pool_pre_ping=True,
                pool_recycle=1800,
            )

        logger.info(
            "DB_ASYNC_ENGINE_INIT",
            extra={
                "meta": {
                    "driver": url.split(":", 1)[0],
                    "pool_disabled": "poolclass" in kwargs,
                }
            },
        )
        _engine = create_async_engine(url, **kwargs)
        _session_factory = async_sessionmaker(bind=_engine, expire_on_commit=False)
    return _engine


@asynccontextmanager
async def get_async_db() -> AsyncIterator[AsyncSession]:
    """Yield an async session; commit on success, roll back on error."""
    get_engine()
    assert _session_factory is not None
    session = _session_factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def init_db() -> None:
    """Create all tables that do not exist yet."""
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("DB_SCHEMA_READY", extra={"meta": {"tables": sorted(Base.metadata.tables)}})


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
