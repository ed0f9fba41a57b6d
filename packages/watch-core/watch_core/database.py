"""Database connection and session management."""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

from watch_core.config import get_settings


@lru_cache
def get_engine() -> AsyncEngine:
    """
    Return the process-wide async engine, created on first use.

    Serverless runtimes (AWS Lambda, Netlify) run each invocation under a fresh
    event loop via asyncio.run(), so pooled asyncpg connections would be bound to a
    dead loop. NullPool opens a fresh connection per checkout there.
    """
    settings = get_settings()
    is_serverless = bool(os.getenv("AWS_LAMBDA_FUNCTION_NAME") or os.getenv("NETLIFY"))
    url = settings.database.url

    if is_serverless or url.startswith("sqlite"):
        return create_async_engine(url, echo=False, future=True, poolclass=NullPool)

    return create_async_engine(
        url,
        echo=False,
        future=True,
        pool_size=settings.database.pool_size,
        max_overflow=10,
    )


@lru_cache
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Return the async session factory bound to the process-wide engine."""
    return async_sessionmaker(get_engine(), expire_on_commit=False)


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Get async database session.

    Example:
        async with get_session() as session:
            result = await session.execute(select(Game))
    """
    async with get_session_maker()() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db() -> None:
    """
    Initialize database schema.

    Creates all tables defined in SQLModel.
    Note: In production, use Alembic migrations instead.
    """
    import watch_core.models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await get_engine().dispose()
    get_session_maker.cache_clear()
    get_engine.cache_clear()
