"""
Database connection and session management.

The trading floor itself is in-memory; the database only backs the
append-only swap proof journal written by the notification worker.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool, StaticPool

from src.core.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def normalize_database_url(url: str) -> str:
    """Map sync driver URLs onto their async drivers."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def create_engine_for_url(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for ``url``.

    In-memory SQLite shares a single connection (StaticPool) so every
    session sees the same tables; everything else uses NullPool.
    """
    db_url = normalize_database_url(url)
    if "sqlite" in db_url:
        connect_args = {"check_same_thread": False}
        poolclass = StaticPool if ":memory:" in db_url else NullPool
        return create_async_engine(db_url, echo=echo, poolclass=poolclass, connect_args=connect_args)
    return create_async_engine(db_url, echo=echo, poolclass=NullPool, pool_pre_ping=True)


def create_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory with the project's session defaults."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = create_engine_for_url(settings.database_url, echo=settings.debug)
async_session_maker = create_session_maker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    Yields:
        AsyncSession: Database session for the request.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create the journal tables if they do not exist yet."""
    # Import models so they register on Base.metadata
    from src.models import swaps  # noqa: F401

    target = bind or engine
    try:
        async with target.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


async def close_db(bind: AsyncEngine | None = None) -> None:
    """Close the database engine and cleanup connections."""
    await (bind or engine).dispose()
    logger.info("Database connections closed")
