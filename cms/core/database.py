"""
Database connection management with SQLAlchemy and connection pooling.
"""
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncAttrs, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool, StaticPool

from cms.core.config import settings
from cms.core.logging import get_logger

logger = get_logger(__name__)

SLOW_QUERY_SECONDS = 0.5


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for all database models."""
    pass


def _build_engine():
    if settings.DATABASE_URL.startswith("sqlite"):
        # In-process database shared by every session
        return create_async_engine(
            settings.DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=settings.DEBUG,
        )
    if settings.DEBUG:
        # Simple configuration for development
        return create_async_engine(
            settings.DATABASE_URL,
            poolclass=NullPool,
            echo=True,  # Log SQL queries in debug mode
        )
    # Production configuration with connection pooling
    return create_async_engine(
        settings.DATABASE_URL,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_pre_ping=True,
        pool_recycle=3600,  # Recycle connections after 1 hour
        pool_timeout=30,
        echo=False,
    )


engine = _build_engine()

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False,
)


@event.listens_for(engine.sync_engine, "before_cursor_execute")
def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    """Record query start time."""
    context._query_start_time = time.perf_counter()


@event.listens_for(engine.sync_engine, "after_cursor_execute")
def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    """Warn about slow queries."""
    start = getattr(context, "_query_start_time", None)
    if start is None:
        return
    duration = time.perf_counter() - start
    if duration > SLOW_QUERY_SECONDS:
        logger.warning(
            "Slow database query detected",
            duration_ms=round(duration * 1000, 2),
            statement_preview=statement[:200],
        )


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run a block of work as one unit on the given session.

    Commits when the block completes, rolls back and re-raises otherwise.
    """
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get database session.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Initialize database tables."""
    # Register every mapped class on the metadata
    import cms.models  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await logger.ainfo("Database tables created successfully")
    except Exception as e:
        await logger.aerror("Failed to initialize database", error=str(e))
        raise


async def close_db() -> None:
    """Close database connections."""
    try:
        await engine.dispose()
        await logger.ainfo("Database connections closed")
    except Exception as e:
        await logger.aerror("Error closing database connections", error=str(e))
        raise
