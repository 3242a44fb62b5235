"""Database engine management for the availability service."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from core.settings import settings


class DatabaseConfig:
    """Database configuration settings."""

    POOL_SIZE: int = settings.db_pool_size
    MAX_OVERFLOW: int = settings.db_max_overflow
    POOL_TIMEOUT: int = settings.db_pool_timeout
    POOL_RECYCLE: int = 3600
    POOL_PRE_PING: bool = True
    ECHO: bool = settings.db_echo


def create_engine(
    url: Optional[str] = None,
    pool_size: int = DatabaseConfig.POOL_SIZE,
    max_overflow: int = DatabaseConfig.MAX_OVERFLOW,
    echo: bool = DatabaseConfig.ECHO,
) -> AsyncEngine:
    """
    Create async SQLAlchemy engine.

    Args:
        url: Database URL (defaults to settings)
        pool_size: Number of connections to maintain in pool
        max_overflow: Max number of connections to create beyond pool_size
        echo: Whether to log all SQL statements

    Returns:
        Async SQLAlchemy engine
    """
    url = url or settings.async_database_url
    if url.startswith("sqlite"):
        # SQLite has no server-side pool to tune
        return create_async_engine(url, echo=echo, poolclass=NullPool)

    return create_async_engine(
        url,
        echo=echo,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=DatabaseConfig.POOL_TIMEOUT,
        pool_recycle=DatabaseConfig.POOL_RECYCLE,
        pool_pre_ping=DatabaseConfig.POOL_PRE_PING,
    )


# Engine is created on first use so importing the package never opens a driver
_engine: Optional[AsyncEngine] = None


def get_engine() -> AsyncEngine:
    """Get or create the process-wide engine."""
    global _engine
    if _engine is None:
        _engine = create_engine()
    return _engine


async def init_db(engine: Optional[AsyncEngine] = None) -> None:
    """Create all tables known to the metadata."""
    from .base import Base

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the engine and all pooled connections."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
    _engine = None
