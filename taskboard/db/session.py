"""
Database session and engine configuration.

This file sets up the async database connection using SQLAlchemy
(aiosqlite by default, asyncpg for PostgreSQL).
"""

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool
from typing import Any, Dict

from taskboard.core.config import settings
from taskboard.db.base import Base


engine_kwargs: Dict[str, Any] = {}
if settings.DATABASE_URL.startswith("sqlite"):
    # SQLite connections are cheap; not pooling keeps them off any one event loop
    engine_kwargs["poolclass"] = NullPool

# Create the async database engine
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,  # When DEBUG=True, prints SQL queries to console
    future=True,
    **engine_kwargs,
)

# Create a session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,  # Keeps data accessible after commit
)

# Alias for dependencies
AsyncSessionLocal = async_session_maker


async def create_tables() -> None:
    """Create all tables known to the metadata (idempotent)."""
    # Import models so they register on Base.metadata
    import taskboard.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
