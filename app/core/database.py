"""
Weather Station - Database Configuration
Async SQLAlchemy (PostgreSQL via asyncpg, SQLite via aiosqlite)
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings


def build_engine(database_url: str, **kwargs) -> AsyncEngine:
    """Create an async engine for the given URL."""
    return create_async_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        **kwargs,
    )


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# Create async engine
engine = build_engine(settings.database_url)

# Session factory
async_session_maker = build_session_maker(engine)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


async def init_db(bind: AsyncEngine = engine) -> None:
    """Create tables that don't exist yet (local SQLite setups)."""
    # Register models on Base.metadata
    import app.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncSession:
    """Dependency for getting database session."""
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()
