"""
Database Connection Module
Handles the SQLAlchemy async engine for PostgreSQL (psycopg) or SQLite (aiosqlite).
"""

import logging

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from qrdine.core.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


def _engine_options() -> dict:
    if settings.is_sqlite:
        # One connection per session; aiosqlite connections are bound to the
        # event loop that opened them.
        return {"poolclass": NullPool}
    return {
        "pool_size": 5,  # Connection pool size
        "max_overflow": 10,  # Extra connections when pool is full
        "pool_pre_ping": True,
    }


# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.sql_echo,
    **_engine_options(),
)

# Session factory - creates new database sessions
async_session_maker = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False  # Objects remain accessible after commit
)


# Base class for all our models
class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncSession:
    """
    Dependency injection for FastAPI routes.
    Yields a database session and ensures cleanup.
    """
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db(drop_existing: bool = False):
    """
    Create all tables in database.
    Called once at application startup; tests pass ``drop_existing``
    to start from an empty schema.
    """
    # Models must be imported so their tables are registered on Base.metadata
    import qrdine.models  # noqa: F401

    async with engine.begin() as conn:
        if drop_existing:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")
