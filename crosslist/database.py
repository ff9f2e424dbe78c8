# crosslist/database.py

# type: ignore[misc]
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from crosslist.core.config import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker] = None


def get_database_url() -> str:
    settings = get_settings()
    # Use environment variable directly if settings is empty
    database_url = settings.DATABASE_URL or os.environ.get('DATABASE_URL', '')

    # Convert postgresql:// to postgresql+asyncpg:// for async support
    if database_url.startswith('postgresql://'):
        database_url = database_url.replace('postgresql://', 'postgresql+asyncpg://', 1)
    return database_url


def create_engine(database_url: str) -> AsyncEngine:
    if database_url.startswith('postgresql'):
        return create_async_engine(
            database_url,
            echo=False,
            pool_size=10,
            max_overflow=20,
            pool_timeout=30,
            pool_recycle=1800
        )
    return create_async_engine(database_url, echo=False)


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        database_url = get_database_url()
        if not database_url:
            raise ValueError("DATABASE_URL is not set in environment variables")
        _engine = create_engine(database_url)
    return _engine


def get_session_factory() -> async_sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False
        )
    return _session_factory


@asynccontextmanager
async def get_session() -> AsyncSession:
    session = get_session_factory()()
    try:
        yield session
    finally:
        await session.close()


async def create_tables(engine: Optional[AsyncEngine] = None):
    """Create tables that do not exist yet (development and tests; production uses alembic)."""
    from crosslist import models  # noqa: F401  registers models on Base

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine():
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
