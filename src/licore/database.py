"""Database engine and sessions."""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .config import settings

logger = logging.getLogger(__name__)

async_engine = create_async_engine(settings.database_url, pool_pre_ping=True)

# Review runs commit between stages and keep using their objects
async_session_factory = async_sessionmaker(async_engine, expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session dependency."""
    async with async_session_factory() as session:
        yield session


async def init_db() -> None:
    """Check that the database answers (called on startup)."""
    async with async_engine.connect() as conn:
        await conn.execute(text("SELECT 1"))

    url = make_url(settings.database_url)
    logger.info(f"Connected to database {url.database} on {url.host or 'localhost'}")
