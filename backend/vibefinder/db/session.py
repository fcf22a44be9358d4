from __future__ import annotations

from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ..core.config import Settings, get_settings
from . import models  # noqa: F401  registers tables on Base.metadata
from .base import Base


def build_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(settings.postgres_dsn, echo=settings.sql_echo, pool_pre_ping=True)


engine = build_engine(get_settings())
AsyncSessionFactory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_session() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionFactory() as session:
        yield session


async def init_db() -> None:
    """Create missing tables; stored recommendations are seeded out of band."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
