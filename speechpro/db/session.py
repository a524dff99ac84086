"""Async database engine and session management."""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from speechpro.config import get_settings

settings = get_settings()


class Base(DeclarativeBase):
    """Declarative base for all models."""


engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

async_session_maker = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency yielding a database session."""
    async with async_session_maker() as session:
        yield session


async def init_db():
    """Create all tables."""
    from speechpro.db import models  # noqa: F401 - register models

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
