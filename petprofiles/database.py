"""
database.py: async engine, session factory and the per-request session dependency.

Profile routes receive their session from get_db(); the store only flushes,
so a request's writes land in a single commit here. Tests swap get_db for a
SQLite-backed session through app.dependency_overrides.
"""
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from petprofiles.config import settings


class Base(DeclarativeBase):
    """Metadata root for PetProfileORM; alembic/env.py imports it from here."""


async_engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

# Objects stay readable after commit so routes can serialise them
AsyncSessionLocal = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield one session per request; commit if the handler returns, roll back if it raises."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
