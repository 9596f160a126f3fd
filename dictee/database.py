"""Async SQLAlchemy engine and session helpers."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from dictee.config import settings

engine = create_async_engine(settings.database_url, echo=False)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """FastAPI dependency that yields an async DB session."""
    async with async_session() as session:
        yield session


async def init_db() -> None:
    """Create all tables (idempotent)."""
    async with engine.begin() as conn:
        from dictee.models import (  # noqa: F401 – import so Base knows about them
            Attempt,
            DailyUsage,
            Sentence,
            Subscription,
            UserGoals,
            WordEvent,
        )
        await conn.run_sync(Base.metadata.create_all)


def dialect_insert(db: AsyncSession, model):
    """Return an ``INSERT`` construct that supports ``ON CONFLICT`` for the
    dialect *db* is bound to (PostgreSQL or SQLite)."""
    if db.get_bind().dialect.name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    else:
        from sqlalchemy.dialects.sqlite import insert
    return insert(model)
