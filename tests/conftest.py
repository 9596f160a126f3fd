"""
Shared fixtures: a throwaway SQLite database per test and an HTTP client
wired to it.
"""

import datetime as dt

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from dictee.database import Base, get_db
from dictee.enums import ActionType, CefrLevel, Theme
from dictee.models import Sentence, WordEvent


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Create a fresh database file with all tables"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """HTTP client talking to the app, with get_db pointed at the test database"""
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def sentence(db):
    """A stored reference sentence"""
    s = Sentence(
        text="Le chat dort.",
        translation="The cat is sleeping.",
        difficulty=CefrLevel.A1,
        theme=Theme.GENERAL,
    )
    db.add(s)
    await db.commit()
    return s


@pytest.fixture
def add_event(db):
    """Insert a WordEvent with an explicit timestamp"""

    async def _add(
        word: str,
        action_type: ActionType,
        created_at: dt.datetime,
        user_id: str = "user-1",
        session_id: str = "session-1",
        repeat_count: int = 1,
    ) -> WordEvent:
        event = WordEvent(
            user_id=user_id,
            session_id=session_id,
            word=word,
            action_type=action_type,
            repeat_count=repeat_count,
            created_at=created_at,
        )
        db.add(event)
        await db.commit()
        return event

    return _add
