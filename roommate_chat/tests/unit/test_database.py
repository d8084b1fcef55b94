# roommate_chat/tests/unit/test_database.py
import pytest
from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import create_async_engine

from roommate_chat.infrastructure import models
from roommate_chat.infrastructure.database import Database, create_database


@pytest.fixture
async def in_memory_db():
    db = Database(engine=create_async_engine("sqlite+aiosqlite:///:memory:"))
    await db.connect()
    yield db
    await db.disconnect()


@pytest.mark.asyncio
async def test_database_connect_creates_tables(in_memory_db):
    async with in_memory_db.engine.connect() as conn:
        result = await conn.execute(
            text("SELECT name FROM sqlite_master WHERE type='table'")
        )
        tables = {row[0] for row in result}
    assert {"users", "rooms", "direct_chats", "direct_messages", "room_chats"} <= tables


@pytest.mark.asyncio
async def test_transaction_commits(in_memory_db):
    async with in_memory_db.transaction() as session:
        session.add(models.User(name="Ana", email="ana@example.com"))

    async with in_memory_db.session() as session:
        user = await session.scalar(select(models.User))
    assert user.name == "Ana"


@pytest.mark.asyncio
async def test_transaction_rolls_back_on_error(in_memory_db):
    with pytest.raises(RuntimeError):
        async with in_memory_db.transaction() as session:
            session.add(models.User(name="Ben", email="ben@example.com"))
            await session.flush()
            raise RuntimeError("boom")

    async with in_memory_db.session() as session:
        assert await session.scalar(select(models.User)) is None


@pytest.mark.asyncio
async def test_create_database():
    db = create_database("sqlite+aiosqlite:///:memory:")
    assert db.engine.url.drivername == "sqlite+aiosqlite"
    await db.disconnect()
