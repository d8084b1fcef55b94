# roommate_chat/infrastructure/database.py
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class Database:
    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    ):
        self.engine = engine
        self.SessionLocal = session_factory or async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def connect(self) -> None:
        async with self.engine.begin() as conn:
            import roommate_chat.infrastructure.models  # noqa: F401

            await conn.run_sync(Base.metadata.create_all)

    async def disconnect(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.SessionLocal() as session:
            yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """Session committed on success and rolled back on any error."""
        async with self.session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise


def create_database(
    database_url: str,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    **engine_kwargs,
) -> Database:
    engine = create_async_engine(database_url, **engine_kwargs)
    return Database(engine, session_factory)
