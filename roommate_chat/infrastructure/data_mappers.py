# roommate_chat/infrastructure/data_mappers.py

from typing import Protocol, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from roommate_chat.infrastructure import models

ModelT_contra = TypeVar("ModelT_contra", contravariant=True)


class DataMapper(Protocol[ModelT_contra]):
    async def insert(self, model: ModelT_contra):
        raise NotImplementedError

    async def update(self, model: ModelT_contra):
        raise NotImplementedError


class SessionMapper(DataMapper[ModelT_contra]):
    """Writes models through the session; ``update`` flushes so ids and defaults are populated."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(self, model: ModelT_contra):
        self.session.add(model)
        await self.session.flush()

    async def update(self, model: ModelT_contra):
        # the model is already attached; add() cascades to new children
        self.session.add(model)
        await self.session.flush()


class DirectChatMapper(SessionMapper[models.DirectChat]):
    pass


class DirectMessageMapper(SessionMapper[models.DirectMessage]):
    pass


class RoomChatMapper(SessionMapper[models.RoomChat]):
    pass


class RoomMessageMapper(SessionMapper[models.RoomMessage]):
    pass
