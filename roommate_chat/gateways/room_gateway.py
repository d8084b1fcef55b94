# roommate_chat/gateways/room_gateway.py
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from roommate_chat.gateways.interfaces import IRoomGateway
from roommate_chat.infrastructure import models
from roommate_chat.infrastructure.uow import UnitOfWork, UoWModel


class RoomGateway(IRoomGateway):
    """Read-only access to room listings; membership is re-read on every call."""

    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow

    async def get_room(self, room_id: int) -> UoWModel | None:
        stmt = (
            select(models.Room)
            .options(selectinload(models.Room.tenants))
            .filter(models.Room.id == room_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        room = result.scalar_one_or_none()
        return UoWModel(room, self.uow) if room else None
