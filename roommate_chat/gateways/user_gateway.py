# roommate_chat/gateways/user_gateway.py
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roommate_chat.gateways.interfaces import IUserGateway
from roommate_chat.infrastructure import models
from roommate_chat.infrastructure.uow import UnitOfWork, UoWModel


class UserGateway(IUserGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow

    async def get_user(self, user_id: int) -> UoWModel | None:
        stmt = select(models.User).filter(models.User.id == user_id)
        result = await self.session.execute(stmt)
        user = result.scalar_one_or_none()
        return UoWModel(user, self.uow) if user else None

    async def get_active_user(self, user_id: int) -> UoWModel | None:
        stmt = select(models.User).filter(
            models.User.id == user_id, models.User.is_active.is_(True)
        )
        result = await self.session.execute(stmt)
        user = result.scalar_one_or_none()
        return UoWModel(user, self.uow) if user else None
