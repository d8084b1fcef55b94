# roommate_chat/gateways/room_chat_gateway.py
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from roommate_chat.domain.read_tracker import RoomReadPolicy
from roommate_chat.gateways.conversation_gateway import ConversationGateway
from roommate_chat.gateways.interfaces import IRoomChatGateway
from roommate_chat.infrastructure import models
from roommate_chat.infrastructure.data_mappers import RoomChatMapper, RoomMessageMapper
from roommate_chat.infrastructure.uow import UnitOfWork, UoWModel


class RoomChatGateway(ConversationGateway, IRoomChatGateway):
    message_model = models.RoomMessage
    conversation_fk = "room_chat_id"

    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        super().__init__(session, uow, RoomReadPolicy(models.RoomChatRead))
        uow.mappers[models.RoomChat] = RoomChatMapper(session)
        uow.mappers[models.RoomMessage] = RoomMessageMapper(session)

    async def get_by_room(self, room_id: int) -> UoWModel | None:
        stmt = (
            select(models.RoomChat)
            .options(
                selectinload(models.RoomChat.participants),
                selectinload(models.RoomChat.messages).joinedload(
                    models.RoomMessage.sender
                ),
                selectinload(models.RoomChat.read_by),
            )
            .filter(models.RoomChat.room_id == room_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        chat = result.scalar_one_or_none()
        return UoWModel(chat, self.uow) if chat else None

    async def find_or_create(self, room: UoWModel) -> UoWModel:
        existing = await self.get_by_room(room.id)
        if existing:
            return existing

        # participants are a snapshot of the room at creation time
        member_ids = room.membership.member_ids
        stmt = select(models.User).filter(models.User.id.in_(member_ids))
        result = await self.session.execute(stmt)
        by_id = {user.id: user for user in result.scalars().all()}

        db_chat = models.RoomChat(
            room_id=room.id,
            participants=[by_id[uid] for uid in member_ids if uid in by_id],
            messages=[],
            read_by=[],
        )
        return await self._insert_or_fetch(db_chat, lambda: self.get_by_room(room.id))
