# roommate_chat/gateways/direct_chat_gateway.py
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from roommate_chat.domain.entities import pair_key
from roommate_chat.domain.exceptions import InvalidOperationError
from roommate_chat.domain.read_tracker import DirectReadPolicy
from roommate_chat.gateways.conversation_gateway import ConversationGateway
from roommate_chat.gateways.interfaces import IDirectChatGateway
from roommate_chat.infrastructure import models
from roommate_chat.infrastructure.data_mappers import (
    DirectChatMapper,
    DirectMessageMapper,
)
from roommate_chat.infrastructure.uow import UnitOfWork, UoWModel


def _chat_options():
    return (
        joinedload(models.DirectChat.room),
        joinedload(models.DirectChat.participant_a),
        joinedload(models.DirectChat.participant_b),
        selectinload(models.DirectChat.messages).joinedload(models.DirectMessage.sender),
        selectinload(models.DirectChat.read_by),
    )


class DirectChatGateway(ConversationGateway, IDirectChatGateway):
    message_model = models.DirectMessage
    conversation_fk = "chat_id"

    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        super().__init__(session, uow, DirectReadPolicy(models.DirectChatRead))
        uow.mappers[models.DirectChat] = DirectChatMapper(session)
        uow.mappers[models.DirectMessage] = DirectMessageMapper(session)

    async def _fetch_one(self, *criteria) -> UoWModel | None:
        stmt = (
            select(models.DirectChat)
            .options(*_chat_options())
            .filter(*criteria)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        chat = result.scalar_one_or_none()
        return UoWModel(chat, self.uow) if chat else None

    async def get_chat(self, chat_id: int) -> UoWModel | None:
        return await self._fetch_one(models.DirectChat.id == chat_id)

    async def find_active(
        self, room_id: int, user_a_id: int, user_b_id: int
    ) -> UoWModel | None:
        return await self._fetch_one(
            models.DirectChat.room_id == room_id,
            models.DirectChat.pair_key == pair_key(user_a_id, user_b_id),
            models.DirectChat.is_active.is_(True),
        )

    async def find_or_create(
        self, room_id: int, user_a_id: int, user_b_id: int
    ) -> UoWModel:
        if user_a_id == user_b_id:
            raise InvalidOperationError("Cannot create chat with yourself")

        existing = await self.find_active(room_id, user_a_id, user_b_id)
        if existing:
            return existing

        db_chat = models.DirectChat(
            room_id=room_id,
            participant_a_id=user_a_id,
            participant_b_id=user_b_id,
            is_active=True,
            messages=[],
            read_by=[],
        )
        return await self._insert_or_fetch(
            db_chat, lambda: self.find_active(room_id, user_a_id, user_b_id)
        )

    async def get_all(self, user_id: int) -> list[UoWModel]:
        stmt = (
            select(models.DirectChat)
            .options(*_chat_options())
            .filter(
                models.DirectChat.is_active.is_(True),
                or_(
                    models.DirectChat.participant_a_id == user_id,
                    models.DirectChat.participant_b_id == user_id,
                ),
            )
            .order_by(
                # a chat without messages ranks by its creation time
                func.coalesce(
                    models.DirectChat.last_message_at, models.DirectChat.created_at
                ).desc(),
                models.DirectChat.id.desc(),
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        chats = result.scalars().all()
        return [UoWModel(chat, self.uow) for chat in chats]

    async def deactivate(self, chat: UoWModel) -> UoWModel:
        chat.is_active = False
        await self.uow.commit()
        return chat
