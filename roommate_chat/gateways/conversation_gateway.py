# roommate_chat/gateways/conversation_gateway.py
from collections.abc import Awaitable, Callable
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from roommate_chat.domain import message_log
from roommate_chat.domain.message_log import MessageDraft, PageWindow
from roommate_chat.domain.read_tracker import ReadPolicy
from roommate_chat.gateways.interfaces import IConversationGateway
from roommate_chat.infrastructure.uow import UnitOfWork, UoWModel


class ConversationGateway(IConversationGateway):
    """Message log and read state shared by direct and room chats."""

    message_model: Any
    conversation_fk: str

    def __init__(self, session: AsyncSession, uow: UnitOfWork, read_policy: ReadPolicy):
        self.session = session
        self.uow = uow
        self.read_policy = read_policy

    async def _insert_or_fetch(
        self, model: Any, fetch: Callable[[], Awaitable[UoWModel | None]]
    ) -> UoWModel:
        # a concurrent writer may win the unique index; its row is returned instead
        try:
            async with self.session.begin_nested():
                self.uow.register_new(model)
                await self.uow.commit()
        except IntegrityError:
            self.uow.rollback()
            existing = await fetch()
            if existing is None:
                raise
            return existing
        created = await fetch()
        if created is None:
            raise RuntimeError(f"{type(model).__name__} vanished after insert")
        return created

    async def get_message(self, message_id: int) -> UoWModel | None:
        stmt = (
            select(self.message_model)
            .options(joinedload(self.message_model.sender))
            .filter(self.message_model.id == message_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        message = result.scalar_one_or_none()
        return UoWModel(message, self.uow) if message else None

    async def append_message(self, conversation: UoWModel, draft: MessageDraft) -> UoWModel:
        message = self.message_model(
            sender_id=draft.sender_id,
            content=draft.content,
            message_type=draft.message_type.value,
            file_url=draft.file_url,
            created_at=draft.created_at,
        )
        message_log.append(conversation, message)
        self.read_policy.on_message_sent(conversation, draft.sender_id, draft.created_at)
        self.uow.register_dirty(conversation)
        await self.uow.commit()

        return await self.get_message(message.id)

    async def mark_read(self, conversation: UoWModel, user_id: int) -> int:
        changed = self.read_policy.mark_read(conversation, user_id)
        self.uow.register_dirty(conversation)
        await self.uow.commit()
        return changed

    def unread_count(self, conversation: UoWModel, user_id: int) -> int:
        return self.read_policy.unread_count(conversation, user_id)

    async def get_messages_page(
        self, conversation_id: int, page: int, limit: int
    ) -> tuple[list[UoWModel], PageWindow]:
        fk = getattr(self.message_model, self.conversation_fk)
        total = await self.session.scalar(
            select(func.count(self.message_model.id)).filter(fk == conversation_id)
        )
        window = message_log.page_window(total or 0, page, limit)
        if window.size == 0:
            return [], window

        stmt = (
            select(self.message_model)
            .options(joinedload(self.message_model.sender))
            .filter(fk == conversation_id)
            .order_by(self.message_model.id)
            .offset(window.start)
            .limit(window.size)
        )
        result = await self.session.execute(stmt)
        messages = result.scalars().all()
        return [UoWModel(message, self.uow) for message in messages], window
