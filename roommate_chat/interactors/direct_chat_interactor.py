# roommate_chat/interactors/direct_chat_interactor.py
import logging

from roommate_chat.domain import message_log
from roommate_chat.domain.entities import MessageType
from roommate_chat.domain.exceptions import (
    ForbiddenError,
    InvalidOperationError,
    NotFoundError,
)
from roommate_chat.gateways.interfaces import (
    IDirectChatGateway,
    IRoomGateway,
    IUserGateway,
)
from roommate_chat.infrastructure import schemas
from roommate_chat.infrastructure.uow import UoWModel


class DirectChatInteractor:
    def __init__(
        self,
        chat_gateway: IDirectChatGateway,
        room_gateway: IRoomGateway,
        user_gateway: IUserGateway,
        logger: logging.Logger | None = None,
        max_message_length: int = message_log.MAX_CONTENT_LENGTH,
        max_page_limit: int | None = None,
    ):
        self.chat_gateway = chat_gateway
        self.room_gateway = room_gateway
        self.user_gateway = user_gateway
        self.logger = logger or logging.getLogger(__name__)
        self.max_message_length = max_message_length
        self.max_page_limit = max_page_limit

    def _summary(self, chat: UoWModel, user_id: int) -> schemas.DirectChatSummary:
        summary = schemas.DirectChatSummary.model_validate(chat)
        summary.unread_count = self.chat_gateway.unread_count(chat, user_id)
        return summary

    async def _authorized_chat(
        self, chat_id: int, user_id: int, action: str = "access"
    ) -> UoWModel:
        chat = await self.chat_gateway.get_chat(chat_id)
        if not chat:
            raise NotFoundError("Chat not found")
        if not chat.has_participant(user_id):
            raise ForbiddenError(f"Not authorized to {action} this chat")
        return chat

    async def authorize(self, chat_id: int, user_id: int) -> None:
        await self._authorized_chat(chat_id, user_id)

    async def list_my_chats(self, user_id: int) -> list[schemas.DirectChatSummary]:
        chats = await self.chat_gateway.get_all(user_id)
        return [self._summary(chat, user_id) for chat in chats]

    async def open_direct_chat(
        self, user_id: int, room_id: int, participant_id: int
    ) -> schemas.DirectChatSummary:
        room = await self.room_gateway.get_room(room_id)
        if not room:
            raise NotFoundError("Room not found")

        participant = await self.user_gateway.get_user(participant_id)
        if not participant:
            raise NotFoundError("Participant not found")

        if participant_id == user_id:
            raise InvalidOperationError("Cannot create chat with yourself")

        chat = await self.chat_gateway.find_or_create(room.id, user_id, participant_id)
        return self._summary(chat, user_id)

    async def get_direct_chat(self, chat_id: int, user_id: int) -> schemas.DirectChat:
        chat = await self._authorized_chat(chat_id, user_id)
        await self.chat_gateway.mark_read(chat, user_id)
        result = schemas.DirectChat.model_validate(chat)
        result.unread_count = 0
        return result

    async def send_direct_message(
        self,
        chat_id: int,
        user_id: int,
        content: str | None,
        message_type: MessageType | str = MessageType.TEXT,
        file_url: str | None = None,
    ) -> tuple[schemas.DirectMessage, list[int]]:
        """Persist a message; returns it with the ids of the users to notify."""
        draft = message_log.build_message(
            user_id,
            content,
            message_type,
            file_url,
            max_length=self.max_message_length,
        )
        chat = await self._authorized_chat(chat_id, user_id, "send messages in")
        message = await self.chat_gateway.append_message(chat, draft)
        recipient_ids = [pid for pid in chat.participant_ids if pid != user_id]
        return schemas.DirectMessage.model_validate(message), recipient_ids

    async def paginate_direct_messages(
        self, chat_id: int, user_id: int, page: int = 1, limit: int = 50
    ) -> schemas.MessagePage[schemas.DirectMessage]:
        message_log.validate_page_request(page, limit, self.max_page_limit)
        chat = await self._authorized_chat(chat_id, user_id)
        messages, window = await self.chat_gateway.get_messages_page(
            chat.id, page, limit
        )
        return schemas.MessagePage[schemas.DirectMessage](
            count=len(messages),
            total=window.total,
            pagination=schemas.Pagination.from_window(window),
            data=[schemas.DirectMessage.model_validate(m) for m in messages],
        )

    async def mark_direct_read(self, chat_id: int, user_id: int) -> int:
        chat = await self._authorized_chat(chat_id, user_id)
        return await self.chat_gateway.mark_read(chat, user_id)

    async def deactivate_direct_chat(self, chat_id: int, user_id: int) -> None:
        chat = await self._authorized_chat(chat_id, user_id, "delete")
        await self.chat_gateway.deactivate(chat)
        self.logger.info(f"Direct chat {chat_id} deactivated by user {user_id}")

    async def ensure_direct_chat_for_request(
        self, room_id: int, requester_id: int, owner_id: int
    ) -> schemas.DirectChatSummary | None:
        """Open the owner/requester chat after a rental request is accepted.

        Failures are logged and swallowed; the acceptance itself must not fail.
        """
        try:
            return await self.open_direct_chat(owner_id, room_id, requester_id)
        except Exception as e:
            self.logger.error(
                f"Failed to create chat for room {room_id} "
                f"between {owner_id} and {requester_id}: {e!s}"
            )
            return None
