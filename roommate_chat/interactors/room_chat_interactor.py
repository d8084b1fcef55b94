# roommate_chat/interactors/room_chat_interactor.py
import logging

from roommate_chat.domain import message_log
from roommate_chat.domain.entities import MessageType
from roommate_chat.domain.exceptions import ForbiddenError, NotFoundError
from roommate_chat.domain.message_log import PageWindow
from roommate_chat.gateways.interfaces import IRoomChatGateway, IRoomGateway
from roommate_chat.infrastructure import schemas
from roommate_chat.infrastructure.uow import UoWModel


class RoomChatInteractor:
    """Group chat of a room; every call is checked against the room's current members."""

    def __init__(
        self,
        chat_gateway: IRoomChatGateway,
        room_gateway: IRoomGateway,
        logger: logging.Logger | None = None,
        max_message_length: int = message_log.MAX_CONTENT_LENGTH,
        max_page_limit: int | None = None,
    ):
        self.chat_gateway = chat_gateway
        self.room_gateway = room_gateway
        self.logger = logger or logging.getLogger(__name__)
        self.max_message_length = max_message_length
        self.max_page_limit = max_page_limit

    async def _authorized_room(
        self, room_id: int, user_id: int, action: str = "access"
    ) -> UoWModel:
        room = await self.room_gateway.get_room(room_id)
        if not room:
            raise NotFoundError("Room not found")
        if not room.membership.is_member(user_id):
            raise ForbiddenError(f"Not authorized to {action} this room chat")
        return room

    async def authorize_member(self, room_id: int, user_id: int) -> None:
        await self._authorized_room(room_id, user_id)

    async def open_room_chat(self, room_id: int, user_id: int) -> schemas.RoomChat:
        room = await self._authorized_room(room_id, user_id)
        chat = await self.chat_gateway.find_or_create(room)
        result = schemas.RoomChat.model_validate(chat)
        result.unread_count = self.chat_gateway.unread_count(chat, user_id)
        return result

    async def send_room_message(
        self,
        room_id: int,
        user_id: int,
        content: str | None,
        message_type: MessageType | str = MessageType.TEXT,
        file_url: str | None = None,
    ) -> schemas.RoomMessage:
        draft = message_log.build_message(
            user_id,
            content,
            message_type,
            file_url,
            max_length=self.max_message_length,
        )
        room = await self._authorized_room(room_id, user_id, "send messages in")
        chat = await self.chat_gateway.find_or_create(room)
        message = await self.chat_gateway.append_message(chat, draft)
        return schemas.RoomMessage.model_validate(message)

    async def paginate_room_messages(
        self, room_id: int, user_id: int, page: int = 1, limit: int = 50
    ) -> schemas.MessagePage[schemas.RoomMessage]:
        message_log.validate_page_request(page, limit, self.max_page_limit)
        await self._authorized_room(room_id, user_id)

        chat = await self.chat_gateway.get_by_room(room_id)
        if not chat:
            messages, window = [], message_log.page_window(0, page, limit)
        else:
            messages, window = await self.chat_gateway.get_messages_page(
                chat.id, page, limit
            )
        return self._page(messages, window)

    def _page(self, messages: list, window: PageWindow) -> schemas.MessagePage[schemas.RoomMessage]:
        return schemas.MessagePage[schemas.RoomMessage](
            count=len(messages),
            total=window.total,
            pagination=schemas.Pagination.from_window(window),
            data=[schemas.RoomMessage.model_validate(m) for m in messages],
        )

    async def mark_room_read(self, room_id: int, user_id: int) -> bool:
        """Move the caller's read cursor to now; False when the room has no chat yet."""
        await self._authorized_room(room_id, user_id)
        chat = await self.chat_gateway.get_by_room(room_id)
        if not chat:
            return False
        await self.chat_gateway.mark_read(chat, user_id)
        return True

    async def get_room_unread(self, room_id: int, user_id: int) -> int:
        await self._authorized_room(room_id, user_id)
        chat = await self.chat_gateway.get_by_room(room_id)
        if not chat:
            return 0
        return self.chat_gateway.unread_count(chat, user_id)
