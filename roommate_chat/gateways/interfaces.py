# roommate_chat/gateways/interfaces.py
from abc import ABC, abstractmethod
from typing import List, Optional

from roommate_chat.domain.message_log import MessageDraft, PageWindow
from roommate_chat.infrastructure.uow import UoWModel


class IUserGateway(ABC):
    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def get_active_user(self, user_id: int) -> Optional[UoWModel]:
        pass


class IRoomGateway(ABC):
    @abstractmethod
    async def get_room(self, room_id: int) -> Optional[UoWModel]:
        pass


class IConversationGateway(ABC):
    @abstractmethod
    async def append_message(self, conversation: UoWModel, draft: MessageDraft) -> UoWModel:
        pass

    @abstractmethod
    async def mark_read(self, conversation: UoWModel, user_id: int) -> int:
        pass

    @abstractmethod
    def unread_count(self, conversation: UoWModel, user_id: int) -> int:
        pass

    @abstractmethod
    async def get_messages_page(
        self, conversation_id: int, page: int, limit: int
    ) -> tuple[List[UoWModel], PageWindow]:
        pass


class IDirectChatGateway(IConversationGateway):
    @abstractmethod
    async def get_chat(self, chat_id: int) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def find_active(
        self, room_id: int, user_a_id: int, user_b_id: int
    ) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def find_or_create(
        self, room_id: int, user_a_id: int, user_b_id: int
    ) -> UoWModel:
        pass

    @abstractmethod
    async def get_all(self, user_id: int) -> List[UoWModel]:
        pass

    @abstractmethod
    async def deactivate(self, chat: UoWModel) -> UoWModel:
        pass


class IRoomChatGateway(IConversationGateway):
    @abstractmethod
    async def get_by_room(self, room_id: int) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def find_or_create(self, room: UoWModel) -> UoWModel:
        pass
