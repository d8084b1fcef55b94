# roommate_chat/infrastructure/schemas.py
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from roommate_chat.domain.entities import MessageType
from roommate_chat.domain.message_log import PageWindow

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )


class RequestModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )


class UserBasic(CamelModel):
    id: int
    name: str
    avatar: str | None = None


class User(UserBasic):
    email: str


class RoomBasic(CamelModel):
    id: int
    title: str
    owner_id: int


class LastMessage(CamelModel):
    content: str | None = None
    sender: int | None = None
    timestamp: datetime | None = None


class ReadReceipt(CamelModel):
    user_id: int
    read_at: datetime


class MessageBase(CamelModel):
    id: int
    sender_id: int
    sender: UserBasic
    content: str
    message_type: MessageType
    file_url: str | None = None
    created_at: datetime


class DirectMessage(MessageBase):
    chat_id: int
    is_read: bool
    read_at: datetime | None = None


class RoomMessage(MessageBase):
    room_chat_id: int


class DirectChatSummary(CamelModel):
    id: int
    room: RoomBasic
    participants: list[User]
    last_message: LastMessage | None = None
    read_by: list[ReadReceipt] = Field(default_factory=list)
    is_active: bool
    created_at: datetime
    updated_at: datetime
    unread_count: int = 0


class DirectChat(DirectChatSummary):
    messages: list[DirectMessage] = Field(default_factory=list)


class RoomChat(CamelModel):
    id: int
    room_id: int
    participants: list[User]
    last_message: LastMessage | None = None
    read_by: list[ReadReceipt] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    unread_count: int = 0


class PageRef(CamelModel):
    page: int
    limit: int


class Pagination(CamelModel):
    has_next: bool
    has_prev: bool
    next: PageRef | None = None
    prev: PageRef | None = None

    @classmethod
    def from_window(cls, window: PageWindow) -> "Pagination":
        return cls(
            has_next=window.has_next,
            has_prev=window.has_prev,
            next=PageRef(page=window.page + 1, limit=window.limit)
            if window.has_next
            else None,
            prev=PageRef(page=window.page - 1, limit=window.limit)
            if window.has_prev
            else None,
        )


class MessagePage(CamelModel, Generic[T]):
    success: bool = True
    count: int
    total: int
    pagination: Pagination
    data: list[T]


class DataResponse(CamelModel, Generic[T]):
    success: bool = True
    data: T


class ListResponse(CamelModel, Generic[T]):
    success: bool = True
    count: int
    data: list[T]


class SentMessageResponse(CamelModel, Generic[T]):
    success: bool = True
    message: str = "Message sent successfully"
    data: T


class UnreadResponse(CamelModel):
    success: bool = True
    unread: int


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class ErrorResponse(CamelModel):
    success: bool = False
    error: str


class DirectChatOpen(RequestModel):
    room_id: int
    participant_id: int


class MessageCreate(RequestModel):
    content: str | None = None
    message_type: MessageType = MessageType.TEXT
    file_url: str | None = None


class DirectMessageSend(MessageCreate):
    chat_id: int


class RoomMessageSend(MessageCreate):
    room_id: int
