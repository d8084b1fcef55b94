# roommate_chat/domain/events.py
from typing import Any

from pydantic import BaseModel


class Event(BaseModel):
    pass


class DirectMessageCreated(Event):
    chat_id: int
    sender_id: int
    recipient_ids: list[int]
    message: dict[str, Any]
    origin_sid: str | None = None


class RoomMessageCreated(Event):
    room_id: int
    sender_id: int
    message: dict[str, Any]
    origin_sid: str | None = None
