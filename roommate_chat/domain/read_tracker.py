# roommate_chat/domain/read_tracker.py
"""
Read state for conversations.

Direct chats flag each message as read; room chats keep one read cursor
per user and count everything newer than it as unread.
"""
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from typing import Any

from roommate_chat.domain.entities import EPOCH, utcnow


class ReadPolicy(ABC):
    def __init__(self, receipt_factory: Callable[..., Any]):
        self.receipt_factory = receipt_factory

    def receipt_for(self, conversation: Any, user_id: int) -> Any | None:
        return next((r for r in conversation.read_by if r.user_id == user_id), None)

    def _upsert_receipt(self, conversation: Any, user_id: int, now: datetime) -> Any:
        receipt = self.receipt_for(conversation, user_id)
        if receipt is None:
            receipt = self.receipt_factory(user_id=user_id, read_at=now)
            conversation.read_by.append(receipt)
        else:
            receipt.read_at = now
        return receipt

    @abstractmethod
    def mark_read(self, conversation: Any, user_id: int, now: datetime | None = None) -> int:
        pass

    @abstractmethod
    def unread_count(self, conversation: Any, user_id: int) -> int:
        pass

    @abstractmethod
    def on_message_sent(self, conversation: Any, sender_id: int, now: datetime) -> None:
        pass


class DirectReadPolicy(ReadPolicy):
    def mark_read(self, conversation: Any, user_id: int, now: datetime | None = None) -> int:
        """Flag every unread message from the counterpart; returns how many changed."""
        now = now or utcnow()
        flipped = 0
        for message in conversation.messages:
            if message.sender_id != user_id and not message.is_read:
                message.is_read = True
                message.read_at = now
                flipped += 1
        self._upsert_receipt(conversation, user_id, now)
        return flipped

    def unread_count(self, conversation: Any, user_id: int) -> int:
        return sum(
            1
            for message in conversation.messages
            if message.sender_id != user_id and not message.is_read
        )

    def on_message_sent(self, conversation: Any, sender_id: int, now: datetime) -> None:
        # only the sender has seen the newest message
        receipt = self.receipt_for(conversation, sender_id)
        if receipt is None:
            receipt = self.receipt_factory(user_id=sender_id, read_at=now)
        else:
            receipt.read_at = now
        conversation.read_by = [receipt]


class RoomReadPolicy(ReadPolicy):
    def mark_read(self, conversation: Any, user_id: int, now: datetime | None = None) -> int:
        now = now or utcnow()
        unread = self.unread_count(conversation, user_id)
        self._upsert_receipt(conversation, user_id, now)
        return unread

    def cursor(self, conversation: Any, user_id: int) -> datetime:
        receipt = self.receipt_for(conversation, user_id)
        return receipt.read_at if receipt is not None else EPOCH

    def unread_count(self, conversation: Any, user_id: int) -> int:
        cursor = self.cursor(conversation, user_id)
        return sum(
            1
            for message in conversation.messages
            if message.sender_id != user_id and message.created_at > cursor
        )

    def on_message_sent(self, conversation: Any, sender_id: int, now: datetime) -> None:
        pass
