# roommate_chat/domain/message_log.py
"""
Append-only message log shared by direct and room conversations.

Pages are counted from the newest message backwards: page 1 holds the most
recent ``limit`` messages, page 2 the ``limit`` before those, and so on.
Every page is returned oldest first.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Sequence

from roommate_chat.domain.entities import MessageType, utcnow
from roommate_chat.domain.exceptions import ValidationError

MAX_CONTENT_LENGTH = 1000


@dataclass(frozen=True)
class MessageDraft:
    sender_id: int
    content: str
    message_type: MessageType
    file_url: str | None
    created_at: datetime


@dataclass(frozen=True)
class PageWindow:
    page: int
    limit: int
    total: int
    start: int
    end: int

    @property
    def has_next(self) -> bool:
        return (self.page - 1) * self.limit + self.limit < self.total

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def size(self) -> int:
        return self.end - self.start


def build_message(
    sender_id: int,
    content: str | None,
    message_type: MessageType | str = MessageType.TEXT,
    file_url: str | None = None,
    max_length: int = MAX_CONTENT_LENGTH,
    now: datetime | None = None,
) -> MessageDraft:
    text = (content or "").strip()
    file_url = file_url or None
    if not text and not file_url:
        raise ValidationError("Message content or file is required")
    if len(text) > max_length:
        raise ValidationError(f"Message cannot exceed {max_length} characters")
    try:
        kind = MessageType(message_type or MessageType.TEXT)
    except ValueError:
        raise ValidationError(f"Unsupported message type: {message_type}")
    return MessageDraft(
        sender_id=sender_id,
        content=text,
        message_type=kind,
        file_url=file_url,
        created_at=now or utcnow(),
    )


def append(conversation: Any, message: Any) -> Any:
    """Append ``message`` and refresh the conversation's last-message cache."""
    conversation.messages.append(message)
    conversation.last_message_content = message.content
    conversation.last_message_sender_id = message.sender_id
    conversation.last_message_at = message.created_at
    conversation.updated_at = message.created_at
    return message


def validate_page_request(page: int, limit: int, max_limit: int | None = None) -> None:
    if page < 1:
        raise ValidationError("Page must be a positive integer")
    if limit < 1:
        raise ValidationError("Limit must be a positive integer")
    if max_limit is not None and limit > max_limit:
        raise ValidationError(f"Limit cannot exceed {max_limit}")


def page_window(total: int, page: int, limit: int) -> PageWindow:
    validate_page_request(page, limit)
    skipped = (page - 1) * limit
    end = max(0, total - skipped)
    start = max(0, total - skipped - limit)
    return PageWindow(page=page, limit=limit, total=total, start=start, end=end)


def paginate(messages: Sequence[Any], page: int, limit: int) -> tuple[list, PageWindow]:
    window = page_window(len(messages), page, limit)
    return list(messages[window.start : window.end]), window
