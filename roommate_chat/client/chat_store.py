# roommate_chat/client/chat_store.py
"""
Client-side chat state fed by HTTP history and Socket.IO events.

Messages are plain dicts as the server sends them (camelCase keys). The same
message may arrive twice, once in the send acknowledgement and once as a
broadcast, or again with a history reload; it is stored once, keyed by id.
"""
import logging
import threading
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

DIRECT = "chat"
ROOM = "room"

ConversationKey = Tuple[str, int]

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class StoreEvent(Enum):
    """Events that can trigger state changes."""

    CHATS_LOADED = "chats_loaded"
    CHAT_UPDATED = "chat_updated"
    CHAT_REMOVED = "chat_removed"
    MESSAGES_LOADED = "messages_loaded"
    MESSAGE_RECEIVED = "message_received"
    UNREAD_COUNT_UPDATED = "unread_count_updated"
    SELECTION_CHANGED = "selection_changed"


def _sort_key(message: Dict[str, Any]):
    created_at = message.get("createdAt")
    if isinstance(created_at, str):
        try:
            created_at = datetime.fromisoformat(created_at)
        except ValueError:
            created_at = None
    if not isinstance(created_at, datetime):
        created_at = _OLDEST
    elif created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at, message.get("id") or 0


class ChatStore:
    def __init__(
        self, user_id: Optional[int] = None, logger: Optional[logging.Logger] = None
    ) -> None:
        self._lock = threading.RLock()
        self.user_id = user_id
        self.logger = logger or logging.getLogger("ChatStore")

        self._chats: List[Dict[str, Any]] = []
        self._messages: Dict[ConversationKey, Dict[int, Dict[str, Any]]] = {}
        self._unread: Dict[ConversationKey, int] = {}
        self._counted: set[tuple[str, int, int]] = set()
        self._selected: Optional[ConversationKey] = None

        self._observers: Dict[StoreEvent, List[Callable]] = {
            event: [] for event in StoreEvent
        }

    def subscribe(
        self, event: StoreEvent, callback: Callable[[Dict[str, Any]], None]
    ) -> None:
        with self._lock:
            if callback not in self._observers[event]:
                self._observers[event].append(callback)

    def unsubscribe(
        self, event: StoreEvent, callback: Callable[[Dict[str, Any]], None]
    ) -> None:
        with self._lock:
            if callback in self._observers[event]:
                self._observers[event].remove(callback)

    def _notify(self, event: StoreEvent, data: Dict[str, Any]) -> None:
        with self._lock:
            observers = self._observers[event].copy()

        for callback in observers:
            try:
                callback(data)
            except Exception as e:
                self.logger.error(f"Error in observer callback for {event.value}: {e!s}")

    # chat list

    @property
    def chats(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [chat.copy() for chat in self._chats]

    def set_chats(self, chats: List[Dict[str, Any]]) -> None:
        with self._lock:
            self._chats = [chat.copy() for chat in chats]
            for chat in self._chats:
                self._unread[(DIRECT, chat["id"])] = chat.get("unreadCount", 0)
            chats_data = [chat.copy() for chat in self._chats]

        self._notify(StoreEvent.CHATS_LOADED, {"chats": chats_data})

    def remove_chat(self, chat_id: int) -> None:
        key = (DIRECT, chat_id)
        with self._lock:
            self._chats = [chat for chat in self._chats if chat.get("id") != chat_id]
            self._messages.pop(key, None)
            self._unread.pop(key, None)
            self._forget_counted(key)
            if self._selected == key:
                self._selected = None

        self._notify(StoreEvent.CHAT_REMOVED, {"chat_id": chat_id})

    def _update_preview(self, chat_id: int, message: Dict[str, Any]) -> None:
        updated = None
        with self._lock:
            for chat in self._chats:
                if chat.get("id") == chat_id:
                    chat["lastMessage"] = {
                        "content": message.get("content"),
                        "sender": message.get("senderId"),
                        "timestamp": message.get("createdAt"),
                    }
                    updated = chat.copy()
                    break
            if updated:
                # most recently active chat first
                self._chats.sort(
                    key=lambda c: (c.get("lastMessage") or {}).get("timestamp") or "",
                    reverse=True,
                )

        if updated:
            self._notify(StoreEvent.CHAT_UPDATED, {"chat_id": chat_id, "chat": updated})

    # selection and unread badges

    @property
    def selected(self) -> Optional[ConversationKey]:
        with self._lock:
            return self._selected

    def select(self, kind: str, conversation_id: Optional[int]) -> None:
        with self._lock:
            self._selected = (kind, conversation_id) if conversation_id is not None else None
            if self._selected:
                self._unread[self._selected] = 0
                self._forget_counted(self._selected)

        self._notify(StoreEvent.SELECTION_CHANGED, {"selected": self._selected})

    def unread_count(self, kind: str, conversation_id: int) -> int:
        with self._lock:
            return self._unread.get((kind, conversation_id), 0)

    def _forget_counted(self, key: ConversationKey) -> None:
        self._counted = {c for c in self._counted if c[:2] != key}

    def _count_unread(self, key: ConversationKey, message: Dict[str, Any]) -> None:
        message_id = message.get("id")
        with self._lock:
            counted = key + (message_id,)
            if key == self._selected or counted in self._counted:
                return
            if self.user_id is not None and message.get("senderId") == self.user_id:
                return
            if message_id is not None:
                self._counted.add(counted)
            self._unread[key] = self._unread.get(key, 0) + 1
            count = self._unread[key]

        self._notify(
            StoreEvent.UNREAD_COUNT_UPDATED,
            {"kind": key[0], "id": key[1], "unread_count": count},
        )

    # messages

    def messages(self, kind: str, conversation_id: int) -> List[Dict[str, Any]]:
        with self._lock:
            stored = self._messages.get((kind, conversation_id), {})
            return sorted((m.copy() for m in stored.values()), key=_sort_key)

    def load_history(
        self, kind: str, conversation_id: int, messages: List[Dict[str, Any]]
    ) -> None:
        """Replace a conversation's messages with an authoritative page."""
        key = (kind, conversation_id)
        with self._lock:
            self._messages[key] = {m["id"]: m.copy() for m in messages}
            self._forget_counted(key)

        self._notify(
            StoreEvent.MESSAGES_LOADED,
            {"kind": kind, "id": conversation_id, "messages": self.messages(kind, conversation_id)},
        )

    def _merge(self, key: ConversationKey, message: Dict[str, Any]) -> bool:
        with self._lock:
            stored = self._messages.setdefault(key, {})
            is_new = message["id"] not in stored
            stored[message["id"]] = message.copy()

        if is_new:
            self._notify(
                StoreEvent.MESSAGE_RECEIVED,
                {"kind": key[0], "id": key[1], "message": message.copy()},
            )
        return is_new

    def apply_ack(
        self, kind: str, conversation_id: int, ack: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Store the message confirmed by a send acknowledgement."""
        if not ack.get("ok"):
            self.logger.warning(f"Send to {kind}:{conversation_id} failed: {ack.get('error')}")
            return None
        message = ack.get("data")
        if not message:
            return None
        self._merge((kind, conversation_id), message)
        if kind == DIRECT:
            self._update_preview(conversation_id, message)
        return message

    def apply_live_message(
        self, kind: str, conversation_id: int, message: Dict[str, Any]
    ) -> bool:
        """Merge a broadcast message; returns False if it was already stored."""
        key = (kind, conversation_id)
        is_new = self._merge(key, message)
        if is_new:
            if kind == DIRECT:
                self._update_preview(conversation_id, message)
            self._count_unread(key, message)
        return is_new

    def handle_dm_new_message(self, payload: Dict[str, Any]) -> bool:
        return self.apply_live_message(DIRECT, payload["chatId"], payload["message"])

    def handle_room_new_message(self, payload: Dict[str, Any]) -> bool:
        return self.apply_live_message(ROOM, payload["roomId"], payload["message"])

    def handle_dm_notify(self, payload: Dict[str, Any]) -> None:
        preview = payload.get("preview") or {}
        chat_id = payload["chatId"]
        self._update_preview(chat_id, preview)
        self._count_unread((DIRECT, chat_id), preview)
