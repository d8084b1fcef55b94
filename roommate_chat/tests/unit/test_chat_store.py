# roommate_chat/tests/unit/test_chat_store.py
from unittest.mock import Mock

import pytest

from roommate_chat.client.chat_store import DIRECT, ROOM, ChatStore, StoreEvent


def _message(message_id, created_at, sender_id=2, content=None):
    return {
        "id": message_id,
        "senderId": sender_id,
        "content": content or f"message {message_id}",
        "createdAt": created_at,
    }


@pytest.fixture
def store():
    store = ChatStore(user_id=1)
    store.set_chats(
        [
            {"id": 10, "unreadCount": 0, "lastMessage": None},
            {"id": 11, "unreadCount": 3, "lastMessage": None},
        ]
    )
    return store


def test_set_chats_seeds_unread_badges(store):
    assert store.unread_count(DIRECT, 10) == 0
    assert store.unread_count(DIRECT, 11) == 3


def test_ack_and_broadcast_are_stored_once(store):
    store.select(DIRECT, 10)
    message = _message(5, "2024-05-01T10:00:00+00:00", sender_id=1)

    store.apply_ack(DIRECT, 10, {"ok": True, "data": message})
    assert store.apply_live_message(DIRECT, 10, message) is False
    store.load_history(DIRECT, 10, [message])

    assert [m["id"] for m in store.messages(DIRECT, 10)] == [5]


def test_failed_ack_is_ignored(store):
    assert store.apply_ack(DIRECT, 10, {"ok": False, "error": "Forbidden"}) is None
    assert store.messages(DIRECT, 10) == []


def test_messages_sorted_by_time_then_id(store):
    store.apply_live_message(ROOM, 3, _message(9, "2024-05-01T10:00:02+00:00"))
    store.apply_live_message(ROOM, 3, _message(8, "2024-05-01T10:00:01+00:00"))
    store.apply_live_message(ROOM, 3, _message(7, "2024-05-01T10:00:01+00:00"))

    assert [m["id"] for m in store.messages(ROOM, 3)] == [7, 8, 9]


def test_live_message_in_background_chat_counts_unread(store):
    store.select(DIRECT, 10)

    store.handle_dm_new_message({"chatId": 10, "message": _message(1, "2024-05-01T10:00:00Z")})
    store.handle_dm_new_message({"chatId": 11, "message": _message(2, "2024-05-01T10:00:01Z")})

    assert store.unread_count(DIRECT, 10) == 0
    assert store.unread_count(DIRECT, 11) == 4


def test_notify_and_broadcast_count_once(store):
    preview = _message(4, "2024-05-01T10:00:00Z")
    store.handle_dm_notify({"chatId": 10, "preview": preview})
    store.handle_dm_new_message({"chatId": 10, "message": preview})

    assert store.unread_count(DIRECT, 10) == 1
    assert store.chats[0]["lastMessage"]["content"] == "message 4"


def test_own_messages_are_not_unread(store):
    store.handle_room_new_message(
        {"roomId": 3, "message": _message(6, "2024-05-01T10:00:00Z", sender_id=1)}
    )
    assert store.unread_count(ROOM, 3) == 0


def test_select_clears_badge(store):
    store.select(DIRECT, 11)
    assert store.unread_count(DIRECT, 11) == 0
    assert store.selected == (DIRECT, 11)


def test_latest_chat_moves_to_top(store):
    store.handle_dm_new_message({"chatId": 11, "message": _message(3, "2024-05-01T10:00:00+00:00")})
    assert [chat["id"] for chat in store.chats] == [11, 10]


def test_remove_chat(store):
    store.select(DIRECT, 10)
    store.remove_chat(10)
    assert [chat["id"] for chat in store.chats] == [11]
    assert store.selected is None


def test_observers_are_notified(store):
    callback = Mock()
    store.subscribe(StoreEvent.MESSAGE_RECEIVED, callback)

    message = _message(1, "2024-05-01T10:00:00Z")
    store.apply_live_message(DIRECT, 10, message)
    store.apply_live_message(DIRECT, 10, message)

    callback.assert_called_once()
    assert callback.call_args.args[0]["message"]["id"] == 1

    store.unsubscribe(StoreEvent.MESSAGE_RECEIVED, callback)
    store.apply_live_message(DIRECT, 10, _message(2, "2024-05-01T10:00:01Z"))
    callback.assert_called_once()


def test_failing_observer_does_not_break_store(store):
    store.subscribe(StoreEvent.MESSAGE_RECEIVED, Mock(side_effect=RuntimeError("ui gone")))
    assert store.apply_live_message(DIRECT, 10, _message(1, "2024-05-01T10:00:00Z"))
    assert len(store.messages(DIRECT, 10)) == 1


def test_same_id_in_direct_and_room_counts_separately(store):
    store.apply_live_message(DIRECT, 10, _message(5, "2024-05-01T10:00:00Z"))
    store.apply_live_message(ROOM, 7, _message(5, "2024-05-01T10:00:01Z"))

    assert store.unread_count(DIRECT, 10) == 1
    assert store.unread_count(ROOM, 7) == 1


def test_counted_ids_are_dropped_with_the_conversation(store):
    store.apply_live_message(ROOM, 7, _message(5, "2024-05-01T10:00:00Z"))
    store.select(ROOM, 7)
    assert store._counted == set()

    store.apply_live_message(DIRECT, 10, _message(6, "2024-05-01T10:00:01Z"))
    store.remove_chat(10)
    assert store._counted == set()
