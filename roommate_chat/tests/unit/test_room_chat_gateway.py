# roommate_chat/tests/unit/test_room_chat_gateway.py
from datetime import timedelta

import pytest
from sqlalchemy import func, select

from roommate_chat.domain import message_log
from roommate_chat.domain.entities import utcnow
from roommate_chat.gateways.room_chat_gateway import RoomChatGateway
from roommate_chat.gateways.room_gateway import RoomGateway
from roommate_chat.infrastructure import models


@pytest.fixture
def room_chat_gateway(db_session, uow):
    return RoomChatGateway(db_session, uow)


@pytest.fixture
def room_gateway(db_session, uow):
    return RoomGateway(db_session, uow)


async def test_get_by_room_without_chat(room_chat_gateway, room):
    assert await room_chat_gateway.get_by_room(room.id) is None


async def test_find_or_create_snapshots_members(
    room_chat_gateway, room_gateway, db_session, room, owner, tenant
):
    loaded_room = await room_gateway.get_room(room.id)

    chat = await room_chat_gateway.find_or_create(loaded_room)
    again = await room_chat_gateway.find_or_create(loaded_room)

    assert chat.id == again.id
    assert chat.room_id == room.id
    assert chat.participant_ids == [owner.id, tenant.id]
    assert chat.read_by == []
    assert await db_session.scalar(select(func.count(models.RoomChat.id))) == 1


async def test_membership_is_read_fresh(room_gateway, db_session, room, seeker, tenant):
    loaded_room = await room_gateway.get_room(room.id)
    assert not loaded_room.membership.is_member(seeker.id)

    db_session.add(models.RoomTenant(room_id=room.id, user_id=seeker.id, position=1))
    await db_session.commit()

    loaded_room = await room_gateway.get_room(room.id)
    assert loaded_room.membership.is_member(seeker.id)
    assert loaded_room.tenant_ids == [tenant.id, seeker.id]


async def test_append_does_not_touch_cursors(
    room_chat_gateway, room_gateway, room, owner, tenant
):
    chat = await room_chat_gateway.find_or_create(await room_gateway.get_room(room.id))
    await room_chat_gateway.mark_read(chat, tenant.id)

    message = await room_chat_gateway.append_message(
        chat, message_log.build_message(owner.id, "Rent is due Friday")
    )

    assert message.room_chat_id == chat.id
    assert message.sender.id == owner.id
    chat = await room_chat_gateway.get_by_room(room.id)
    assert [r.user_id for r in chat.read_by] == [tenant.id]
    assert chat.last_message["content"] == "Rent is due Friday"


async def test_unread_follows_read_cursor(
    room_chat_gateway, room_gateway, room, owner, tenant
):
    chat = await room_chat_gateway.find_or_create(await room_gateway.get_room(room.id))
    base = utcnow() - timedelta(minutes=5)
    await room_chat_gateway.append_message(
        chat, message_log.build_message(owner.id, "one", now=base)
    )
    await room_chat_gateway.append_message(
        chat,
        message_log.build_message(
            owner.id, "two", now=base + timedelta(seconds=1)
        ),
    )
    await room_chat_gateway.append_message(
        chat,
        message_log.build_message(
            tenant.id, "mine", now=base + timedelta(seconds=2)
        ),
    )

    assert room_chat_gateway.unread_count(chat, tenant.id) == 2
    assert room_chat_gateway.unread_count(chat, owner.id) == 1

    await room_chat_gateway.mark_read(chat, tenant.id)
    chat = await room_chat_gateway.get_by_room(room.id)
    assert room_chat_gateway.unread_count(chat, tenant.id) == 0

    await room_chat_gateway.append_message(
        chat,
        message_log.build_message(
            owner.id, "three", now=chat.read_by[0].read_at + timedelta(seconds=1)
        ),
    )
    chat = await room_chat_gateway.get_by_room(room.id)
    assert room_chat_gateway.unread_count(chat, tenant.id) == 1
