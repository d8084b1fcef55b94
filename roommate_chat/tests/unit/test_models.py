# roommate_chat/tests/unit/test_models.py
from datetime import UTC, datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from roommate_chat.domain.entities import RoomMembership, pair_key
from roommate_chat.infrastructure import models


def test_pair_key_is_order_independent():
    assert pair_key(7, 3) == pair_key(3, 7) == "3:7"


def test_direct_chat_model():
    chat = models.DirectChat(room_id=1, participant_a_id=9, participant_b_id=4)
    assert chat.pair_key == "4:9"
    assert chat.participant_ids == [9, 4]
    assert chat.has_participant(4)
    assert not chat.has_participant(5)
    assert chat.last_message is None


def test_room_membership():
    membership = RoomMembership(owner_id=1, tenant_ids=(2, 3, 1))
    assert membership.is_member(1)
    assert membership.is_member(3)
    assert not membership.is_member(4)
    assert membership.member_ids == [1, 2, 3]


def test_utc_datetime_normalizes_values():
    column_type = models.UTCDateTime()
    naive = datetime(2024, 1, 1, 12, 0)
    shifted = datetime(2024, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))

    assert column_type.process_result_value(naive, None) == naive.replace(tzinfo=UTC)
    assert column_type.process_bind_param(shifted, None) == datetime(
        2024, 1, 1, 12, 0, tzinfo=UTC
    )
    assert column_type.process_bind_param(None, None) is None


@pytest.mark.asyncio
async def test_datetimes_read_back_aware(db_session, owner):
    await db_session.refresh(owner)
    assert owner.created_at.tzinfo is not None


@pytest.mark.asyncio
async def test_one_active_chat_per_room_and_pair(db_session, room, owner, seeker):
    db_session.add(
        models.DirectChat(room_id=room.id, participant_a_id=owner.id, participant_b_id=seeker.id)
    )
    await db_session.commit()

    db_session.add(
        models.DirectChat(room_id=room.id, participant_a_id=seeker.id, participant_b_id=owner.id)
    )
    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()


@pytest.mark.asyncio
async def test_inactive_chats_do_not_block_new_ones(db_session, room, owner, seeker):
    db_session.add_all(
        [
            models.DirectChat(
                room_id=room.id,
                participant_a_id=owner.id,
                participant_b_id=seeker.id,
                is_active=False,
            ),
            models.DirectChat(
                room_id=room.id, participant_a_id=owner.id, participant_b_id=seeker.id
            ),
        ]
    )
    await db_session.commit()
