# roommate_chat/tests/unit/test_unit_of_work.py

from unittest.mock import AsyncMock

import pytest

from roommate_chat.infrastructure import models
from roommate_chat.infrastructure.data_mappers import DirectChatMapper
from roommate_chat.infrastructure.uow import UnitOfWork, UoWModel


@pytest.fixture
def mock_session():
    return AsyncMock()


@pytest.fixture
def uow(mock_session):
    uow = UnitOfWork()
    chat_mapper = DirectChatMapper(mock_session)
    chat_mapper.insert = AsyncMock()
    chat_mapper.update = AsyncMock()
    uow.mappers[models.DirectChat] = chat_mapper
    return uow


def _chat():
    return models.DirectChat(room_id=1, participant_a_id=1, participant_b_id=2)


@pytest.mark.asyncio
async def test_register_new_model(uow):
    chat = _chat()
    uow_model = uow.register_new(chat)

    assert id(chat) in uow.new
    assert isinstance(uow_model, UoWModel)
    assert uow_model.pair_key == "1:2"


@pytest.mark.asyncio
async def test_modify_new_model_does_not_register_dirty(uow):
    uow_model = uow.register_new(_chat())
    uow_model.is_active = False
    assert len(uow.dirty) == 0


@pytest.mark.asyncio
async def test_modify_existing_model_registers_dirty(uow):
    chat = _chat()
    uow_model = UoWModel(chat, uow)
    uow_model.is_active = False

    assert chat.is_active is False
    assert id(chat) in uow.dirty


@pytest.mark.asyncio
async def test_commit_runs_mappers_and_clears(uow):
    new_chat, dirty_chat = _chat(), _chat()
    uow.register_new(new_chat)
    uow.register_dirty(dirty_chat)

    await uow.commit()

    mapper = uow.mappers[models.DirectChat]
    mapper.insert.assert_awaited_once_with(new_chat)
    mapper.update.assert_awaited_once_with(dirty_chat)
    assert not uow.new and not uow.dirty


@pytest.mark.asyncio
async def test_rollback_discards_pending_work(uow):
    uow.register_new(_chat())
    uow.register_dirty(_chat())
    uow.rollback()

    await uow.commit()

    uow.mappers[models.DirectChat].insert.assert_not_awaited()
    uow.mappers[models.DirectChat].update.assert_not_awaited()
