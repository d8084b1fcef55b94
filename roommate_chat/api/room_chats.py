# roommate_chat/api/room_chats.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from roommate_chat.api.dependencies import (
    get_config,
    get_current_user,
    get_event_dispatcher,
    get_room_chat_interactor,
    get_session,
)
from roommate_chat.config import AppConfig
from roommate_chat.domain.events import RoomMessageCreated
from roommate_chat.infrastructure import schemas
from roommate_chat.infrastructure.event_dispatcher import EventDispatcher
from roommate_chat.interactors.room_chat_interactor import RoomChatInteractor

router = APIRouter()


@router.get("/{room_id}", response_model=schemas.DataResponse[schemas.RoomChat])
async def read_room_chat(
    room_id: int,
    chat_interactor: RoomChatInteractor = Depends(get_room_chat_interactor),
    current_user: schemas.User = Depends(get_current_user),
):
    chat = await chat_interactor.open_room_chat(room_id, current_user.id)
    return schemas.DataResponse(data=chat)


@router.get(
    "/{room_id}/messages",
    response_model=schemas.MessagePage[schemas.RoomMessage],
)
async def read_room_messages(
    room_id: int,
    page: int = Query(1, description="Page number, 1 is the newest messages"),
    limit: int | None = Query(None, description="Messages per page"),
    config: AppConfig = Depends(get_config),
    chat_interactor: RoomChatInteractor = Depends(get_room_chat_interactor),
    current_user: schemas.User = Depends(get_current_user),
):
    return await chat_interactor.paginate_room_messages(
        room_id,
        current_user.id,
        page=page,
        limit=config.DEFAULT_PAGE_LIMIT if limit is None else limit,
    )


@router.post(
    "/{room_id}/messages",
    status_code=201,
    response_model=schemas.DataResponse[schemas.RoomMessage],
)
async def send_room_message(
    room_id: int,
    message: schemas.MessageCreate,
    session: AsyncSession = Depends(get_session),
    chat_interactor: RoomChatInteractor = Depends(get_room_chat_interactor),
    event_dispatcher: EventDispatcher = Depends(get_event_dispatcher),
    current_user: schemas.User = Depends(get_current_user),
):
    new_message = await chat_interactor.send_room_message(
        room_id,
        current_user.id,
        message.content,
        message.message_type,
        message.file_url,
    )
    await session.commit()
    await event_dispatcher.dispatch(
        RoomMessageCreated(
            room_id=room_id,
            sender_id=current_user.id,
            message=new_message.model_dump(mode="json", by_alias=True),
        )
    )
    return schemas.DataResponse(data=new_message)


@router.get("/{room_id}/unread", response_model=schemas.UnreadResponse)
async def read_room_unread(
    room_id: int,
    chat_interactor: RoomChatInteractor = Depends(get_room_chat_interactor),
    current_user: schemas.User = Depends(get_current_user),
):
    unread = await chat_interactor.get_room_unread(room_id, current_user.id)
    return schemas.UnreadResponse(unread=unread)


@router.put("/{room_id}/read", response_model=schemas.MessageResponse)
async def mark_room_chat_read(
    room_id: int,
    chat_interactor: RoomChatInteractor = Depends(get_room_chat_interactor),
    current_user: schemas.User = Depends(get_current_user),
):
    await chat_interactor.mark_room_read(room_id, current_user.id)
    return schemas.MessageResponse(message="Room chat marked as read")
