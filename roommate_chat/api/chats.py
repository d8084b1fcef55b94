# roommate_chat/api/chats.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from roommate_chat.api.dependencies import (
    get_config,
    get_current_user,
    get_direct_chat_interactor,
    get_event_dispatcher,
    get_session,
)
from roommate_chat.config import AppConfig
from roommate_chat.domain.events import DirectMessageCreated
from roommate_chat.infrastructure import schemas
from roommate_chat.infrastructure.event_dispatcher import EventDispatcher
from roommate_chat.interactors.direct_chat_interactor import DirectChatInteractor

router = APIRouter()


@router.get("", response_model=schemas.ListResponse[schemas.DirectChatSummary])
async def read_chats(
    chat_interactor: DirectChatInteractor = Depends(get_direct_chat_interactor),
    current_user: schemas.User = Depends(get_current_user),
):
    chats = await chat_interactor.list_my_chats(current_user.id)
    return schemas.ListResponse(count=len(chats), data=chats)


@router.post("", response_model=schemas.DataResponse[schemas.DirectChatSummary])
async def open_chat(
    chat_open: schemas.DirectChatOpen,
    chat_interactor: DirectChatInteractor = Depends(get_direct_chat_interactor),
    current_user: schemas.User = Depends(get_current_user),
):
    chat = await chat_interactor.open_direct_chat(
        current_user.id, chat_open.room_id, chat_open.participant_id
    )
    return schemas.DataResponse(data=chat)


@router.get("/{chat_id}", response_model=schemas.DataResponse[schemas.DirectChat])
async def read_chat(
    chat_id: int,
    chat_interactor: DirectChatInteractor = Depends(get_direct_chat_interactor),
    current_user: schemas.User = Depends(get_current_user),
):
    chat = await chat_interactor.get_direct_chat(chat_id, current_user.id)
    return schemas.DataResponse(data=chat)


@router.post(
    "/{chat_id}/messages",
    status_code=201,
    response_model=schemas.SentMessageResponse[schemas.DirectMessage],
)
async def send_message(
    chat_id: int,
    message: schemas.MessageCreate,
    session: AsyncSession = Depends(get_session),
    chat_interactor: DirectChatInteractor = Depends(get_direct_chat_interactor),
    event_dispatcher: EventDispatcher = Depends(get_event_dispatcher),
    current_user: schemas.User = Depends(get_current_user),
):
    new_message, recipient_ids = await chat_interactor.send_direct_message(
        chat_id,
        current_user.id,
        message.content,
        message.message_type,
        message.file_url,
    )
    # commit before broadcasting
    await session.commit()
    await event_dispatcher.dispatch(
        DirectMessageCreated(
            chat_id=chat_id,
            sender_id=current_user.id,
            recipient_ids=recipient_ids,
            message=new_message.model_dump(mode="json", by_alias=True),
        )
    )
    return schemas.SentMessageResponse(data=new_message)


@router.get(
    "/{chat_id}/messages",
    response_model=schemas.MessagePage[schemas.DirectMessage],
)
async def read_messages(
    chat_id: int,
    page: int = Query(1, description="Page number, 1 is the newest messages"),
    limit: int | None = Query(None, description="Messages per page"),
    config: AppConfig = Depends(get_config),
    chat_interactor: DirectChatInteractor = Depends(get_direct_chat_interactor),
    current_user: schemas.User = Depends(get_current_user),
):
    return await chat_interactor.paginate_direct_messages(
        chat_id,
        current_user.id,
        page=page,
        limit=config.DEFAULT_PAGE_LIMIT if limit is None else limit,
    )


@router.put("/{chat_id}/read", response_model=schemas.MessageResponse)
async def mark_chat_read(
    chat_id: int,
    chat_interactor: DirectChatInteractor = Depends(get_direct_chat_interactor),
    current_user: schemas.User = Depends(get_current_user),
):
    await chat_interactor.mark_direct_read(chat_id, current_user.id)
    return schemas.MessageResponse(message="Chat marked as read")


@router.delete("/{chat_id}", response_model=schemas.MessageResponse)
async def delete_chat(
    chat_id: int,
    chat_interactor: DirectChatInteractor = Depends(get_direct_chat_interactor),
    current_user: schemas.User = Depends(get_current_user),
):
    await chat_interactor.deactivate_direct_chat(chat_id, current_user.id)
    return schemas.MessageResponse(message="Chat deleted successfully")
