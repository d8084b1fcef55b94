# roommate_chat/api/dependencies.py
import logging
from typing import AsyncGenerator

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from roommate_chat.config import AppConfig
from roommate_chat.domain.exceptions import AuthenticationError
from roommate_chat.gateways.direct_chat_gateway import DirectChatGateway
from roommate_chat.gateways.room_chat_gateway import RoomChatGateway
from roommate_chat.gateways.room_gateway import RoomGateway
from roommate_chat.gateways.user_gateway import UserGateway
from roommate_chat.infrastructure import schemas
from roommate_chat.infrastructure.event_dispatcher import EventDispatcher
from roommate_chat.infrastructure.security import SecurityService
from roommate_chat.infrastructure.uow import UnitOfWork
from roommate_chat.interactors.direct_chat_interactor import DirectChatInteractor
from roommate_chat.interactors.room_chat_interactor import RoomChatInteractor

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_logger(request: Request) -> logging.Logger:
    return request.app.state.logger


def get_security_service(request: Request) -> SecurityService:
    return request.app.state.security_service


def get_event_dispatcher(request: Request) -> EventDispatcher:
    return request.app.state.event_dispatcher


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with request.app.state.database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_uow() -> UnitOfWork:
    return UnitOfWork()


async def get_user_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return UserGateway(session, uow)


async def get_room_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return RoomGateway(session, uow)


async def get_direct_chat_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return DirectChatGateway(session, uow)


async def get_room_chat_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return RoomChatGateway(session, uow)


async def get_direct_chat_interactor(
    chat_gateway: DirectChatGateway = Depends(get_direct_chat_gateway),
    room_gateway: RoomGateway = Depends(get_room_gateway),
    user_gateway: UserGateway = Depends(get_user_gateway),
    config: AppConfig = Depends(get_config),
    logger: logging.Logger = Depends(get_logger),
):
    return DirectChatInteractor(
        chat_gateway,
        room_gateway,
        user_gateway,
        logger=logger,
        max_message_length=config.MAX_MESSAGE_LENGTH,
        max_page_limit=config.MAX_PAGE_LIMIT,
    )


async def get_room_chat_interactor(
    chat_gateway: RoomChatGateway = Depends(get_room_chat_gateway),
    room_gateway: RoomGateway = Depends(get_room_gateway),
    config: AppConfig = Depends(get_config),
    logger: logging.Logger = Depends(get_logger),
):
    return RoomChatInteractor(
        chat_gateway,
        room_gateway,
        logger=logger,
        max_message_length=config.MAX_MESSAGE_LENGTH,
        max_page_limit=config.MAX_PAGE_LIMIT,
    )


async def get_current_user(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
    security_service: SecurityService = Depends(get_security_service),
    user_gateway: UserGateway = Depends(get_user_gateway),
) -> schemas.User:
    token = token or request.cookies.get("token")
    if not token:
        raise AuthenticationError("Not authorized to access this route")

    user_id = security_service.decode_access_token(token)
    if user_id is None:
        raise AuthenticationError("Invalid or expired token")

    user_model = await user_gateway.get_active_user(user_id)
    if user_model is None:
        raise AuthenticationError("User not found or inactive")
    return schemas.User.model_validate(user_model)
