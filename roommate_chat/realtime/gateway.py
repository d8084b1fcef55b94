# roommate_chat/realtime/gateway.py
"""
Socket.IO event handlers.

Every connection gets a ``ConnectionSession`` at connect time, keyed by its
sid, and joins its personal ``user:{id}`` channel. Handlers persist first and
broadcast afterwards; their return value is the client's acknowledgement,
``{"ok": True, "data": ...}`` or ``{"ok": False, "error": ...}``.
"""
import functools
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from http.cookies import CookieError, SimpleCookie
from typing import Any, AsyncGenerator

import socketio
from pydantic import PositiveInt, TypeAdapter
from pydantic import ValidationError as PayloadError

from roommate_chat.config import AppConfig
from roommate_chat.domain.events import DirectMessageCreated, RoomMessageCreated
from roommate_chat.domain.exceptions import ChatError
from roommate_chat.gateways.direct_chat_gateway import DirectChatGateway
from roommate_chat.gateways.room_chat_gateway import RoomChatGateway
from roommate_chat.gateways.room_gateway import RoomGateway
from roommate_chat.gateways.user_gateway import UserGateway
from roommate_chat.infrastructure import schemas
from roommate_chat.infrastructure.database import Database
from roommate_chat.infrastructure.event_dispatcher import EventDispatcher
from roommate_chat.infrastructure.security import SecurityService
from roommate_chat.infrastructure.uow import UnitOfWork
from roommate_chat.interactors.direct_chat_interactor import DirectChatInteractor
from roommate_chat.interactors.room_chat_interactor import RoomChatInteractor
from roommate_chat.realtime.channels import chat_channel, room_channel, user_channel

_conversation_id = TypeAdapter(PositiveInt)


@dataclass
class ConnectionSession:
    sid: str
    user_id: int
    channels: set[str] = field(default_factory=set)


def extract_token(environ: dict, auth: Any = None) -> str | None:
    """Connect credential: ``auth.token``, then the bearer header, then the ``token`` cookie."""
    if isinstance(auth, dict) and auth.get("token"):
        return str(auth["token"])

    header = environ.get("HTTP_AUTHORIZATION", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None

    cookie = SimpleCookie()
    try:
        cookie.load(environ.get("HTTP_COOKIE", ""))
    except CookieError:
        return None
    morsel = cookie.get("token")
    return morsel.value if morsel else None


def acknowledged(failure_message: str):
    def decorator(handler):
        @functools.wraps(handler)
        async def wrapper(self: "RealtimeGateway", sid: str, data: Any = None):
            session = self.sessions.get(sid)
            if session is None:
                return {"ok": False, "error": "Not connected"}
            try:
                result = await handler(self, session, data)
            except ChatError as e:
                return {"ok": False, "error": e.message}
            except PayloadError:
                return {"ok": False, "error": "Invalid payload"}
            except Exception as e:
                self.logger.error(f"{failure_message} for user {session.user_id}: {e!s}")
                return {"ok": False, "error": failure_message}
            if result is None:
                return {"ok": True}
            return {"ok": True, "data": result}

        return wrapper

    return decorator


class RealtimeGateway:
    def __init__(
        self,
        sio: socketio.AsyncServer,
        database: Database,
        security_service: SecurityService,
        event_dispatcher: EventDispatcher,
        config: AppConfig,
        logger: logging.Logger,
    ):
        self.sio = sio
        self.database = database
        self.security_service = security_service
        self.event_dispatcher = event_dispatcher
        self.config = config
        self.logger = logger
        self.sessions: dict[str, ConnectionSession] = {}

    def register(self) -> None:
        self.sio.on("connect", self.connect)
        self.sio.on("disconnect", self.disconnect)
        self.sio.on("join-chat", self.join_chat)
        self.sio.on("leave-chat", self.leave_chat)
        self.sio.on("send-dm-message", self.send_dm_message)
        self.sio.on("join-room-chat", self.join_room_chat)
        self.sio.on("leave-room-chat", self.leave_room_chat)
        self.sio.on("send-room-message", self.send_room_message)

    @asynccontextmanager
    async def _direct_chats(self) -> AsyncGenerator[DirectChatInteractor, None]:
        async with self.database.transaction() as session:
            uow = UnitOfWork()
            yield DirectChatInteractor(
                DirectChatGateway(session, uow),
                RoomGateway(session, uow),
                UserGateway(session, uow),
                logger=self.logger,
                max_message_length=self.config.MAX_MESSAGE_LENGTH,
            )

    @asynccontextmanager
    async def _room_chats(self) -> AsyncGenerator[RoomChatInteractor, None]:
        async with self.database.transaction() as session:
            uow = UnitOfWork()
            yield RoomChatInteractor(
                RoomChatGateway(session, uow),
                RoomGateway(session, uow),
                logger=self.logger,
                max_message_length=self.config.MAX_MESSAGE_LENGTH,
            )

    async def _join(self, session: ConnectionSession, channel: str) -> None:
        await self.sio.enter_room(session.sid, channel)
        session.channels.add(channel)

    async def _leave(self, session: ConnectionSession, channel: str) -> None:
        await self.sio.leave_room(session.sid, channel)
        session.channels.discard(channel)

    async def connect(self, sid: str, environ: dict, auth: Any = None) -> None:
        user_id = self.security_service.decode_access_token(extract_token(environ, auth))
        if user_id is None:
            self.logger.warning(f"Refused socket {sid}: missing or invalid token")
            raise socketio.exceptions.ConnectionRefusedError("Authentication error")

        async with self.database.session() as db_session:
            user = await UserGateway(db_session, UnitOfWork()).get_active_user(user_id)
        if user is None:
            self.logger.warning(f"Refused socket {sid}: user {user_id} not found or inactive")
            raise socketio.exceptions.ConnectionRefusedError("Authentication error")

        session = ConnectionSession(sid=sid, user_id=user_id)
        self.sessions[sid] = session
        await self._join(session, user_channel(user_id))
        self.logger.info(f"User {user_id} connected on socket {sid}")

    async def disconnect(self, sid: str, reason: Any = None) -> None:
        session = self.sessions.pop(sid, None)
        if session:
            self.logger.info(f"User {session.user_id} disconnected from socket {sid}")

    @acknowledged("Failed to join chat")
    async def join_chat(self, session: ConnectionSession, data: Any) -> None:
        chat_id = _conversation_id.validate_python(data)
        async with self._direct_chats() as interactor:
            await interactor.authorize(chat_id, session.user_id)
        await self._join(session, chat_channel(chat_id))

    async def leave_chat(self, sid: str, data: Any = None) -> None:
        session = self.sessions.get(sid)
        try:
            chat_id = _conversation_id.validate_python(data)
        except PayloadError:
            return
        if session:
            await self._leave(session, chat_channel(chat_id))

    @acknowledged("Failed to send message")
    async def send_dm_message(self, session: ConnectionSession, data: Any) -> dict:
        payload = schemas.DirectMessageSend.model_validate(data)
        async with self._direct_chats() as interactor:
            message, recipient_ids = await interactor.send_direct_message(
                payload.chat_id,
                session.user_id,
                payload.content,
                payload.message_type,
                payload.file_url,
            )
        message_data = message.model_dump(mode="json", by_alias=True)
        await self.event_dispatcher.dispatch(
            DirectMessageCreated(
                chat_id=payload.chat_id,
                sender_id=session.user_id,
                recipient_ids=recipient_ids,
                message=message_data,
                origin_sid=session.sid,
            )
        )
        return message_data

    @acknowledged("Failed to join room chat")
    async def join_room_chat(self, session: ConnectionSession, data: Any) -> None:
        room_id = _conversation_id.validate_python(data)
        async with self._room_chats() as interactor:
            await interactor.authorize_member(room_id, session.user_id)
        await self._join(session, room_channel(room_id))

    async def leave_room_chat(self, sid: str, data: Any = None) -> None:
        session = self.sessions.get(sid)
        try:
            room_id = _conversation_id.validate_python(data)
        except PayloadError:
            return
        if session:
            await self._leave(session, room_channel(room_id))

    @acknowledged("Failed to send room message")
    async def send_room_message(self, session: ConnectionSession, data: Any) -> dict:
        payload = schemas.RoomMessageSend.model_validate(data)
        async with self._room_chats() as interactor:
            message = await interactor.send_room_message(
                payload.room_id,
                session.user_id,
                payload.content,
                payload.message_type,
                payload.file_url,
            )
        message_data = message.model_dump(mode="json", by_alias=True)
        await self.event_dispatcher.dispatch(
            RoomMessageCreated(
                room_id=payload.room_id,
                sender_id=session.user_id,
                message=message_data,
                origin_sid=session.sid,
            )
        )
        return message_data
