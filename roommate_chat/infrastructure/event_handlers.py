# roommate_chat/infrastructure/event_handlers.py
import logging

import socketio

from roommate_chat.domain.events import DirectMessageCreated, RoomMessageCreated
from roommate_chat.realtime.channels import chat_channel, room_channel, user_channel


class RealtimeEventHandlers:
    def __init__(self, sio: socketio.AsyncServer, logger: logging.Logger):
        self.sio = sio
        self.logger = logger

    async def publish_direct_message_created(self, event: DirectMessageCreated):
        channel_name = chat_channel(event.chat_id)
        await self.sio.emit(
            "dm:new-message",
            {"chatId": event.chat_id, "message": event.message},
            room=channel_name,
            skip_sid=event.origin_sid,
        )
        for recipient_id in event.recipient_ids:
            await self.sio.emit(
                "dm:notify",
                {"chatId": event.chat_id, "preview": event.message},
                room=user_channel(recipient_id),
            )
        self.logger.debug(f"Published message to channel {channel_name}")

    async def publish_room_message_created(self, event: RoomMessageCreated):
        channel_name = room_channel(event.room_id)
        await self.sio.emit(
            "room:new-message",
            {"roomId": event.room_id, "message": event.message},
            room=channel_name,
            skip_sid=event.origin_sid,
        )
        self.logger.debug(f"Published message to channel {channel_name}")

    def register(self, dispatcher) -> None:
        dispatcher.register("DirectMessageCreated", self.publish_direct_message_created)
        dispatcher.register("RoomMessageCreated", self.publish_room_message_created)
