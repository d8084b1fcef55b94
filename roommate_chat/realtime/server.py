# roommate_chat/realtime/server.py
import logging

import socketio

from roommate_chat.config import AppConfig


def create_socketio_server(config: AppConfig, logger: logging.Logger) -> socketio.AsyncServer:
    # with Redis, emits reach sockets held by every worker process
    client_manager = None
    if config.REDIS_URL:
        client_manager = socketio.AsyncRedisManager(config.REDIS_URL)
        logger.info("Socket.IO channels shared through Redis")

    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=config.CORS_ORIGINS,
        client_manager=client_manager,
        logger=False,
        engineio_logger=False,
    )
