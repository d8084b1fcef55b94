# roommate_chat/main.py
import logging
import sys
from contextlib import asynccontextmanager

import socketio
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from roommate_chat.api import chats, room_chats
from roommate_chat.config import AppConfig
from roommate_chat.domain.exceptions import ChatError
from roommate_chat.infrastructure import schemas
from roommate_chat.infrastructure.database import create_database
from roommate_chat.infrastructure.event_dispatcher import EventDispatcher
from roommate_chat.infrastructure.event_handlers import RealtimeEventHandlers
from roommate_chat.infrastructure.redis_client import RedisClient
from roommate_chat.infrastructure.security import SecurityService
from roommate_chat.realtime.gateway import RealtimeGateway
from roommate_chat.realtime.server import create_socketio_server


class Application:
    def __init__(self, config: AppConfig):
        self.config = config
        self.logger = self.setup_logger()
        self.database = create_database(config.DATABASE_URL, echo=False)
        self.redis_client = (
            RedisClient(config.REDIS_URL, self.logger) if config.REDIS_URL else None
        )
        self.event_dispatcher = EventDispatcher(self.logger)
        self.security_service = SecurityService(config)

        self.sio = create_socketio_server(config, self.logger)
        self.event_handlers = RealtimeEventHandlers(self.sio, self.logger)
        self.event_handlers.register(self.event_dispatcher)
        self.realtime_gateway = RealtimeGateway(
            self.sio,
            self.database,
            self.security_service,
            self.event_dispatcher,
            config,
            self.logger,
        )
        self.realtime_gateway.register()

    @asynccontextmanager
    async def lifespan(self, app: FastAPI):
        await self.database.connect()
        if self.redis_client:
            await self.redis_client.connect()
        yield
        if self.redis_client:
            await self.redis_client.disconnect()
        await self.database.disconnect()

    def setup_logger(self):
        logger = logging.getLogger("RoommateChat")
        logger.setLevel(self.config.LOG_LEVEL.upper())

        if not logger.handlers:
            c_handler = logging.StreamHandler(sys.stdout)
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
            c_handler.setFormatter(formatter)
            logger.addHandler(c_handler)

        return logger

    def create_app(self) -> FastAPI:
        app = FastAPI(
            title=self.config.PROJECT_NAME,
            version=self.config.PROJECT_VERSION,
            description=self.config.PROJECT_DESCRIPTION,
            openapi_url=f"{self.config.API_PREFIX}/openapi.json",
            lifespan=self.lifespan,
        )

        app.state.config = self.config
        app.state.security_service = self.security_service
        app.state.event_dispatcher = self.event_dispatcher
        app.state.database = self.database
        app.state.logger = self.logger

        app.add_middleware(
            CORSMiddleware,
            allow_origins=self.config.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        app.include_router(
            chats.router, prefix=f"{self.config.API_PREFIX}/chats", tags=["chats"]
        )
        app.include_router(
            room_chats.router,
            prefix=f"{self.config.API_PREFIX}/room-chats",
            tags=["room-chats"],
        )

        @app.get(f"{self.config.API_PREFIX}/health")
        async def health():
            return {"message": f"{self.config.PROJECT_NAME} is running"}

        @app.exception_handler(ChatError)
        async def chat_error_handler(request: Request, exc: ChatError):
            return JSONResponse(
                status_code=exc.status_code,
                content=schemas.ErrorResponse(error=exc.message).model_dump(),
            )

        @app.exception_handler(RequestValidationError)
        async def request_validation_handler(
            request: Request, exc: RequestValidationError
        ):
            errors = exc.errors()
            detail = errors[0].get("msg", "Invalid input") if errors else "Invalid input"
            return JSONResponse(
                status_code=400, content=schemas.ErrorResponse(error=detail).model_dump()
            )

        @app.exception_handler(Exception)
        async def global_exception_handler(request: Request, exc: Exception):
            self.logger.error(f"Unhandled error on {request.url.path}: {exc!s}")
            return JSONResponse(
                status_code=500,
                content=schemas.ErrorResponse(
                    error="An unexpected error occurred"
                ).model_dump(),
            )

        return app

    def create_asgi_app(self) -> socketio.ASGIApp:
        return socketio.ASGIApp(
            self.sio,
            other_asgi_app=self.create_app(),
            socketio_path=self.config.SOCKETIO_PATH,
        )


def create():
    config = AppConfig()
    application = Application(config)
    app = application.create_asgi_app()
    application.logger.info("Application created and configured")

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create(), host="127.0.0.1", port=8000)
