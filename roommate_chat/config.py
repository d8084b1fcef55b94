# roommate_chat/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    PROJECT_NAME: str = "Roommate Chat API"
    PROJECT_VERSION: str = "1.0.0"
    PROJECT_DESCRIPTION: str = "Direct and room group chats for the roommate marketplace"
    API_PREFIX: str = "/api"
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    DATABASE_URL: str = "sqlite+aiosqlite:///:memory:"
    REDIS_URL: str | None = None
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    SOCKETIO_PATH: str = "socket.io"
    DEFAULT_PAGE_LIMIT: int = 50
    MAX_PAGE_LIMIT: int = 200
    MAX_MESSAGE_LENGTH: int = 1000
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="allow")
