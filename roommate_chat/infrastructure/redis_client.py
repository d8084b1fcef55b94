# roommate_chat/infrastructure/redis_client.py
import logging

import redis.asyncio as redis


class RedisClient:
    """Startup check for the Redis server that carries Socket.IO broadcasts."""

    def __init__(self, url: str, logger: logging.Logger):
        self.url = url
        self.client: redis.Redis | None = None
        self.logger = logger

    async def connect(self):
        self.client = redis.from_url(self.url, decode_responses=True)
        try:
            await self.client.ping()
            self.logger.info(f"Successfully connected to Redis at {self.url}")
        except redis.ConnectionError as e:
            self.logger.error(f"Failed to connect to Redis: {e!s}")
            self.logger.error(f"Redis url: {self.url}")
            raise e

    async def disconnect(self):
        if self.client:
            await self.client.aclose()
            self.client = None
            self.logger.info("Disconnected from Redis")
