# roommate_chat/tests/unit/test_redis_client.py

import logging
from unittest.mock import AsyncMock, patch

import pytest
import redis
from fakeredis import aioredis

from roommate_chat.infrastructure.redis_client import RedisClient


@pytest.fixture
def test_logger():
    logger = logging.getLogger("test_redis")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture
def redis_client(test_logger):
    return RedisClient(url="redis://localhost:6379/0", logger=test_logger)


@pytest.mark.asyncio
async def test_redis_connect_and_disconnect(redis_client, caplog):
    caplog.set_level(logging.DEBUG)
    fake = aioredis.FakeRedis(decode_responses=True)
    with patch("redis.asyncio.from_url", return_value=fake):
        await redis_client.connect()
        assert redis_client.client is fake
        assert f"Successfully connected to Redis at {redis_client.url}" in caplog.text

        await redis_client.disconnect()
        assert redis_client.client is None
        assert "Disconnected from Redis" in caplog.text


@pytest.mark.asyncio
async def test_redis_connection_error(redis_client, caplog):
    mock_redis = AsyncMock()
    mock_redis.ping.side_effect = redis.ConnectionError("Connection refused")
    with patch("redis.asyncio.from_url", return_value=mock_redis):
        with pytest.raises(redis.ConnectionError):
            await redis_client.connect()
    assert "Failed to connect to Redis" in caplog.text


@pytest.mark.asyncio
async def test_disconnect_without_connect(redis_client):
    await redis_client.disconnect()
    assert redis_client.client is None
