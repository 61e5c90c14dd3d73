"""
Async Redis client shared by the tent hold gate.
Redis is optional: when disabled or unreachable, callers get None.
"""

from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from nomadic.core.config import get_settings
from nomadic.core.logging import get_logger

logger = get_logger(__name__)


class RedisClient:
    """Process-wide Redis connection, created on first use."""

    _instance: Optional[redis.Redis] = None

    @classmethod
    async def get_client(cls) -> Optional[redis.Redis]:
        settings = get_settings()
        if not settings.REDIS_ENABLED:
            return None

        if cls._instance is None:
            client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30,
            )
            try:
                await client.ping()
            except RedisError as e:
                logger.error("redis_connection_failed", error=str(e))
                await client.aclose()
                return None
            logger.info("redis_connected", url=settings.REDIS_URL)
            cls._instance = client
        return cls._instance

    @classmethod
    async def close(cls) -> None:
        if cls._instance is not None:
            await cls._instance.aclose()
            cls._instance = None


async def get_redis() -> Optional[redis.Redis]:
    return await RedisClient.get_client()


async def close_redis() -> None:
    await RedisClient.close()


async def get_redis_status() -> dict:
    """Connection summary for the health endpoint."""
    client = await get_redis()
    if client is None:
        return {"status": "disabled" if not get_settings().REDIS_ENABLED else "unavailable"}
    try:
        await client.ping()
        return {"status": "connected"}
    except RedisError as e:
        return {"status": "error", "error": str(e)}
