from typing import Any

import redis.asyncio as redis

RedisClient = redis.Redis


def get_redis_client(redis_url: str, **kwargs: Any) -> RedisClient:
    """Build a pooled async client. Values come back as ``str``, not ``bytes``."""
    kwargs.setdefault("socket_timeout", 2.0)
    kwargs.setdefault("socket_connect_timeout", 2.0)
    return redis.from_url(redis_url, decode_responses=True, **kwargs)


async def close_redis_client(client: RedisClient) -> None:
    await client.aclose()
