from shared.database.postgres import AsyncSessionFactory, Base, get_async_session_factory
from shared.database.redis_client import RedisClient, close_redis_client, get_redis_client

__all__ = [
    "AsyncSessionFactory",
    "Base",
    "get_async_session_factory",
    "RedisClient",
    "close_redis_client",
    "get_redis_client",
]
