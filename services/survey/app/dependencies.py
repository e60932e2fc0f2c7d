"""FastAPI dependencies wiring collaborators into request handlers.

Long-lived clients (store, Redis) are created in the app lifespan and hung on
``app.state``; tests swap any of these via ``app.dependency_overrides``.
"""

from fastapi import Depends, Request
from redis.asyncio import Redis

from app.config import Settings, get_settings
from app.email.send import Mailer
from app.events.publishers import RedisNotifier
from app.storage import S3ExportStorage
from app.store import SurveyStore


def get_store(request: Request) -> SurveyStore:
    return request.app.state.store


def get_redis(request: Request) -> Redis:
    return request.app.state.redis


def get_notifier(redis: Redis = Depends(get_redis)) -> RedisNotifier:
    return RedisNotifier(redis)


def get_storage(settings: Settings = Depends(get_settings)) -> S3ExportStorage:
    return S3ExportStorage(settings)


def get_mailer(settings: Settings = Depends(get_settings)) -> Mailer:
    return Mailer(settings)


def get_client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None
