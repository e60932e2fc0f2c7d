"""Redis cache helpers for the survey service.

Key schema
----------
survey:{survey_id}            JSON object  TTL 2 min   survey metadata
surveys:{owner_id}:{filter}   JSON list    TTL 5 min   owner's survey list (all|active|inactive)
questions:{survey_id}         JSON list    TTL 5 min   ordered question schemas
responses:{survey_id}         JSON list    TTL 2 min   raw responses, newest first
analytics:{survey_id}         JSON object  TTL 1 min   aggregation report

Every helper is best-effort: a Redis failure is logged and treated as a miss
(reads) or skipped (writes/deletes). Entries that fail to decode or validate
are misses too. Nothing here raises to the caller.
"""

from __future__ import annotations

import json
import logging
from typing import Any, TypeVar
from uuid import UUID

from pydantic import TypeAdapter, ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


def survey_key(survey_id: UUID) -> str:
    return f"survey:{survey_id}"


def surveys_prefix(owner_id: UUID) -> str:
    return f"surveys:{owner_id}:"


def surveys_key(owner_id: UUID, is_active: bool | None = None) -> str:
    scope = "all" if is_active is None else ("active" if is_active else "inactive")
    return f"{surveys_prefix(owner_id)}{scope}"


def questions_key(survey_id: UUID) -> str:
    return f"questions:{survey_id}"


def responses_key(survey_id: UUID) -> str:
    return f"responses:{survey_id}"


def results_key(survey_id: UUID) -> str:
    return f"analytics:{survey_id}"


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


async def get_json(key: str, redis: Redis) -> Any | None:
    """Return the decoded value, or None on miss, Redis failure or a corrupt entry."""
    try:
        raw = await redis.get(key)
    except RedisError as exc:
        logger.warning("Cache read failed for %s, treating as miss: %s", key, exc)
        return None
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Discarding undecodable cache entry %s", key)
        return None


async def get_model(key: str, adapter: TypeAdapter[T], redis: Redis) -> T | None:
    """Like ``get_json`` but validated; an entry of the wrong shape is a miss."""
    cached = await get_json(key, redis)
    if cached is None:
        return None
    try:
        return adapter.validate_python(cached)
    except ValidationError as exc:
        logger.warning(
            "Discarding cache entry %s with unexpected shape (%d errors)", key, exc.error_count(),
        )
        return None


async def set_json(key: str, value: Any, ttl_secs: int, redis: Redis) -> None:
    """Store ``value`` (JSON-serialisable, or a JSON string) for ``ttl_secs``."""
    payload = value if isinstance(value, str) else json.dumps(value, default=str)
    try:
        await redis.setex(key, ttl_secs, payload)
    except RedisError as exc:
        logger.warning("Cache write skipped for %s: %s", key, exc)


async def delete(redis: Redis, *keys: str) -> None:
    if not keys:
        return
    try:
        await redis.delete(*keys)
    except RedisError as exc:
        logger.warning("Cache delete failed for %s: %s", ", ".join(keys), exc)


async def delete_by_prefix(prefix: str, redis: Redis) -> int:
    """Delete every key starting with ``prefix``. Returns how many were removed."""
    try:
        keys = [key async for key in redis.scan_iter(match=f"{prefix}*")]
        if not keys:
            return 0
        removed = await redis.delete(*keys)
    except RedisError as exc:
        logger.warning("Cache invalidation failed for prefix %s: %s", prefix, exc)
        return 0
    logger.debug("Invalidated %d cache keys matching %s*", removed, prefix)
    return removed
