"""Survey service — CRUD, ownership checks and the public respondent view.

Pure business logic, no FastAPI imports.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from pydantic import TypeAdapter
from redis.asyncio import Redis

from app import cache
from app.config import Settings
from app.exceptions import NotSurveyOwnerError, SurveyClosedError, SurveyNotFoundError
from app.store import SurveyStore
from app.surveys.schemas import PublicSurvey, SurveyRecord

logger = logging.getLogger(__name__)

_survey = TypeAdapter(SurveyRecord)
_survey_list = TypeAdapter(list[SurveyRecord])


async def _invalidate(survey: SurveyRecord, redis: Redis) -> None:
    await cache.delete(redis, cache.survey_key(survey.survey_id))
    await cache.delete_by_prefix(cache.surveys_prefix(survey.owner_id), redis)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def get_survey(
    store: SurveyStore, redis: Redis, settings: Settings, survey_id: UUID,
) -> SurveyRecord:
    key = cache.survey_key(survey_id)
    cached = await cache.get_model(key, _survey, redis)
    if cached is not None:
        logger.debug("Cache hit for survey %s", survey_id)
        return cached

    survey = await store.get_survey(survey_id)
    if survey is None:
        raise SurveyNotFoundError(str(survey_id))
    await cache.set_json(key, survey.model_dump_json(), settings.survey_cache_ttl_secs, redis)
    return survey


async def get_owned_survey(
    store: SurveyStore, redis: Redis, settings: Settings, survey_id: UUID, owner_id: UUID,
) -> SurveyRecord:
    survey = await get_survey(store, redis, settings, survey_id)
    if survey.owner_id != owner_id:
        raise NotSurveyOwnerError()
    return survey


async def list_surveys(
    store: SurveyStore,
    redis: Redis,
    settings: Settings,
    owner_id: UUID,
    *,
    is_active: bool | None = None,
) -> list[SurveyRecord]:
    key = cache.surveys_key(owner_id, is_active)
    cached = await cache.get_model(key, _survey_list, redis)
    if cached is not None:
        logger.debug("Cache hit for surveys list: %s", owner_id)
        return cached

    surveys = await store.list_surveys(owner_id, is_active)
    await cache.set_json(
        key, _survey_list.dump_json(surveys).decode(), settings.surveys_list_cache_ttl_secs, redis,
    )
    return surveys


async def get_public_survey(
    store: SurveyStore, redis: Redis, settings: Settings, survey_id: UUID,
) -> PublicSurvey:
    """The respondent-facing view; refuses inactive and expired surveys."""
    survey = await get_survey(store, redis, settings, survey_id)
    if not survey.is_active:
        raise SurveyClosedError(str(survey_id), "no longer active")
    if survey.expires_at is not None and survey.expires_at < datetime.now(timezone.utc):
        raise SurveyClosedError(str(survey_id), "expired")
    return PublicSurvey(
        survey_id=survey.survey_id,
        title=survey.title,
        description=survey.description,
        is_active=survey.is_active,
        expires_at=survey.expires_at,
    )


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


async def create_survey(
    store: SurveyStore,
    redis: Redis,
    owner_id: UUID,
    *,
    title: str,
    description: str | None = None,
    expires_at: datetime | None = None,
) -> SurveyRecord:
    survey = await store.create_survey(
        owner_id, title=title, description=description, expires_at=expires_at,
    )
    logger.info("Survey created: %s by user %s", survey.survey_id, owner_id)
    await cache.delete_by_prefix(cache.surveys_prefix(owner_id), redis)
    return survey


async def update_survey(
    store: SurveyStore,
    redis: Redis,
    settings: Settings,
    survey_id: UUID,
    owner_id: UUID,
    **fields: Any,
) -> SurveyRecord:
    await get_owned_survey(store, redis, settings, survey_id, owner_id)
    changes = {k: v for k, v in fields.items() if v is not None}
    survey = await store.update_survey(survey_id, **changes)
    logger.info("Survey updated: %s by user %s", survey_id, owner_id)
    await _invalidate(survey, redis)
    return survey


async def delete_survey(
    store: SurveyStore, redis: Redis, settings: Settings, survey_id: UUID, owner_id: UUID,
) -> None:
    survey = await get_owned_survey(store, redis, settings, survey_id, owner_id)
    await store.delete_survey(survey_id)
    logger.info("Survey deleted: %s by user %s", survey_id, owner_id)
    await _invalidate(survey, redis)
    await cache.delete(
        redis,
        cache.questions_key(survey_id),
        cache.responses_key(survey_id),
        cache.results_key(survey_id),
    )
