"""Response service — validated submission and owner-only reads.

Pure business logic, no FastAPI imports.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from pydantic import TypeAdapter
from redis.asyncio import Redis

from app import cache
from app.config import Settings
from app.events.publishers import RedisNotifier, publish_response_submitted
from app.exceptions import ResponseNotFoundError
from app.questions import service as questions_service
from app.responses.schemas import ResponseRecord
from app.responses.validator import validate_answers
from app.store import SurveyStore
from app.surveys import service as surveys_service

logger = logging.getLogger(__name__)

_response_list = TypeAdapter(list[ResponseRecord])


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


async def submit_response(
    store: SurveyStore,
    redis: Redis,
    settings: Settings,
    notifier: RedisNotifier,
    *,
    survey_id: UUID,
    answers: dict[str, Any],
    submitter_id: UUID | None = None,
    user_agent: str | None = None,
    ip: str | None = None,
) -> ResponseRecord:
    """Validate and append one answer set.

    Cached results and response lists for the survey are dropped before
    returning so the next read reflects this response.
    """
    await surveys_service.get_public_survey(store, redis, settings, survey_id)

    questions = await questions_service.list_questions(store, redis, settings, survey_id)
    validate_answers(questions, answers)

    response = await store.append_response(
        survey_id,
        answers,
        submitter_id=submitter_id,
        user_agent=user_agent,
        ip=ip,
    )
    logger.info("Response created: %s for survey %s", response.response_id, survey_id)

    # the response is stored; stale caches must go even if the counter update fails
    try:
        await store.increment_response_count(survey_id)
    finally:
        await cache.delete(
            redis,
            cache.results_key(survey_id),
            cache.responses_key(survey_id),
            cache.survey_key(survey_id),
        )

    await publish_response_submitted(notifier, response)
    return response


# ---------------------------------------------------------------------------
# Owner reads
# ---------------------------------------------------------------------------


async def list_responses(
    store: SurveyStore,
    redis: Redis,
    settings: Settings,
    survey_id: UUID,
    owner_id: UUID,
) -> list[ResponseRecord]:
    """All responses of an owned survey, newest first."""
    await surveys_service.get_owned_survey(store, redis, settings, survey_id, owner_id)

    key = cache.responses_key(survey_id)
    cached = await cache.get_model(key, _response_list, redis)
    if cached is not None:
        logger.debug("Cache hit for responses: %s", survey_id)
        return cached

    responses = await store.list_responses(survey_id)
    responses.sort(key=lambda r: r.submitted_at, reverse=True)
    await cache.set_json(
        key, _response_list.dump_json(responses).decode(), settings.responses_cache_ttl_secs, redis,
    )
    return responses


async def get_response(
    store: SurveyStore,
    redis: Redis,
    settings: Settings,
    response_id: UUID,
    owner_id: UUID,
) -> ResponseRecord:
    response = await store.get_response(response_id)
    if response is None:
        raise ResponseNotFoundError(str(response_id))
    await surveys_service.get_owned_survey(store, redis, settings, response.survey_id, owner_id)
    return response
