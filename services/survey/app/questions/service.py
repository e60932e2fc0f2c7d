"""Question service — definitions, schema-level checks and the cached ordered list.

Pure business logic, no FastAPI imports.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any
from uuid import UUID

from pydantic import TypeAdapter
from redis.asyncio import Redis

from app import cache
from app.config import Settings
from app.exceptions import InvalidQuestionDefinitionError, QuestionNotFoundError
from app.models.enums import CHOICE_TYPES, QuestionType
from app.questions.schemas import QuestionSchema, ScaleBounds
from app.store import SurveyStore
from app.surveys import service as surveys_service

logger = logging.getLogger(__name__)

_question_list = TypeAdapter(list[QuestionSchema])


def check_question_definition(
    type: QuestionType,
    text: str,
    options: Sequence[str] | None = None,
    validation: ScaleBounds | None = None,
) -> None:
    """Structural rules a question must meet when it is defined or edited.

    Responses are validated later on the assumption that these hold.
    """
    if not text or not text.strip():
        raise InvalidQuestionDefinitionError("Question text must not be empty")

    if type in CHOICE_TYPES:
        if not options or len(options) < 2:
            raise InvalidQuestionDefinitionError(
                f"{type.value} questions must have at least 2 options",
            )
        if len(set(options)) != len(options):
            raise InvalidQuestionDefinitionError("Question options must be distinct")
    elif type == QuestionType.SCALE:
        if validation is None or validation.min is None or validation.max is None:
            raise InvalidQuestionDefinitionError("Scale questions must have min and max values")
        if validation.min >= validation.max:
            raise InvalidQuestionDefinitionError("Min value must be less than max value")


async def _invalidate(survey_id: UUID, redis: Redis) -> None:
    # cached reports were computed against the old definitions
    await cache.delete(redis, cache.questions_key(survey_id), cache.results_key(survey_id))


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def list_questions(
    store: SurveyStore, redis: Redis, settings: Settings, survey_id: UUID,
) -> list[QuestionSchema]:
    """All questions of a survey in display order."""
    key = cache.questions_key(survey_id)
    cached = await cache.get_model(key, _question_list, redis)
    if cached is not None:
        logger.debug("Cache hit for questions: %s", survey_id)
        return cached

    questions = await store.list_questions(survey_id)
    await cache.set_json(
        key, _question_list.dump_json(questions).decode(), settings.questions_cache_ttl_secs, redis,
    )
    return questions


async def get_question(store: SurveyStore, question_id: str) -> QuestionSchema:
    question = await store.get_question(question_id)
    if question is None:
        raise QuestionNotFoundError(question_id)
    return question


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


async def create_question(
    store: SurveyStore,
    redis: Redis,
    settings: Settings,
    owner_id: UUID,
    *,
    survey_id: UUID,
    text: str,
    type: QuestionType,
    options: list[str] | None = None,
    required: bool = False,
    validation: ScaleBounds | None = None,
    order: int = 0,
) -> QuestionSchema:
    await surveys_service.get_owned_survey(store, redis, settings, survey_id, owner_id)
    check_question_definition(type, text, options, validation)

    question = await store.create_question(
        survey_id,
        text=text,
        type=type,
        options=options,
        required=required,
        validation=validation,
        order=order,
    )
    logger.info("Question created: %s for survey %s", question.question_id, survey_id)
    await _invalidate(survey_id, redis)
    return question


async def update_question(
    store: SurveyStore,
    redis: Redis,
    settings: Settings,
    question_id: str,
    owner_id: UUID,
    **fields: Any,
) -> QuestionSchema:
    """Apply a partial edit. The merged definition is re-checked when type, options or bounds change."""
    question = await get_question(store, question_id)
    await surveys_service.get_owned_survey(store, redis, settings, question.survey_id, owner_id)

    changes = {k: v for k, v in fields.items() if v is not None}
    if changes.keys() & {"type", "options", "validation", "text"}:
        merged = question.model_copy(update=changes)
        check_question_definition(merged.type, merged.text, merged.options, merged.validation)

    updated = await store.update_question(question_id, **changes)
    logger.info("Question updated: %s", question_id)
    await _invalidate(question.survey_id, redis)
    return updated


async def delete_question(
    store: SurveyStore,
    redis: Redis,
    settings: Settings,
    question_id: str,
    owner_id: UUID,
) -> None:
    question = await get_question(store, question_id)
    await surveys_service.get_owned_survey(store, redis, settings, question.survey_id, owner_id)
    await store.delete_question(question_id)
    logger.info("Question deleted: %s", question_id)
    await _invalidate(question.survey_id, redis)
