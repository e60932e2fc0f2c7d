"""Questions controller — maps service results to HTTP responses."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import HTTPException, status
from redis.asyncio import Redis

from app.config import Settings
from app.exceptions import (
    InvalidQuestionDefinitionError,
    NotSurveyOwnerError,
    QuestionNotFoundError,
    SurveyNotFoundError,
)
from app.questions import service
from app.questions.schemas import CreateQuestionRequest, QuestionSchema, UpdateQuestionRequest
from app.store import SurveyStore

logger = logging.getLogger(__name__)


def _handle_domain_error(exc: Exception) -> HTTPException:
    if isinstance(exc, (SurveyNotFoundError, QuestionNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, NotSurveyOwnerError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not own this survey.")
    if isinstance(exc, InvalidQuestionDefinitionError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "invalid_question_definition", "message": exc.detail},
        )
    logger.exception("Unexpected error in questions controller")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error.")


async def create_question(
    store: SurveyStore,
    redis: Redis,
    settings: Settings,
    owner_id: UUID,
    body: CreateQuestionRequest,
) -> QuestionSchema:
    try:
        # dict(body) keeps nested ScaleBounds as a model
        return await service.create_question(store, redis, settings, owner_id, **dict(body))
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def list_questions(
    store: SurveyStore, redis: Redis, settings: Settings, survey_id: UUID,
) -> list[QuestionSchema]:
    try:
        return await service.list_questions(store, redis, settings, survey_id)
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def get_question(store: SurveyStore, question_id: str) -> QuestionSchema:
    try:
        return await service.get_question(store, question_id)
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def update_question(
    store: SurveyStore,
    redis: Redis,
    settings: Settings,
    question_id: str,
    owner_id: UUID,
    body: UpdateQuestionRequest,
) -> QuestionSchema:
    changes = {field: getattr(body, field) for field in body.model_fields_set}
    try:
        return await service.update_question(
            store, redis, settings, question_id, owner_id, **changes,
        )
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def delete_question(
    store: SurveyStore, redis: Redis, settings: Settings, question_id: str, owner_id: UUID,
) -> None:
    try:
        await service.delete_question(store, redis, settings, question_id, owner_id)
    except Exception as exc:
        raise _handle_domain_error(exc) from exc
