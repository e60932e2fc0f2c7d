"""Responses controller — maps service results to HTTP responses."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import HTTPException, status
from redis.asyncio import Redis

from app.config import Settings
from app.events.publishers import RedisNotifier
from app.exceptions import (
    AnswerRejectedError,
    NotSurveyOwnerError,
    ResponseNotFoundError,
    SurveyClosedError,
    SurveyNotFoundError,
)
from app.responses import service
from app.responses.schemas import ResponseRecord, SubmissionReceipt, SubmitResponseRequest
from app.store import SurveyStore

logger = logging.getLogger(__name__)


def _handle_domain_error(exc: Exception) -> HTTPException:
    if isinstance(exc, AnswerRejectedError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "code": exc.reason.value,
                "message": exc.message,
                "question_id": exc.question_id,
            },
        )
    if isinstance(exc, (SurveyNotFoundError, SurveyClosedError, ResponseNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, NotSurveyOwnerError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not own this survey.")
    logger.exception("Unexpected error in responses controller")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error.")


async def submit_response(
    store: SurveyStore,
    redis: Redis,
    settings: Settings,
    notifier: RedisNotifier,
    body: SubmitResponseRequest,
    submitter_id: UUID | None,
    ip: str | None,
) -> SubmissionReceipt:
    try:
        response = await service.submit_response(
            store, redis, settings, notifier,
            survey_id=body.survey_id,
            answers=body.answers,
            submitter_id=submitter_id,
            user_agent=body.user_agent,
            ip=ip,
        )
    except Exception as exc:
        raise _handle_domain_error(exc) from exc
    return SubmissionReceipt(
        response_id=response.response_id,
        survey_id=response.survey_id,
        submitted_at=response.submitted_at,
    )


async def list_responses(
    store: SurveyStore, redis: Redis, settings: Settings, survey_id: UUID, owner_id: UUID,
) -> list[ResponseRecord]:
    try:
        return await service.list_responses(store, redis, settings, survey_id, owner_id)
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def get_response(
    store: SurveyStore, redis: Redis, settings: Settings, response_id: UUID, owner_id: UUID,
) -> ResponseRecord:
    try:
        return await service.get_response(store, redis, settings, response_id, owner_id)
    except Exception as exc:
        raise _handle_domain_error(exc) from exc
