"""Surveys controller — maps service results to HTTP responses."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import HTTPException, status
from redis.asyncio import Redis

from app.config import Settings
from app.exceptions import NotSurveyOwnerError, SurveyClosedError, SurveyNotFoundError
from app.store import SurveyStore
from app.surveys import service
from app.surveys.schemas import (
    CreateSurveyRequest,
    PublicSurvey,
    SurveyRecord,
    UpdateSurveyRequest,
)

logger = logging.getLogger(__name__)


def _handle_domain_error(exc: Exception) -> HTTPException:
    if isinstance(exc, (SurveyNotFoundError, SurveyClosedError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, NotSurveyOwnerError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not own this survey.")
    logger.exception("Unexpected error in surveys controller")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error.")


async def create_survey(
    store: SurveyStore, redis: Redis, owner_id: UUID, body: CreateSurveyRequest,
) -> SurveyRecord:
    try:
        return await service.create_survey(store, redis, owner_id, **body.model_dump())
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def list_surveys(
    store: SurveyStore, redis: Redis, settings: Settings, owner_id: UUID, is_active: bool | None,
) -> list[SurveyRecord]:
    try:
        return await service.list_surveys(store, redis, settings, owner_id, is_active=is_active)
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def get_survey(
    store: SurveyStore, redis: Redis, settings: Settings, survey_id: UUID, owner_id: UUID,
) -> SurveyRecord:
    try:
        return await service.get_owned_survey(store, redis, settings, survey_id, owner_id)
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def get_public_survey(
    store: SurveyStore, redis: Redis, settings: Settings, survey_id: UUID,
) -> PublicSurvey:
    try:
        return await service.get_public_survey(store, redis, settings, survey_id)
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def update_survey(
    store: SurveyStore,
    redis: Redis,
    settings: Settings,
    survey_id: UUID,
    owner_id: UUID,
    body: UpdateSurveyRequest,
) -> SurveyRecord:
    try:
        return await service.update_survey(
            store, redis, settings, survey_id, owner_id,
            **body.model_dump(exclude_unset=True),
        )
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def delete_survey(
    store: SurveyStore, redis: Redis, settings: Settings, survey_id: UUID, owner_id: UUID,
) -> None:
    try:
        await service.delete_survey(store, redis, settings, survey_id, owner_id)
    except Exception as exc:
        raise _handle_domain_error(exc) from exc
