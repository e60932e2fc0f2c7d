"""Surveys router — HTTP layer for survey CRUD and the public respondent view.

Delegates to controller for business logic orchestration.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from redis.asyncio import Redis

from app.config import Settings, get_settings
from app.dependencies import get_redis, get_store
from app.store import SurveyStore
from app.surveys import controller
from app.surveys.schemas import (
    CreateSurveyRequest,
    PublicSurvey,
    SurveyRecord,
    UpdateSurveyRequest,
)
from shared.auth.dependencies import get_current_user_required
from shared.models.user import CurrentUser

router = APIRouter(prefix="/surveys", tags=["Surveys"])


@router.post(
    "",
    response_model=SurveyRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Create a survey",
)
async def create_survey(
    body: CreateSurveyRequest,
    store: SurveyStore = Depends(get_store),
    redis: Redis = Depends(get_redis),
    user: CurrentUser = Depends(get_current_user_required),
) -> SurveyRecord:
    return await controller.create_survey(store, redis, user.id, body)


@router.get(
    "",
    response_model=list[SurveyRecord],
    summary="List the caller's surveys",
)
async def list_surveys(
    is_active: bool | None = Query(default=None),
    store: SurveyStore = Depends(get_store),
    redis: Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
    user: CurrentUser = Depends(get_current_user_required),
) -> list[SurveyRecord]:
    return await controller.list_surveys(store, redis, settings, user.id, is_active)


@router.get(
    "/{survey_id}",
    response_model=SurveyRecord,
    summary="Get an owned survey by ID",
)
async def get_survey(
    survey_id: UUID,
    store: SurveyStore = Depends(get_store),
    redis: Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
    user: CurrentUser = Depends(get_current_user_required),
) -> SurveyRecord:
    return await controller.get_survey(store, redis, settings, survey_id, user.id)


@router.get(
    "/{survey_id}/public",
    response_model=PublicSurvey,
    summary="Public survey view for respondents",
    description="404 when the survey is inactive or expired.",
)
async def get_public_survey(
    survey_id: UUID,
    store: SurveyStore = Depends(get_store),
    redis: Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> PublicSurvey:
    return await controller.get_public_survey(store, redis, settings, survey_id)


@router.patch(
    "/{survey_id}",
    response_model=SurveyRecord,
    summary="Update a survey",
)
async def update_survey(
    survey_id: UUID,
    body: UpdateSurveyRequest,
    store: SurveyStore = Depends(get_store),
    redis: Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
    user: CurrentUser = Depends(get_current_user_required),
) -> SurveyRecord:
    return await controller.update_survey(store, redis, settings, survey_id, user.id, body)


@router.delete(
    "/{survey_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a survey",
)
async def delete_survey(
    survey_id: UUID,
    store: SurveyStore = Depends(get_store),
    redis: Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
    user: CurrentUser = Depends(get_current_user_required),
) -> None:
    await controller.delete_survey(store, redis, settings, survey_id, user.id)
