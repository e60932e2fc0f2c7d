"""Questions router — HTTP layer for question definitions.

Delegates to controller for business logic orchestration.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from redis.asyncio import Redis

from app.config import Settings, get_settings
from app.dependencies import get_redis, get_store
from app.questions import controller
from app.questions.schemas import CreateQuestionRequest, QuestionSchema, UpdateQuestionRequest
from app.store import SurveyStore
from shared.auth.dependencies import get_current_user_required
from shared.models.user import CurrentUser

router = APIRouter(prefix="/questions", tags=["Questions"])


@router.post(
    "",
    response_model=QuestionSchema,
    status_code=status.HTTP_201_CREATED,
    summary="Add a question to an owned survey",
    description="multiple_choice/multiple_selection need at least 2 options; "
    "scale needs validation bounds with min < max.",
)
async def create_question(
    body: CreateQuestionRequest,
    store: SurveyStore = Depends(get_store),
    redis: Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
    user: CurrentUser = Depends(get_current_user_required),
) -> QuestionSchema:
    return await controller.create_question(store, redis, settings, user.id, body)


@router.get(
    "/surveys/{survey_id}",
    response_model=list[QuestionSchema],
    summary="List a survey's questions in display order",
)
async def list_questions(
    survey_id: UUID,
    store: SurveyStore = Depends(get_store),
    redis: Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> list[QuestionSchema]:
    return await controller.list_questions(store, redis, settings, survey_id)


@router.get(
    "/{question_id}",
    response_model=QuestionSchema,
    summary="Get a question by ID",
)
async def get_question(
    question_id: str,
    store: SurveyStore = Depends(get_store),
) -> QuestionSchema:
    return await controller.get_question(store, question_id)


@router.patch(
    "/{question_id}",
    response_model=QuestionSchema,
    summary="Edit a question",
    description="Editing type or options after responses exist is allowed; "
    "historical statistics then follow the new definition.",
)
async def update_question(
    question_id: str,
    body: UpdateQuestionRequest,
    store: SurveyStore = Depends(get_store),
    redis: Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
    user: CurrentUser = Depends(get_current_user_required),
) -> QuestionSchema:
    return await controller.update_question(store, redis, settings, question_id, user.id, body)


@router.delete(
    "/{question_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a question",
)
async def delete_question(
    question_id: str,
    store: SurveyStore = Depends(get_store),
    redis: Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
    user: CurrentUser = Depends(get_current_user_required),
) -> None:
    await controller.delete_question(store, redis, settings, question_id, user.id)
