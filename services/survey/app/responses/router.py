"""Responses router — respondent submission and owner reads.

Delegates to controller for business logic orchestration.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from redis.asyncio import Redis

from app.config import Settings, get_settings
from app.dependencies import get_client_ip, get_notifier, get_redis, get_store
from app.events.publishers import RedisNotifier
from app.rate_limit import SUBMIT_RATE_LIMIT, limiter
from app.responses import controller
from app.responses.schemas import ResponseRecord, SubmissionReceipt, SubmitResponseRequest
from app.store import SurveyStore
from shared.auth.dependencies import get_current_user_optional, get_current_user_required
from shared.models.user import CurrentUser

router = APIRouter(prefix="/responses", tags=["Responses"])


@router.post(
    "",
    response_model=SubmissionReceipt,
    status_code=status.HTTP_201_CREATED,
    summary="Submit an answer set",
    description="Anonymous submissions are allowed and rate limited per client IP. "
    "Rejected answers return 400 with `{code, message, question_id}`; "
    "closed surveys return 404.",
)
@limiter.limit(SUBMIT_RATE_LIMIT)
async def submit_response(
    body: SubmitResponseRequest,
    request: Request,
    store: SurveyStore = Depends(get_store),
    redis: Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
    notifier: RedisNotifier = Depends(get_notifier),
    user: CurrentUser | None = Depends(get_current_user_optional),
) -> SubmissionReceipt:
    if body.user_agent is None:
        body.user_agent = request.headers.get("User-Agent")
    return await controller.submit_response(
        store, redis, settings, notifier, body,
        submitter_id=user.id if user else None,
        ip=get_client_ip(request),
    )


@router.get(
    "/surveys/{survey_id}",
    response_model=list[ResponseRecord],
    summary="List responses to an owned survey, newest first",
)
async def list_responses(
    survey_id: UUID,
    store: SurveyStore = Depends(get_store),
    redis: Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
    user: CurrentUser = Depends(get_current_user_required),
) -> list[ResponseRecord]:
    return await controller.list_responses(store, redis, settings, survey_id, user.id)


@router.get(
    "/{response_id}",
    response_model=ResponseRecord,
    summary="Get one response to an owned survey",
)
async def get_response(
    response_id: UUID,
    store: SurveyStore = Depends(get_store),
    redis: Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
    user: CurrentUser = Depends(get_current_user_required),
) -> ResponseRecord:
    return await controller.get_response(store, redis, settings, response_id, user.id)
