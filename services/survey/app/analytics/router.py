"""Analytics router — per-question statistics and CSV export.

Delegates to controller for business logic orchestration.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from redis.asyncio import Redis

from app.analytics import controller
from app.analytics.schemas import AggregationReport, ExportResult
from app.config import Settings, get_settings
from app.dependencies import get_mailer, get_notifier, get_redis, get_storage, get_store
from app.email.send import Mailer
from app.events.publishers import RedisNotifier
from app.storage import S3ExportStorage
from app.store import SurveyStore
from shared.auth.dependencies import get_current_user_required
from shared.models.user import CurrentUser

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get(
    "/surveys/{survey_id}",
    response_model=AggregationReport,
    summary="Aggregated results for an owned survey",
    description="Cached for a short TTL; a new submission drops the cached report.",
)
async def get_results(
    survey_id: UUID,
    store: SurveyStore = Depends(get_store),
    redis: Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
    user: CurrentUser = Depends(get_current_user_required),
) -> AggregationReport:
    return await controller.get_results(store, redis, settings, survey_id, user.id)


@router.post(
    "/surveys/{survey_id}/export",
    response_model=ExportResult,
    summary="Export all responses as CSV",
    description="Uploads the CSV to object storage, emails the caller a signed "
    "download link and returns the same link.",
)
async def export_results(
    survey_id: UUID,
    store: SurveyStore = Depends(get_store),
    redis: Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
    storage: S3ExportStorage = Depends(get_storage),
    mailer: Mailer = Depends(get_mailer),
    notifier: RedisNotifier = Depends(get_notifier),
    user: CurrentUser = Depends(get_current_user_required),
) -> ExportResult:
    return await controller.export_results(
        store, redis, settings, storage, mailer, notifier,
        survey_id, user.id, user.email,
    )
