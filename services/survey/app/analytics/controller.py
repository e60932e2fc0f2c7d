"""Analytics controller — maps service results to HTTP responses."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import HTTPException, status
from redis.asyncio import Redis

from app.analytics import service
from app.analytics.schemas import AggregationReport, ExportResult
from app.config import Settings
from app.email.send import Mailer
from app.events.publishers import RedisNotifier
from app.exceptions import ExportStorageError, NotSurveyOwnerError, SurveyNotFoundError
from app.storage import S3ExportStorage
from app.store import SurveyStore

logger = logging.getLogger(__name__)


def _handle_domain_error(exc: Exception) -> HTTPException:
    if isinstance(exc, SurveyNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, NotSurveyOwnerError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not own this survey.")
    if isinstance(exc, ExportStorageError):
        logger.error("Export storage failure: %s", exc)
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Export storage is unavailable. Please try again later.",
        )
    logger.exception("Unexpected error in analytics controller")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error.")


async def get_results(
    store: SurveyStore, redis: Redis, settings: Settings, survey_id: UUID, owner_id: UUID,
) -> AggregationReport:
    try:
        return await service.get_results(store, redis, settings, survey_id, owner_id)
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def export_results(
    store: SurveyStore,
    redis: Redis,
    settings: Settings,
    storage: S3ExportStorage,
    mailer: Mailer,
    notifier: RedisNotifier,
    survey_id: UUID,
    owner_id: UUID,
    owner_email: str,
) -> ExportResult:
    try:
        return await service.export_results(
            store, redis, settings, storage, mailer, notifier,
            survey_id, owner_id, owner_email,
        )
    except Exception as exc:
        raise _handle_domain_error(exc) from exc
