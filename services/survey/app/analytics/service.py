"""Analytics service — cache-aside aggregation and CSV export.

Pure business logic, no FastAPI imports.
"""

from __future__ import annotations

import asyncio
import logging
import time
from uuid import UUID

from pydantic import TypeAdapter
from redis.asyncio import Redis

from app import cache
from app.analytics.calculators import build_report
from app.analytics.exporter import build_csv
from app.analytics.schemas import AggregationReport, ExportResult
from app.config import Settings
from app.email.send import Mailer, results_report_email
from app.events.publishers import RedisNotifier, publish_results_exported
from app.questions.schemas import QuestionSchema
from app.responses.schemas import ResponseRecord
from app.storage import S3ExportStorage
from app.store import SurveyStore
from app.surveys import service as surveys_service

logger = logging.getLogger(__name__)

_report = TypeAdapter(AggregationReport)


async def _load_survey_data(
    store: SurveyStore, survey_id: UUID,
) -> tuple[list[QuestionSchema], list[ResponseRecord]]:
    # independent reads, one session each
    questions, responses = await asyncio.gather(
        store.list_questions(survey_id),
        store.list_responses(survey_id),
    )
    return questions, responses


async def get_results(
    store: SurveyStore,
    redis: Redis,
    settings: Settings,
    survey_id: UUID,
    owner_id: UUID,
) -> AggregationReport:
    """Per-question statistics for an owned survey.

    A cached report is returned unchanged until its TTL runs out; submissions
    delete it, so staleness is bounded by races, not by the TTL.
    """
    await surveys_service.get_owned_survey(store, redis, settings, survey_id, owner_id)

    key = cache.results_key(survey_id)
    cached = await cache.get_model(key, _report, redis)
    if cached is not None:
        logger.debug("Cache hit for analytics: %s", survey_id)
        return cached

    questions, responses = await _load_survey_data(store, survey_id)
    report = build_report(questions, responses)

    await cache.set_json(key, report.model_dump_json(), settings.results_cache_ttl_secs, redis)
    return report


def export_filename(settings: Settings, survey_id: UUID) -> str:
    return f"{settings.s3_export_prefix}{survey_id}-{int(time.time() * 1000)}.csv"


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
    """Build a CSV of every response, upload it and mail the owner a signed link.

    The report and the rows come from one fetch so header and data agree.
    Upload/signing failures propagate; the email is best-effort.
    """
    survey = await surveys_service.get_owned_survey(store, redis, settings, survey_id, owner_id)

    questions, responses = await _load_survey_data(store, survey_id)
    report = build_report(questions, responses)
    csv_text = build_csv(report, responses)

    filename = export_filename(settings, survey_id)
    await storage.put(filename, csv_text.encode("utf-8"), "text/csv")
    url = await storage.signed_url(filename, settings.export_url_expiry_secs)

    subject, body = results_report_email(survey.title, url, settings.export_url_expiry_secs)
    await mailer.send(owner_email, subject, body)
    await publish_results_exported(notifier, survey_id, filename)

    logger.info("CSV export created for survey %s (%d responses)", survey_id, len(responses))
    return ExportResult(url=url, filename=filename)
