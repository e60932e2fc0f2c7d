"""Realtime notifications over Redis pub/sub.

Publishing is fire-and-forget: a failed publish is logged and dropped.
"""
from __future__ import annotations

import json
import logging
from typing import Any
from uuid import UUID

from pydantic import BaseModel
from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.responses.schemas import ResponseRecord
from shared.events.schemas import ResponseSubmitted, ResultsExported

logger = logging.getLogger(__name__)


def survey_topic(survey_id: UUID) -> str:
    return f"survey-{survey_id}"


class RedisNotifier:
    def __init__(self, redis: Redis) -> None:
        self._redis = redis

    async def publish(self, topic: str, event_name: str, payload: BaseModel | dict[str, Any]) -> None:
        data = payload.model_dump(mode="json") if isinstance(payload, BaseModel) else payload
        message = json.dumps({"event": event_name, "data": data}, default=str)
        try:
            await self._redis.publish(topic, message)
        except RedisError as exc:
            logger.warning("Publishing %s on %s failed: %s", event_name, topic, exc)
            return
        logger.debug("Published %s on %s", event_name, topic)


def build_response_submitted_event(response: ResponseRecord) -> ResponseSubmitted:
    return ResponseSubmitted(
        response_id=response.response_id,
        survey_id=response.survey_id,
        submitter_id=response.submitter_id,
        answers=response.answers,
        submitted_at=response.submitted_at,
    )


async def publish_response_submitted(notifier: RedisNotifier, response: ResponseRecord) -> None:
    event = build_response_submitted_event(response)
    await notifier.publish(survey_topic(response.survey_id), event.event_type, event)


async def publish_results_exported(
    notifier: RedisNotifier, survey_id: UUID, filename: str,
) -> None:
    event = ResultsExported(survey_id=survey_id, filename=filename)
    await notifier.publish(survey_topic(survey_id), event.event_type, event)
