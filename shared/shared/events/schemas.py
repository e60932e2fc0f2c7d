from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResponseSubmitted(BaseModel):
    """Realtime event: a response was accepted for a survey."""

    model_config = ConfigDict(extra="forbid")

    event_type: str = "new-response"
    response_id: UUID
    survey_id: UUID
    submitter_id: UUID | None = None
    answers: dict[str, Any]
    submitted_at: datetime
    occurred_at: datetime = Field(default_factory=_utcnow)


class ResultsExported(BaseModel):
    """Realtime event: a CSV export of survey results is ready for download."""

    model_config = ConfigDict(extra="forbid")

    event_type: str = "export-ready"
    survey_id: UUID
    filename: str
    occurred_at: datetime = Field(default_factory=_utcnow)
