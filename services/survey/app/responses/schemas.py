"""Response domain Pydantic V2 schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ResponseRecord(BaseModel):
    """One accepted answer set, keyed by question id."""

    model_config = ConfigDict(from_attributes=True)

    response_id: UUID
    survey_id: UUID
    submitter_id: UUID | None = None
    answers: dict[str, Any]
    submitted_at: datetime
    user_agent: str | None = None
    ip: str | None = None


class SubmitResponseRequest(BaseModel):
    survey_id: UUID
    answers: dict[str, Any] = Field(
        description="Mapping of question_id to answer value.",
    )
    user_agent: str | None = Field(default=None, max_length=500)


class SubmissionReceipt(BaseModel):
    response_id: UUID
    survey_id: UUID
    submitted_at: datetime
    message: str = "Response submitted successfully"
