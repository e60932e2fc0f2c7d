"""Survey domain Pydantic V2 schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class SurveyRecord(BaseModel):
    """Survey metadata as stored; ``owner_id`` gates results and exports."""

    model_config = ConfigDict(from_attributes=True)

    survey_id: UUID
    owner_id: UUID
    title: str
    description: str | None = None
    is_active: bool = True
    expires_at: datetime | None = None
    response_count: int = 0
    created_at: datetime
    updated_at: datetime


class PublicSurvey(BaseModel):
    """What respondents may see about a survey."""

    survey_id: UUID
    title: str
    description: str | None = None
    is_active: bool
    expires_at: datetime | None = None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateSurveyRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=300)
    description: str | None = Field(default=None, max_length=5000)
    expires_at: datetime | None = None


class UpdateSurveyRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = Field(default=None, max_length=5000)
    is_active: bool | None = None
    expires_at: datetime | None = None
