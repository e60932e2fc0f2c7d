"""Question domain Pydantic V2 schemas.

``QuestionSchema`` is the read-only record the validator and the calculators
work from; the request models carry create/update payloads.
"""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import QuestionType


class ScaleBounds(BaseModel):
    """Inclusive numeric bounds of a scale question."""

    model_config = ConfigDict(frozen=True)

    min: int | float | None = None
    max: int | float | None = None


class QuestionSchema(BaseModel):
    """One survey question: type, constraints and display order."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    question_id: str
    survey_id: UUID
    text: str
    type: QuestionType
    options: list[str] | None = None
    required: bool = False
    validation: ScaleBounds | None = None
    order: int = 0


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateQuestionRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    survey_id: UUID
    text: str = Field(min_length=1, max_length=2000)
    type: QuestionType
    options: list[str] | None = Field(
        default=None,
        description="Answer choices for multiple_choice/multiple_selection (at least 2).",
    )
    required: bool = False
    validation: ScaleBounds | None = Field(
        default=None,
        description="Inclusive {min, max} bounds, mandatory for scale questions.",
    )
    order: int = Field(default=0, ge=0)


class UpdateQuestionRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    text: str | None = Field(default=None, min_length=1, max_length=2000)
    type: QuestionType | None = None
    options: list[str] | None = None
    required: bool | None = None
    validation: ScaleBounds | None = None
    order: int | None = Field(default=None, ge=0)
