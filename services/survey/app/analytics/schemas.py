"""Aggregation report schemas.

Each per-question result is a variant keyed by ``type``; the ``data`` payload
has one concrete shape per variant so the calculators can be checked
exhaustively against ``QuestionType``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Statistics payloads
# ---------------------------------------------------------------------------


class ChoiceStats(BaseModel):
    """Option counts. Percentages are 2-decimal strings, or literal 0 when nothing counted."""

    counts: dict[str, int]
    percentages: dict[str, str | int]
    total: int


class ScaleStats(BaseModel):
    average: str
    min: int | float
    max: int | float
    count: int
    distribution: dict[int, int]


class EmptyScaleStats(BaseModel):
    """Returned verbatim when a scale question has no numeric answers."""

    model_config = ConfigDict(extra="forbid")

    average: Literal[0] = 0
    min: Literal[0] = 0
    max: Literal[0] = 0
    count: Literal[0] = 0


class TextAnswer(BaseModel):
    text: Any
    submitted_at: datetime | None = None


class TextStats(BaseModel):
    answers: list[TextAnswer]
    count: int


class DateStats(BaseModel):
    dates: list[Any]
    count: int


# ---------------------------------------------------------------------------
# Per-question results (discriminated on ``type``)
# ---------------------------------------------------------------------------


class _ResultBase(BaseModel):
    question: str
    total_responses: int


class MultipleChoiceResult(_ResultBase):
    type: Literal["multiple_choice"] = "multiple_choice"
    data: ChoiceStats


class MultipleSelectionResult(_ResultBase):
    type: Literal["multiple_selection"] = "multiple_selection"
    data: ChoiceStats


class YesNoResult(_ResultBase):
    type: Literal["yes_no"] = "yes_no"
    data: ChoiceStats


class ScaleResult(_ResultBase):
    type: Literal["scale"] = "scale"
    data: ScaleStats | EmptyScaleStats


class TextResult(_ResultBase):
    type: Literal["text"] = "text"
    data: TextStats


class DateResult(_ResultBase):
    type: Literal["date"] = "date"
    data: DateStats


QuestionResult = Annotated[
    Union[
        MultipleChoiceResult,
        MultipleSelectionResult,
        YesNoResult,
        ScaleResult,
        TextResult,
        DateResult,
    ],
    Field(discriminator="type"),
]


class AggregationReport(BaseModel):
    """Per-question statistics for one survey. Transient: safe to drop and rebuild."""

    total_responses: int
    per_question: dict[str, QuestionResult]


class ExportResult(BaseModel):
    url: str
    filename: str
