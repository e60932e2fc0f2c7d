"""Per-question statistic calculators.

One pure function per question type, each ``(question, responses) -> stats``.
They never raise: answers that don't fit the current question definition
(legacy rows, options renamed after the fact) are skipped, not reported.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from typing import Any

from pydantic import BaseModel

from app.analytics.schemas import (
    AggregationReport,
    ChoiceStats,
    DateResult,
    DateStats,
    EmptyScaleStats,
    MultipleChoiceResult,
    MultipleSelectionResult,
    ScaleResult,
    ScaleStats,
    TextAnswer,
    TextResult,
    TextStats,
    YesNoResult,
)
from app.answers import as_selection, is_empty_answer, normalize_yes_no, to_number
from app.models.enums import QuestionType
from app.questions.schemas import QuestionSchema
from app.responses.schemas import ResponseRecord

YES_NO_OPTIONS = ("yes", "no")


def _answer_for(question: QuestionSchema, response: ResponseRecord) -> Any:
    answers = response.answers if isinstance(response.answers, dict) else {}
    return answers.get(question.question_id)


def _choice_stats(options: Sequence[str], counts: dict[str, int]) -> ChoiceStats:
    total = sum(counts.values())
    percentages: dict[str, str | int] = {
        option: f"{counts[option] / total * 100:.2f}" if total > 0 else 0
        for option in options
    }
    return ChoiceStats(counts=counts, percentages=percentages, total=total)


# ---------------------------------------------------------------------------
# Calculators
# ---------------------------------------------------------------------------


def calculate_multiple_choice(
    question: QuestionSchema, responses: Sequence[ResponseRecord],
) -> ChoiceStats:
    options = list(question.options or [])
    counts = dict.fromkeys(options, 0)
    for response in responses:
        answer = _answer_for(question, response)
        if isinstance(answer, str) and answer in counts:
            counts[answer] += 1
    return _choice_stats(options, counts)


def calculate_multiple_selection(
    question: QuestionSchema, responses: Sequence[ResponseRecord],
) -> ChoiceStats:
    """Each declared option is counted at most once per response; ``total`` is the selection count."""
    options = list(question.options or [])
    counts = dict.fromkeys(options, 0)
    for response in responses:
        selected = as_selection(_answer_for(question, response)) or []
        for option in {s for s in selected if isinstance(s, str)}:
            if option in counts:
                counts[option] += 1
    return _choice_stats(options, counts)


def calculate_yes_no(
    question: QuestionSchema, responses: Sequence[ResponseRecord],
) -> ChoiceStats:
    counts = dict.fromkeys(YES_NO_OPTIONS, 0)
    for response in responses:
        bucket = normalize_yes_no(_answer_for(question, response))
        if bucket is not None:
            counts[bucket] += 1
    return _choice_stats(YES_NO_OPTIONS, counts)


def calculate_scale(
    question: QuestionSchema, responses: Sequence[ResponseRecord],
) -> ScaleStats | EmptyScaleStats:
    values = []
    for response in responses:
        number = to_number(_answer_for(question, response))
        if number is not None:
            values.append(number)

    if not values:
        return EmptyScaleStats()

    distribution: dict[int, int] = {}
    bounds = question.validation
    if bounds is not None and bounds.min is not None and bounds.max is not None:
        for point in range(math.ceil(bounds.min), math.floor(bounds.max) + 1):
            distribution[point] = sum(1 for v in values if v == point)

    return ScaleStats(
        average=f"{sum(values) / len(values):.2f}",
        min=min(values),
        max=max(values),
        count=len(values),
        distribution=distribution,
    )


def calculate_text(
    question: QuestionSchema, responses: Sequence[ResponseRecord],
) -> TextStats:
    answers = []
    for response in responses:
        answer = _answer_for(question, response)
        if not is_empty_answer(answer):
            answers.append(TextAnswer(text=answer, submitted_at=response.submitted_at))
    return TextStats(answers=answers, count=len(answers))


def calculate_date(
    question: QuestionSchema, responses: Sequence[ResponseRecord],
) -> DateStats:
    dates = []
    for response in responses:
        answer = _answer_for(question, response)
        if not is_empty_answer(answer):
            dates.append(answer)
    return DateStats(dates=dates, count=len(dates))


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

_Calculator = Callable[[QuestionSchema, Sequence[ResponseRecord]], BaseModel]

CALCULATORS: dict[QuestionType, tuple[type[BaseModel], _Calculator]] = {
    QuestionType.MULTIPLE_CHOICE: (MultipleChoiceResult, calculate_multiple_choice),
    QuestionType.MULTIPLE_SELECTION: (MultipleSelectionResult, calculate_multiple_selection),
    QuestionType.YES_NO: (YesNoResult, calculate_yes_no),
    QuestionType.SCALE: (ScaleResult, calculate_scale),
    QuestionType.TEXT: (TextResult, calculate_text),
    QuestionType.DATE: (DateResult, calculate_date),
}


def build_report(
    questions: Sequence[QuestionSchema], responses: Sequence[ResponseRecord],
) -> AggregationReport:
    """Run the calculator for every question and assemble the report.

    ``total_responses`` on each question is overall survey participation, not the
    number of responses that answered that question.
    """
    total = len(responses)
    per_question = {}
    for question in questions:
        result_cls, calculate = CALCULATORS[question.type]
        per_question[question.question_id] = result_cls(
            question=question.text,
            total_responses=total,
            data=calculate(question, responses),
        )
    return AggregationReport(total_responses=total, per_question=per_question)
