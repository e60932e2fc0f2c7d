"""Answer-set validation against a survey's questions.

Pure decision function: no I/O, no side effects. The first violation found is
raised as ``AnswerRejectedError``; checks run in question order (not in the
order answers were submitted) so the reported violation is deterministic.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from app.answers import as_selection, is_empty_answer, to_number
from app.exceptions import AnswerRejectedError, RejectReason
from app.models.enums import QuestionType
from app.questions.schemas import QuestionSchema


def _reject(reason: RejectReason, question: QuestionSchema, message: str) -> AnswerRejectedError:
    return AnswerRejectedError(reason, question.question_id, message)


def _check_multiple_choice(question: QuestionSchema, value: Any) -> None:
    if not isinstance(value, str) or value not in (question.options or []):
        raise _reject(
            RejectReason.INVALID_OPTION, question,
            f'Invalid option for question "{question.text}"',
        )


def _check_multiple_selection(question: QuestionSchema, value: Any) -> None:
    selected = as_selection(value)
    options = question.options or []
    if selected is None or any(not isinstance(s, str) or s not in options for s in selected):
        raise _reject(
            RejectReason.INVALID_OPTION, question,
            f'Invalid option for question "{question.text}"',
        )


def _check_scale(question: QuestionSchema, value: Any) -> None:
    bounds = question.validation
    low = bounds.min if bounds is not None else None
    high = bounds.max if bounds is not None else None
    number = to_number(value)
    if (
        number is None
        or (low is not None and number < low)
        or (high is not None and number > high)
    ):
        raise _reject(
            RejectReason.OUT_OF_RANGE, question,
            f"Answer must be between {low} and {high}",
        )


_TYPE_CHECKS = {
    QuestionType.MULTIPLE_CHOICE: _check_multiple_choice,
    QuestionType.MULTIPLE_SELECTION: _check_multiple_selection,
    QuestionType.SCALE: _check_scale,
}


def validate_answers(
    questions: Sequence[QuestionSchema],
    answers: Mapping[str, Any],
) -> None:
    """Accept (return None) or reject (raise) a submitted answer set.

    1. every submitted question id must belong to the survey;
    2. each answered question, in question order: required answers must be
       non-empty, then the type-specific check applies to whatever was sent,
       blank values included;
    3. every required question must have a non-empty answer.
    """
    by_id = {q.question_id: q for q in questions}

    for question_id in answers:
        if question_id not in by_id:
            raise AnswerRejectedError(
                RejectReason.QUESTION_NOT_FOUND, question_id,
                f"Question {question_id} not found",
            )

    for question in questions:
        if question.question_id not in answers:
            continue
        value = answers[question.question_id]
        if question.required and is_empty_answer(value):
            raise _reject(
                RejectReason.REQUIRED_NOT_ANSWERED, question,
                f'Question "{question.text}" is required',
            )
        check = _TYPE_CHECKS.get(question.type)
        if check is not None:
            check(question, value)

    for question in questions:
        if question.required and is_empty_answer(answers.get(question.question_id)):
            raise _reject(
                RejectReason.REQUIRED_NOT_ANSWERED, question,
                f'Required question "{question.text}" not answered',
            )
