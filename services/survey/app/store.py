"""Document store for surveys, questions and responses.

``SurveyStore`` is the narrow interface the domain services depend on;
``SqlSurveyStore`` implements it on PostgreSQL. Each call runs in its own
session so independent reads can be awaited concurrently.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Protocol
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.question import Question
from app.models.survey import Survey
from app.models.survey_response import SurveyResponse
from app.questions.schemas import QuestionSchema
from app.responses.schemas import ResponseRecord
from app.surveys.schemas import SurveyRecord


class SurveyStore(Protocol):
    # -- surveys --
    async def get_survey(self, survey_id: UUID) -> SurveyRecord | None: ...

    async def list_surveys(
        self, owner_id: UUID, is_active: bool | None = None,
    ) -> list[SurveyRecord]: ...

    async def create_survey(self, owner_id: UUID, **fields: Any) -> SurveyRecord: ...

    async def update_survey(self, survey_id: UUID, **fields: Any) -> SurveyRecord: ...

    async def delete_survey(self, survey_id: UUID) -> None: ...

    async def increment_response_count(self, survey_id: UUID) -> None: ...

    # -- questions --
    async def list_questions(self, survey_id: UUID) -> list[QuestionSchema]: ...

    async def get_question(self, question_id: str) -> QuestionSchema | None: ...

    async def create_question(self, survey_id: UUID, **fields: Any) -> QuestionSchema: ...

    async def update_question(self, question_id: str, **fields: Any) -> QuestionSchema: ...

    async def delete_question(self, question_id: str) -> None: ...

    # -- responses --
    async def list_responses(self, survey_id: UUID) -> list[ResponseRecord]: ...

    async def get_response(self, response_id: UUID) -> ResponseRecord | None: ...

    async def append_response(
        self,
        survey_id: UUID,
        answers: dict[str, Any],
        *,
        submitter_id: UUID | None = None,
        user_agent: str | None = None,
        ip: str | None = None,
    ) -> ResponseRecord: ...


def _question_record(row: Question) -> QuestionSchema:
    return QuestionSchema(
        question_id=str(row.question_id),
        survey_id=row.survey_id,
        text=row.text,
        type=row.type,
        options=row.options,
        required=row.required,
        validation=row.validation,
        order=row.order,
    )


def _question_columns(fields: dict[str, Any]) -> dict[str, Any]:
    """Request payload → column values (bounds model dumped to JSONB)."""
    values = dict(fields)
    validation = values.get("validation")
    if validation is not None and hasattr(validation, "model_dump"):
        values["validation"] = validation.model_dump()
    return values


def _question_uuid(question_id: str) -> UUID | None:
    try:
        return UUID(str(question_id))
    except ValueError:
        return None


class SqlSurveyStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    # -- surveys --

    async def get_survey(self, survey_id: UUID) -> SurveyRecord | None:
        async with self._session_factory() as db:
            row = await db.get(Survey, survey_id)
            return SurveyRecord.model_validate(row) if row is not None else None

    async def list_surveys(
        self, owner_id: UUID, is_active: bool | None = None,
    ) -> list[SurveyRecord]:
        stmt = select(Survey).where(Survey.owner_id == owner_id)
        if is_active is not None:
            stmt = stmt.where(Survey.is_active.is_(is_active))
        stmt = stmt.order_by(Survey.created_at.desc())
        async with self._session_factory() as db:
            result = await db.execute(stmt)
            return [SurveyRecord.model_validate(s) for s in result.scalars().all()]

    async def create_survey(self, owner_id: UUID, **fields: Any) -> SurveyRecord:
        async with self._session_factory() as db:
            survey = Survey(owner_id=owner_id, **fields)
            db.add(survey)
            await db.commit()
            await db.refresh(survey)
            return SurveyRecord.model_validate(survey)

    async def update_survey(self, survey_id: UUID, **fields: Any) -> SurveyRecord:
        async with self._session_factory() as db:
            survey = await db.get(Survey, survey_id)
            for key, value in fields.items():
                setattr(survey, key, value)
            await db.commit()
            await db.refresh(survey)
            return SurveyRecord.model_validate(survey)

    async def delete_survey(self, survey_id: UUID) -> None:
        async with self._session_factory() as db:
            await db.execute(delete(Survey).where(Survey.survey_id == survey_id))
            await db.commit()

    async def increment_response_count(self, survey_id: UUID) -> None:
        async with self._session_factory() as db:
            await db.execute(
                update(Survey)
                .where(Survey.survey_id == survey_id)
                .values(response_count=Survey.response_count + 1)
            )
            await db.commit()

    # -- questions --

    async def list_questions(self, survey_id: UUID) -> list[QuestionSchema]:
        stmt = (
            select(Question)
            .where(Question.survey_id == survey_id)
            .order_by(Question.order, Question.created_at)
        )
        async with self._session_factory() as db:
            result = await db.execute(stmt)
            return [_question_record(q) for q in result.scalars().all()]

    async def get_question(self, question_id: str) -> QuestionSchema | None:
        key = _question_uuid(question_id)
        if key is None:
            return None
        async with self._session_factory() as db:
            row = await db.get(Question, key)
            return _question_record(row) if row is not None else None

    async def create_question(self, survey_id: UUID, **fields: Any) -> QuestionSchema:
        async with self._session_factory() as db:
            question = Question(survey_id=survey_id, **_question_columns(fields))
            db.add(question)
            await db.commit()
            await db.refresh(question)
            return _question_record(question)

    async def update_question(self, question_id: str, **fields: Any) -> QuestionSchema:
        async with self._session_factory() as db:
            question = await db.get(Question, UUID(question_id))
            for key, value in _question_columns(fields).items():
                setattr(question, key, value)
            await db.commit()
            await db.refresh(question)
            return _question_record(question)

    async def delete_question(self, question_id: str) -> None:
        async with self._session_factory() as db:
            await db.execute(delete(Question).where(Question.question_id == UUID(question_id)))
            await db.commit()

    # -- responses --

    async def list_responses(self, survey_id: UUID) -> list[ResponseRecord]:
        stmt = (
            select(SurveyResponse)
            .where(SurveyResponse.survey_id == survey_id)
            .order_by(SurveyResponse.submitted_at)
        )
        async with self._session_factory() as db:
            result = await db.execute(stmt)
            return [ResponseRecord.model_validate(r) for r in result.scalars().all()]

    async def get_response(self, response_id: UUID) -> ResponseRecord | None:
        async with self._session_factory() as db:
            row = await db.get(SurveyResponse, response_id)
            return ResponseRecord.model_validate(row) if row is not None else None

    async def append_response(
        self,
        survey_id: UUID,
        answers: dict[str, Any],
        *,
        submitter_id: UUID | None = None,
        user_agent: str | None = None,
        ip: str | None = None,
    ) -> ResponseRecord:
        async with self._session_factory() as db:
            response = SurveyResponse(
                survey_id=survey_id,
                submitter_id=submitter_id,
                answers=answers,
                user_agent=user_agent,
                ip=ip,
                submitted_at=datetime.now(timezone.utc),
            )
            db.add(response)
            await db.commit()
            await db.refresh(response)
            return ResponseRecord.model_validate(response)
