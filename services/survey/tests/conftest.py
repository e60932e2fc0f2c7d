from collections import Counter
from collections.abc import AsyncIterator
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from redis.exceptions import ConnectionError as RedisConnectionError

from app.config import Settings
from app.events.publishers import RedisNotifier
from app.models.enums import QuestionType
from app.questions.schemas import QuestionSchema, ScaleBounds
from app.responses.schemas import ResponseRecord
from app.surveys.schemas import SurveyRecord


class FakeRedis:
    """Dict-backed stand-in for the handful of redis.asyncio calls the service makes.

    Set ``fail = True`` to make every call raise like an unreachable server.
    """

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.published: list[tuple[str, str]] = []
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise RedisConnectionError("Connection refused")

    async def get(self, key: str) -> str | None:
        self._check()
        return self.data.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> None:
        self._check()
        self.data[key] = value
        self.ttls[key] = ttl

    async def delete(self, *keys: str) -> int:
        self._check()
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                self.ttls.pop(key, None)
                removed += 1
        return removed

    async def scan_iter(self, match: str = "*") -> AsyncIterator[str]:
        self._check()
        prefix = match.rstrip("*")
        for key in list(self.data):
            if key.startswith(prefix):
                yield key

    async def publish(self, channel: str, message: str) -> int:
        self._check()
        self.published.append((channel, message))
        return 1


class InMemorySurveyStore:
    """SurveyStore kept in dicts. ``calls`` counts reads so cache behaviour can be asserted."""

    def __init__(self) -> None:
        self.surveys: dict[UUID, SurveyRecord] = {}
        self.questions: dict[str, QuestionSchema] = {}
        self.responses: list[ResponseRecord] = []
        self.calls: Counter[str] = Counter()

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    # -- surveys --

    async def get_survey(self, survey_id: UUID) -> SurveyRecord | None:
        self.calls["get_survey"] += 1
        return self.surveys.get(survey_id)

    async def list_surveys(self, owner_id: UUID, is_active: bool | None = None) -> list[SurveyRecord]:
        self.calls["list_surveys"] += 1
        return [
            s for s in self.surveys.values()
            if s.owner_id == owner_id and (is_active is None or s.is_active is is_active)
        ]

    async def create_survey(self, owner_id: UUID, **fields: Any) -> SurveyRecord:
        now = self._now()
        survey = SurveyRecord(
            survey_id=uuid4(), owner_id=owner_id, created_at=now, updated_at=now, **fields,
        )
        self.surveys[survey.survey_id] = survey
        return survey

    async def update_survey(self, survey_id: UUID, **fields: Any) -> SurveyRecord:
        survey = self.surveys[survey_id].model_copy(update={**fields, "updated_at": self._now()})
        self.surveys[survey_id] = survey
        return survey

    async def delete_survey(self, survey_id: UUID) -> None:
        self.surveys.pop(survey_id, None)
        self.questions = {k: q for k, q in self.questions.items() if q.survey_id != survey_id}
        self.responses = [r for r in self.responses if r.survey_id != survey_id]

    async def increment_response_count(self, survey_id: UUID) -> None:
        survey = self.surveys[survey_id]
        self.surveys[survey_id] = survey.model_copy(
            update={"response_count": survey.response_count + 1},
        )

    # -- questions --

    async def list_questions(self, survey_id: UUID) -> list[QuestionSchema]:
        self.calls["list_questions"] += 1
        matching = [q for q in self.questions.values() if q.survey_id == survey_id]
        return sorted(matching, key=lambda q: q.order)

    async def get_question(self, question_id: str) -> QuestionSchema | None:
        return self.questions.get(question_id)

    async def create_question(self, survey_id: UUID, **fields: Any) -> QuestionSchema:
        question = QuestionSchema(question_id=str(uuid4()), survey_id=survey_id, **fields)
        self.questions[question.question_id] = question
        return question

    async def update_question(self, question_id: str, **fields: Any) -> QuestionSchema:
        question = self.questions[question_id].model_copy(update=fields)
        self.questions[question_id] = question
        return question

    async def delete_question(self, question_id: str) -> None:
        self.questions.pop(question_id, None)

    # -- responses --

    async def list_responses(self, survey_id: UUID) -> list[ResponseRecord]:
        self.calls["list_responses"] += 1
        return [r for r in self.responses if r.survey_id == survey_id]

    async def get_response(self, response_id: UUID) -> ResponseRecord | None:
        return next((r for r in self.responses if r.response_id == response_id), None)

    async def append_response(
        self,
        survey_id: UUID,
        answers: dict[str, Any],
        *,
        submitter_id: UUID | None = None,
        user_agent: str | None = None,
        ip: str | None = None,
    ) -> ResponseRecord:
        # strictly increasing timestamps keep ordering assertions stable
        submitted_at = self._now()
        if self.responses and submitted_at <= self.responses[-1].submitted_at:
            submitted_at = self.responses[-1].submitted_at + timedelta(microseconds=1)
        response = ResponseRecord(
            response_id=uuid4(),
            survey_id=survey_id,
            submitter_id=submitter_id,
            answers=answers,
            submitted_at=submitted_at,
            user_agent=user_agent,
            ip=ip,
        )
        self.responses.append(response)
        return response


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        smtp_host="",
        brevo_api_key="",
        s3_bucket="test-exports",
    )


@pytest.fixture
def redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def store() -> InMemorySurveyStore:
    return InMemorySurveyStore()


@pytest.fixture
def notifier(redis: FakeRedis) -> RedisNotifier:
    return RedisNotifier(redis)


@pytest.fixture
def owner_id() -> UUID:
    return uuid4()


@pytest_asyncio.fixture
async def survey(store: InMemorySurveyStore, owner_id: UUID) -> SurveyRecord:
    return await store.create_survey(owner_id, title="Customer feedback", description=None, expires_at=None)


@pytest_asyncio.fixture
async def questions(store: InMemorySurveyStore, survey: SurveyRecord) -> dict[str, QuestionSchema]:
    """One question of every type, keyed by a short name."""
    sid = survey.survey_id
    return {
        "colour": await store.create_question(
            sid, text="Favourite colour?", type=QuestionType.MULTIPLE_CHOICE,
            options=["red", "green", "blue"], required=True, order=0,
        ),
        "features": await store.create_question(
            sid, text="Which features do you use?", type=QuestionType.MULTIPLE_SELECTION,
            options=["search", "export", "alerts"], order=1,
        ),
        "recommend": await store.create_question(
            sid, text="Would you recommend us?", type=QuestionType.YES_NO, order=2,
        ),
        "rating": await store.create_question(
            sid, text="Rate us", type=QuestionType.SCALE,
            validation=ScaleBounds(min=1, max=5), required=True, order=3,
        ),
        "comments": await store.create_question(
            sid, text="Anything else?", type=QuestionType.TEXT, order=4,
        ),
        "visited": await store.create_question(
            sid, text="When did you last visit?", type=QuestionType.DATE, order=5,
        ),
    }
