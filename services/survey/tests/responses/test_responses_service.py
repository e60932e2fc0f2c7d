import json
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from app import cache
from app.exceptions import (
    AnswerRejectedError,
    NotSurveyOwnerError,
    RejectReason,
    ResponseNotFoundError,
    SurveyClosedError,
    SurveyNotFoundError,
)
from app.responses import service


def _answers(questions, **values) -> dict:
    return {questions[name].question_id: value for name, value in values.items()}


@pytest.mark.asyncio
async def test_submit_appends_response(store, redis, settings, notifier, survey, questions) -> None:
    submitter = uuid4()
    response = await service.submit_response(
        store, redis, settings, notifier,
        survey_id=survey.survey_id,
        answers=_answers(questions, colour="red", rating=3, recommend=True),
        submitter_id=submitter,
        user_agent="pytest",
        ip="10.0.0.1",
    )

    assert store.responses == [response]
    assert response.submitter_id == submitter
    assert response.user_agent == "pytest"
    assert response.ip == "10.0.0.1"
    assert store.surveys[survey.survey_id].response_count == 1


@pytest.mark.asyncio
async def test_submit_publishes_new_response_event(store, redis, settings, notifier, survey, questions) -> None:
    response = await service.submit_response(
        store, redis, settings, notifier,
        survey_id=survey.survey_id,
        answers=_answers(questions, colour="blue", rating=1),
    )

    channel, message = redis.published[0]
    assert channel == f"survey-{survey.survey_id}"
    event = json.loads(message)
    assert event["event"] == "new-response"
    assert event["data"]["response_id"] == str(response.response_id)
    assert event["data"]["submitter_id"] is None


@pytest.mark.asyncio
async def test_submit_drops_cached_reads(store, redis, settings, notifier, survey, questions) -> None:
    sid = survey.survey_id
    for key in (cache.results_key(sid), cache.responses_key(sid)):
        redis.data[key] = "[]"

    await service.submit_response(
        store, redis, settings, notifier,
        survey_id=sid, answers=_answers(questions, colour="red", rating=2),
    )

    assert cache.results_key(sid) not in redis.data
    assert cache.responses_key(sid) not in redis.data
    assert cache.survey_key(sid) not in redis.data


@pytest.mark.asyncio
async def test_rejected_submission_is_not_stored(store, redis, settings, notifier, survey, questions) -> None:
    with pytest.raises(AnswerRejectedError) as excinfo:
        await service.submit_response(
            store, redis, settings, notifier,
            survey_id=survey.survey_id,
            answers=_answers(questions, colour="red", rating=10),
        )

    assert excinfo.value.reason is RejectReason.OUT_OF_RANGE
    assert excinfo.value.question_id == questions["rating"].question_id
    assert store.responses == []
    assert redis.published == []


@pytest.mark.asyncio
async def test_empty_string_for_required_question_rejected(store, redis, settings, notifier, survey, questions) -> None:
    with pytest.raises(AnswerRejectedError) as excinfo:
        await service.submit_response(
            store, redis, settings, notifier,
            survey_id=survey.survey_id,
            answers=_answers(questions, colour="", rating=3),
        )
    assert excinfo.value.reason is RejectReason.REQUIRED_NOT_ANSWERED


@pytest.mark.asyncio
async def test_submit_to_inactive_survey(store, redis, settings, notifier, survey, questions) -> None:
    await store.update_survey(survey.survey_id, is_active=False)
    with pytest.raises(SurveyClosedError):
        await service.submit_response(
            store, redis, settings, notifier,
            survey_id=survey.survey_id, answers=_answers(questions, colour="red", rating=3),
        )


@pytest.mark.asyncio
async def test_submit_to_expired_survey(store, redis, settings, notifier, survey, questions) -> None:
    await store.update_survey(
        survey.survey_id, expires_at=datetime.now(timezone.utc) - timedelta(days=1),
    )
    with pytest.raises(SurveyClosedError) as excinfo:
        await service.submit_response(
            store, redis, settings, notifier,
            survey_id=survey.survey_id, answers=_answers(questions, colour="red", rating=3),
        )
    assert excinfo.value.reason == "expired"


@pytest.mark.asyncio
async def test_submit_to_unknown_survey(store, redis, settings, notifier) -> None:
    with pytest.raises(SurveyNotFoundError):
        await service.submit_response(
            store, redis, settings, notifier, survey_id=uuid4(), answers={},
        )


@pytest.mark.asyncio
async def test_submit_succeeds_when_redis_is_down(store, redis, settings, notifier, survey, questions) -> None:
    redis.fail = True
    response = await service.submit_response(
        store, redis, settings, notifier,
        survey_id=survey.survey_id, answers=_answers(questions, colour="green", rating=5),
    )
    assert store.responses == [response]


# ---------------------------------------------------------------------------
# Owner reads
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_responses_newest_first(store, redis, settings, notifier, survey, questions, owner_id) -> None:
    first = await service.submit_response(
        store, redis, settings, notifier,
        survey_id=survey.survey_id, answers=_answers(questions, colour="red", rating=1),
    )
    second = await service.submit_response(
        store, redis, settings, notifier,
        survey_id=survey.survey_id, answers=_answers(questions, colour="blue", rating=2),
    )

    listed = await service.list_responses(store, redis, settings, survey.survey_id, owner_id)
    assert [r.response_id for r in listed] == [second.response_id, first.response_id]

    cached = await service.list_responses(store, redis, settings, survey.survey_id, owner_id)
    assert cached == listed
    assert store.calls["list_responses"] == 1


@pytest.mark.asyncio
async def test_list_responses_requires_ownership(store, redis, settings, survey) -> None:
    with pytest.raises(NotSurveyOwnerError):
        await service.list_responses(store, redis, settings, survey.survey_id, uuid4())


@pytest.mark.asyncio
async def test_get_response(store, redis, settings, notifier, survey, questions, owner_id) -> None:
    created = await service.submit_response(
        store, redis, settings, notifier,
        survey_id=survey.survey_id, answers=_answers(questions, colour="red", rating=4),
    )

    fetched = await service.get_response(store, redis, settings, created.response_id, owner_id)
    assert fetched == created

    with pytest.raises(NotSurveyOwnerError):
        await service.get_response(store, redis, settings, created.response_id, uuid4())
    with pytest.raises(ResponseNotFoundError):
        await service.get_response(store, redis, settings, uuid4(), owner_id)
