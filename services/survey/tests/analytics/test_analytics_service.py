import json
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from app import cache
from app.analytics import service
from app.analytics.schemas import AggregationReport
from app.exceptions import ExportStorageError, NotSurveyOwnerError, SurveyNotFoundError
from app.responses import service as responses_service


@pytest.fixture
def storage() -> AsyncMock:
    storage = AsyncMock()
    storage.signed_url.return_value = "https://test-exports.s3.amazonaws.com/signed?X-Amz-Expires=3600"
    return storage


@pytest.fixture
def mailer() -> AsyncMock:
    mailer = AsyncMock()
    mailer.send.return_value = True
    return mailer


async def _submit(store, redis, settings, notifier, survey, questions, **answers) -> None:
    payload = {questions[name].question_id: value for name, value in answers.items()}
    await responses_service.submit_response(
        store, redis, settings, notifier, survey_id=survey.survey_id, answers=payload,
    )


# ---------------------------------------------------------------------------
# get_results
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_results_for_survey_with_responses(store, redis, settings, notifier, survey, questions, owner_id) -> None:
    await _submit(store, redis, settings, notifier, survey, questions, colour="red", rating=5)
    await _submit(store, redis, settings, notifier, survey, questions, colour="blue", rating=4)
    await _submit(store, redis, settings, notifier, survey, questions, colour="red", rating=5)

    report = await service.get_results(store, redis, settings, survey.survey_id, owner_id)

    assert report.total_responses == 3
    colour = report.per_question[questions["colour"].question_id]
    assert colour.data.counts == {"red": 2, "green": 0, "blue": 1}
    assert colour.data.percentages["red"] == "66.67"
    rating = report.per_question[questions["rating"].question_id]
    assert rating.data.average == "4.67"
    assert rating.data.distribution == {1: 0, 2: 0, 3: 0, 4: 1, 5: 2}


@pytest.mark.asyncio
async def test_results_are_cached_with_short_ttl(store, redis, settings, survey, questions, owner_id) -> None:
    first = await service.get_results(store, redis, settings, survey.survey_id, owner_id)
    second = await service.get_results(store, redis, settings, survey.survey_id, owner_id)

    assert first == second
    assert store.calls["list_responses"] == 1
    key = cache.results_key(survey.survey_id)
    assert redis.ttls[key] == settings.results_cache_ttl_secs
    assert AggregationReport.model_validate(json.loads(redis.data[key])) == first


@pytest.mark.asyncio
async def test_submission_invalidates_cached_results(store, redis, settings, notifier, survey, questions, owner_id) -> None:
    before = await service.get_results(store, redis, settings, survey.survey_id, owner_id)
    assert before.total_responses == 0

    await _submit(store, redis, settings, notifier, survey, questions, colour="green", rating=3)
    after = await service.get_results(store, redis, settings, survey.survey_id, owner_id)

    assert after.total_responses == 1
    assert store.calls["list_responses"] == 2


@pytest.mark.asyncio
async def test_results_computed_when_cache_is_down(store, redis, settings, survey, questions, owner_id) -> None:
    redis.fail = True

    report = await service.get_results(store, redis, settings, survey.survey_id, owner_id)

    assert report.total_responses == 0
    assert len(report.per_question) == len(questions)
    assert redis.data == {}


@pytest.mark.asyncio
async def test_corrupt_cache_entry_is_recomputed(store, redis, settings, survey, questions, owner_id) -> None:
    redis.data[cache.results_key(survey.survey_id)] = "{not json"

    report = await service.get_results(store, redis, settings, survey.survey_id, owner_id)

    assert len(report.per_question) == len(questions)
    assert store.calls["list_responses"] == 1


@pytest.mark.asyncio
async def test_cache_entry_of_wrong_shape_is_recomputed(store, redis, settings, survey, questions, owner_id) -> None:
    key = cache.results_key(survey.survey_id)
    redis.data[key] = json.dumps({"totalResponses": 0, "questions": {}})

    report = await service.get_results(store, redis, settings, survey.survey_id, owner_id)

    assert len(report.per_question) == len(questions)
    assert store.calls["list_responses"] == 1
    assert AggregationReport.model_validate(json.loads(redis.data[key])) == report


@pytest.mark.asyncio
async def test_results_reflect_response_stored_before_counter_failure(
    store, redis, settings, notifier, survey, questions, owner_id,
) -> None:
    before = await service.get_results(store, redis, settings, survey.survey_id, owner_id)
    assert before.total_responses == 0
    store.increment_response_count = AsyncMock(side_effect=ConnectionError("database unavailable"))

    with pytest.raises(ConnectionError):
        await _submit(store, redis, settings, notifier, survey, questions, colour="red", rating=4)

    assert len(store.responses) == 1
    after = await service.get_results(store, redis, settings, survey.survey_id, owner_id)
    assert after.total_responses == 1


@pytest.mark.asyncio
async def test_results_require_ownership(store, redis, settings, survey, questions) -> None:
    with pytest.raises(NotSurveyOwnerError):
        await service.get_results(store, redis, settings, survey.survey_id, uuid4())
    # ownership is checked before the cache is touched
    assert cache.results_key(survey.survey_id) not in redis.data


@pytest.mark.asyncio
async def test_results_for_unknown_survey(store, redis, settings, owner_id) -> None:
    with pytest.raises(SurveyNotFoundError):
        await service.get_results(store, redis, settings, uuid4(), owner_id)


@pytest.mark.asyncio
async def test_store_failure_propagates(store, redis, settings, survey, owner_id) -> None:
    store.list_responses = AsyncMock(side_effect=ConnectionError("database unavailable"))
    with pytest.raises(ConnectionError):
        await service.get_results(store, redis, settings, survey.survey_id, owner_id)
    assert cache.results_key(survey.survey_id) not in redis.data


# ---------------------------------------------------------------------------
# export_results
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_export_uploads_csv_and_emails_owner(
    store, redis, settings, notifier, survey, questions, owner_id, storage, mailer,
) -> None:
    await _submit(store, redis, settings, notifier, survey, questions, colour="red", rating=2, features=["search"])

    result = await service.export_results(
        store, redis, settings, storage, mailer, notifier,
        survey.survey_id, owner_id, "owner@example.com",
    )

    key, body, content_type = storage.put.await_args.args
    assert key == result.filename
    assert key.startswith(f"exports/{survey.survey_id}-")
    assert key.endswith(".csv")
    assert content_type == "text/csv"
    lines = body.decode("utf-8").splitlines()
    assert lines[0].startswith("Response ID,Submitted At,Favourite colour?")
    assert len(lines) == 2

    storage.signed_url.assert_awaited_once_with(key, 3600)
    assert result.url == storage.signed_url.return_value

    to, subject, html = mailer.send.await_args.args
    assert to == "owner@example.com"
    assert "Customer feedback" in subject
    assert "X-Amz-Expires=3600" in html

    channel, message = redis.published[-1]
    assert channel == f"survey-{survey.survey_id}"
    assert json.loads(message)["event"] == "export-ready"


@pytest.mark.asyncio
async def test_export_fails_when_upload_fails(
    store, redis, settings, notifier, survey, questions, owner_id, storage, mailer,
) -> None:
    storage.put.side_effect = ExportStorageError("bucket unavailable")

    with pytest.raises(ExportStorageError):
        await service.export_results(
            store, redis, settings, storage, mailer, notifier,
            survey.survey_id, owner_id, "owner@example.com",
        )
    mailer.send.assert_not_awaited()


@pytest.mark.asyncio
async def test_export_succeeds_when_mail_is_not_delivered(
    store, redis, settings, notifier, survey, questions, owner_id, storage, mailer,
) -> None:
    mailer.send.return_value = False

    result = await service.export_results(
        store, redis, settings, storage, mailer, notifier,
        survey.survey_id, owner_id, "owner@example.com",
    )

    assert result.url == storage.signed_url.return_value


@pytest.mark.asyncio
async def test_export_requires_ownership(
    store, redis, settings, notifier, survey, storage, mailer,
) -> None:
    with pytest.raises(NotSurveyOwnerError):
        await service.export_results(
            store, redis, settings, storage, mailer, notifier,
            survey.survey_id, uuid4(), "intruder@example.com",
        )
    storage.put.assert_not_awaited()
