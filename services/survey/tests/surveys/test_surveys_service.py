from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from app import cache
from app.exceptions import NotSurveyOwnerError, SurveyClosedError, SurveyNotFoundError
from app.surveys import service


@pytest.mark.asyncio
async def test_create_and_list_surveys(store, redis, settings, owner_id) -> None:
    created = await service.create_survey(store, redis, owner_id, title="Onboarding")

    surveys = await service.list_surveys(store, redis, settings, owner_id)

    assert [s.survey_id for s in surveys] == [created.survey_id]
    assert cache.surveys_key(owner_id) in redis.data


@pytest.mark.asyncio
async def test_create_invalidates_owner_lists(store, redis, settings, owner_id) -> None:
    await service.list_surveys(store, redis, settings, owner_id)
    await service.list_surveys(store, redis, settings, owner_id, is_active=True)
    assert cache.surveys_key(owner_id, True) in redis.data

    await service.create_survey(store, redis, owner_id, title="Second")

    assert not [k for k in redis.data if k.startswith(cache.surveys_prefix(owner_id))]
    assert len(await service.list_surveys(store, redis, settings, owner_id)) == 1


@pytest.mark.asyncio
async def test_list_filters_by_active_flag(store, redis, settings, owner_id) -> None:
    live = await service.create_survey(store, redis, owner_id, title="Live")
    closed = await service.create_survey(store, redis, owner_id, title="Closed")
    await service.update_survey(store, redis, settings, closed.survey_id, owner_id, is_active=False)

    active = await service.list_surveys(store, redis, settings, owner_id, is_active=True)
    inactive = await service.list_surveys(store, redis, settings, owner_id, is_active=False)

    assert [s.survey_id for s in active] == [live.survey_id]
    assert [s.survey_id for s in inactive] == [closed.survey_id]


@pytest.mark.asyncio
async def test_get_survey_is_cached(store, redis, settings, survey) -> None:
    await service.get_survey(store, redis, settings, survey.survey_id)
    cached = await service.get_survey(store, redis, settings, survey.survey_id)

    assert cached == survey
    assert store.calls["get_survey"] == 1


@pytest.mark.asyncio
async def test_get_unknown_survey(store, redis, settings) -> None:
    with pytest.raises(SurveyNotFoundError):
        await service.get_survey(store, redis, settings, uuid4())


@pytest.mark.asyncio
async def test_update_requires_ownership(store, redis, settings, survey) -> None:
    with pytest.raises(NotSurveyOwnerError):
        await service.update_survey(store, redis, settings, survey.survey_id, uuid4(), title="Hijacked")


@pytest.mark.asyncio
async def test_update_refreshes_cached_survey(store, redis, settings, survey, owner_id) -> None:
    await service.get_survey(store, redis, settings, survey.survey_id)

    await service.update_survey(store, redis, settings, survey.survey_id, owner_id, title="Renamed")

    assert (await service.get_survey(store, redis, settings, survey.survey_id)).title == "Renamed"


@pytest.mark.asyncio
async def test_public_view_of_open_survey(store, redis, settings, survey) -> None:
    public = await service.get_public_survey(store, redis, settings, survey.survey_id)
    assert public.title == survey.title
    assert not hasattr(public, "owner_id")


@pytest.mark.asyncio
async def test_public_view_refuses_expired_survey(store, redis, settings, owner_id) -> None:
    expired = await service.create_survey(
        store, redis, owner_id, title="Old",
        expires_at=datetime.now(timezone.utc) - timedelta(hours=1),
    )
    with pytest.raises(SurveyClosedError):
        await service.get_public_survey(store, redis, settings, expired.survey_id)


@pytest.mark.asyncio
async def test_delete_survey_clears_its_caches(store, redis, settings, survey, questions, owner_id) -> None:
    sid = survey.survey_id
    for key in (cache.questions_key(sid), cache.responses_key(sid), cache.results_key(sid)):
        redis.data[key] = "[]"

    await service.delete_survey(store, redis, settings, sid, owner_id)

    assert sid not in store.surveys
    assert store.questions == {}
    assert not [k for k in redis.data if str(sid) in k]
    with pytest.raises(SurveyNotFoundError):
        await service.get_survey(store, redis, settings, sid)
