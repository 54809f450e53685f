# tests/unit/test_baseline.py - Baseline establishment test suite

import asyncio

import pytest

from sqliradar.models import ProbeResponse
from sqliradar.scanners.baseline import BaselineEstablisher, baseline_from_response, hash_body
from tests.factories import DEFAULT_PAGE, FakeSession


@pytest.mark.unit
def test_baseline_from_response():
    response = ProbeResponse(status=200, body=DEFAULT_PAGE, elapsed=0.25, url="http://ex.test/")
    baseline = baseline_from_response(response)

    assert baseline.status == 200
    assert baseline.content_length == len(DEFAULT_PAGE)
    assert baseline.response_time == 0.25
    assert baseline.title == "Home"
    assert baseline.body_hash == hash_body(DEFAULT_PAGE)
    assert len(baseline.body_hash) == 64


@pytest.mark.unit
@pytest.mark.asyncio
class TestBaselineEstablisher:
    """Unit tests for BaselineEstablisher."""

    async def test_single_unmodified_request(self, fake_session, parameter_factory):
        param = parameter_factory(name="id", action_url="http://ex.test/item?id=1&sort=asc")
        establisher = BaselineEstablisher(fake_session, asyncio.Semaphore(2))

        baseline = await establisher.establish(param)

        assert baseline is not None
        assert baseline.title == "Home"
        assert len(fake_session.calls) == 1
        assert fake_session.calls[0]["method"] == "GET"
        assert fake_session.calls[0]["url"] == "http://ex.test/item?id=1&sort=asc"

    async def test_post_baseline_resubmits_captured_fields(self, fake_session, post_parameter_factory):
        param = post_parameter_factory()
        establisher = BaselineEstablisher(fake_session, asyncio.Semaphore(2))

        await establisher.establish(param)

        call = fake_session.calls[0]
        assert call["method"] == "POST"
        assert call["url"] == "http://ex.test/login"
        assert call["data"] == [("user", "alice"), ("pass", "secret")]

    async def test_failed_request_gives_no_baseline(self, parameter_factory):
        session = FakeSession(fail=True)
        establisher = BaselineEstablisher(session, asyncio.Semaphore(1))

        assert await establisher.establish(parameter_factory()) is None

    async def test_headers_are_sent(self, fake_session, parameter_factory):
        establisher = BaselineEstablisher(fake_session, asyncio.Semaphore(1), headers={"Host": "vhost.ex.test"})

        await establisher.establish(parameter_factory())

        assert fake_session.calls[0]["headers"] == {"Host": "vhost.ex.test"}
