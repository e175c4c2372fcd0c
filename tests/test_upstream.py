from __future__ import annotations

import asyncio

import httpx
import pytest

from voicesign.core.errors import UpstreamError
from voicesign.services import upstream as upstream_mod
from voicesign.services.summarization import summarize_text
from voicesign.services.upstream import MAX_BACKOFF_SECONDS, backoff_delay


def _chat(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


@pytest.fixture(autouse=True)
def _no_backoff(monkeypatch):
    monkeypatch.setattr(upstream_mod, "backoff_delay", lambda attempt: 0)


def test_transport_errors_are_retried_up_to_the_limit(settings):
    attempts: list[int] = []

    def flaky(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        if len(attempts) < 3:
            raise httpx.ConnectError("refused", request=request)
        return _chat('{"summary": "s", "keywords": ["k"]}')

    settings.UPSTREAM_MAX_RETRIES = 2

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(flaky)) as client:
            return await summarize_text("ข้อความ", settings=settings, client=client)

    result = asyncio.run(run())

    assert len(attempts) == 3
    assert result == {"summary": "s", "keywords": ["k"], "originalText": "ข้อความ"}


def test_transport_error_without_retries_is_an_upstream_error(settings):
    def down(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(down)) as client:
            await summarize_text("ข้อความ", settings=settings, client=client)

    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(run())
    assert exc_info.value.status_code == 500


def test_http_error_statuses_are_not_retried(settings):
    attempts: list[int] = []

    def unavailable(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        return httpx.Response(503, text="busy")

    settings.UPSTREAM_MAX_RETRIES = 3

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(unavailable)) as client:
            await summarize_text("ข้อความ", settings=settings, client=client)

    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(run())
    assert len(attempts) == 1
    assert exc_info.value.upstream_status == 503
    assert exc_info.value.upstream_body == "busy"


def test_backoff_grows_and_is_capped():
    assert 0.4 <= backoff_delay(1) <= 0.6
    assert 0.8 <= backoff_delay(2) <= 1.2
    assert backoff_delay(20) <= MAX_BACKOFF_SECONDS * 1.2
