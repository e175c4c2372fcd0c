from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from voicesign.core.settings import Settings, get_settings
from voicesign.deps import get_http_client
from voicesign.main import app

# -----------------------------------------------------------------------------
# Fake upstream AI services
# -----------------------------------------------------------------------------


class FakeUpstream:
    """
    Callable handed to ``httpx.MockTransport``. Records every outbound
    request so tests can assert on what (and whether anything) was sent.
    """

    def __init__(self) -> None:
        self.calls: list[httpx.Request] = []
        self._handler: Callable[[httpx.Request], httpx.Response] = lambda r: httpx.Response(
            500, text="no fake response configured"
        )

    def respond(self, status_code: int = 200, *, json_body: Any = None, text: str | None = None):
        if json_body is not None:
            self._handler = lambda r: httpx.Response(status_code, json=json_body)
        else:
            self._handler = lambda r: httpx.Response(status_code, text=text or "")

    def handle_with(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        return self._handler(request)

    def last_json(self) -> dict:
        return json.loads(self.calls[-1].content)


# -----------------------------------------------------------------------------
# Settings, HTTP client and test client
# -----------------------------------------------------------------------------


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        OPENAI_API_KEY="sk-test",
        TYPHOON_API_KEY="typhoon-test",
        UPSTREAM_TIMEOUT_SECONDS=5,
        UPSTREAM_MAX_RETRIES=0,
    )


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def http_client(upstream):
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream))


@pytest.fixture()
def client(settings, http_client):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_http_client] = lambda: http_client
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
