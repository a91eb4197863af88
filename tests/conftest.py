"""Shared fixtures: a fresh mock platform per test and transports wired to it."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from elevenlabs_iac.config import Settings
from elevenlabs_iac.provider import Provider
from elevenlabs_iac.state import StateStore
from elevenlabs_iac.transport import Transport
from mock_platform.main import create_app

TEST_API_KEY = "test-api-key"


@pytest.fixture
def platform_app():
    return create_app()


@pytest.fixture
def platform(platform_app):
    """In-memory storage of the mock platform, for direct inspection."""
    return platform_app.state.platform


@pytest.fixture
def transport(platform_app):
    with TestClient(platform_app) as client:
        yield Transport(api_key=TEST_API_KEY, client=client)


@pytest.fixture
def settings():
    return Settings(api_key=TEST_API_KEY, _env_file=None)


@pytest.fixture
def provider(platform_app, settings):
    with TestClient(platform_app) as client:
        with Provider(settings=settings, client=client, store=StateStore()) as p:
            yield p


class RecordingHandler:
    """httpx.MockTransport handler returning canned responses and keeping requests."""

    def __init__(self, status_code=200, payload=None, content=None):
        self.status_code = status_code
        self.payload = payload
        self.content = content
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        if self.payload is None:
            return httpx.Response(self.status_code)
        return httpx.Response(self.status_code, json=self.payload)

    def json_body(self, index: int = -1):
        return json.loads(self.requests[index].content)


@pytest.fixture
def mock_transport():
    """Factory building a Transport whose requests are answered by ``handler``."""
    transports = []

    def _make(handler):
        client = httpx.Client(
            transport=httpx.MockTransport(handler), base_url="https://api.test"
        )
        transports.append(client)
        return Transport(api_key=TEST_API_KEY, client=client)

    yield _make
    for client in transports:
        client.close()


@pytest.fixture
def recorder():
    """The RecordingHandler class, for building canned-response handlers."""
    return RecordingHandler
