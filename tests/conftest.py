"""Shared fixtures: settings in a temp dir, a fake Forge backend, a fake clock."""

import json
from collections import defaultdict

import httpx
import pytest

from forge_cli.api_client import ApiClient
from forge_cli.auth import SessionManager
from forge_cli.config import Settings
from forge_cli.models.session import Session, SessionUser
from forge_cli.session_store import SessionStore

API_URL = "http://forge.test/api"


def make_session(**overrides) -> Session:
    fields = dict(
        access_token="access-1",
        refresh_token="refresh-1",
        expires_at="2030-01-01T00:00:00.000Z",
        user_id="user-1",
        team_id="team-1",
        user=SessionUser(email="dev@example.com", display_name="Dev One"),
    )
    fields.update(overrides)
    return Session(**fields)


class FakeBackend:
    """Scripted responses keyed by (method, path).

    Each route holds a queue; the last entry repeats once the queue drains.
    An exception instance in the queue is raised as a transport failure.
    """

    def __init__(self):
        self.routes = defaultdict(list)
        self.requests: list[httpx.Request] = []
        # Called with each request before its response is chosen
        self.hooks = []

    def add(self, method: str, path: str, status: int = 200, json_body=None, exc=None):
        self.routes[(method, "/api" + path)].append((status, json_body, exc))
        return self

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == "/api" + path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for hook in self.hooks:
            hook(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": "no route"})
        status, body, exc = queue.pop(0) if len(queue) > 1 else queue[0]
        if exc is not None:
            raise exc
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, content=json.dumps(body).encode(), headers={"content-type": "application/json"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class FakeClock:
    """Monotonic clock advanced only by `sleep`."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def settings(tmp_path):
    return Settings(api_url=API_URL, config_dir=tmp_path / ".forge", retry_delay=2.0)


@pytest.fixture
def store(settings):
    return SessionStore(settings.config_path)


@pytest.fixture
def session():
    return make_session()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def auth(settings, backend, clock):
    return SessionManager(settings, transport=backend.transport, sleep=clock.sleep, clock=clock)


@pytest.fixture
def api(settings, store, auth, backend, clock):
    return ApiClient(settings, store, auth, transport=backend.transport, sleep=clock.sleep)
