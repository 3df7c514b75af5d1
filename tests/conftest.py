# tests/conftest.py
import json

import pytest
import requests
from fastapi.testclient import TestClient

from shelftaught import create_app
from shelftaught.cache import TTLCache
from shelftaught.config import get_gateway
from shelftaught.gateway import ApiGateway
from shelftaught.session import AuthSession

BASE_URL = "http://backend.test/api"


def make_response(status, body=None, url=BASE_URL):
    """Build a real requests.Response carrying a JSON body."""
    response = requests.Response()
    response.status_code = status
    response.url = url
    response.headers["Content-Type"] = "application/json"
    response._content = b"" if body is None else json.dumps(body).encode("utf-8")
    return response


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeHttp:
    """Stands in for requests.Session: canned responses keyed by (method, path)."""

    def __init__(self):
        self.calls = []
        self.routes = {}
        self.down = False

    def add(self, method, path, body=None, status=200):
        self.routes[(method, path)] = (status, body)

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        path = url[len(BASE_URL):]
        self.calls.append({
            "method": method,
            "path": path,
            "params": params,
            "json": json,
            "headers": headers or {},
        })
        if self.down:
            raise requests.ConnectionError("backend unreachable")
        status, body = self.routes.get((method, path), (404, {"error": {"message": "Not found"}}))
        return make_response(status, body, url)

    def count(self, method, path):
        return sum(1 for c in self.calls if c["method"] == method and c["path"] == path)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_http():
    return FakeHttp()


@pytest.fixture
def session():
    return AuthSession()


@pytest.fixture
def gateway(fake_http, clock, session):
    return ApiGateway(
        base_url=BASE_URL,
        http=fake_http,
        cache=TTLCache(default_ttl=300, clock=clock),
        session=session,
        fallback_enabled=True,
    )


@pytest.fixture
def client(gateway):
    """A FastAPI TestClient wired to the fake backend."""
    app = create_app()
    app.dependency_overrides[get_gateway] = lambda: gateway
    with TestClient(app) as c:
        yield c
