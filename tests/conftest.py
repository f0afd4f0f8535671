"""Pytest shared fixtures for the Okta API client tests."""
import json
import pathlib
import sys
from types import SimpleNamespace

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests
from requests.structures import CaseInsensitiveDict
from urllib3._collections import HTTPHeaderDict

from okta_api_client import Connection, OktaApiClient, OktaSettings

BASE_URL = "https://mycompany.okta.com"
TOKEN = "00" + "aB3-_" * 8  # 42 characters


# ─────────────────────────────────────────────────────────────────────────────
# Response Helpers
# ─────────────────────────────────────────────────────────────────────────────
def make_response(status: int = 200, body=None, headers: dict = None, url: str = "") -> requests.Response:
    """Build a real requests.Response, keeping repeated headers on ``raw`` like urllib3 does."""
    raw_headers = HTTPHeaderDict()
    for name, value in (headers or {}).items():
        for item in value if isinstance(value, list) else [value]:
            raw_headers.add(name, item)

    resp = requests.Response()
    resp.status_code = status
    resp.url = url
    resp._content = b"" if body is None else json.dumps(body).encode("utf-8")
    resp.headers = CaseInsensitiveDict({name: ", ".join(raw_headers.getlist(name)) for name in raw_headers})
    resp.raw = SimpleNamespace(headers=raw_headers)
    return resp


def next_link(url: str) -> str:
    return f'<{url}>; rel="next"'


def self_link(url: str) -> str:
    return f'<{url}>; rel="self"'


class FakeOkta:
    """Queue of canned responses served through the stubbed requests functions."""

    def __init__(self):
        self.calls = []
        self._queue = []

    def add(self, response_or_exc):
        self._queue.append(response_or_exc)
        return self

    def handler(self, verb):
        def _call(url, **kwargs):
            self.calls.append(SimpleNamespace(verb=verb, url=url, **kwargs))
            if not self._queue:
                raise AssertionError(f"Unexpected HTTP {verb.upper()} in test: {url}")
            item = self._queue.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        return _call


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch):
    """Prevent unit tests from reaching a real Okta tenant."""
    def _fail(verb):
        def _call(url, *args, **kwargs):
            raise RuntimeError(f"Unexpected HTTP {verb} in unit test: {url}")
        return _call

    for verb in ("get", "post", "put", "delete"):
        monkeypatch.setattr(requests, verb, _fail(verb.upper()))


@pytest.fixture()
def okta(monkeypatch):
    """FakeOkta installed as requests.get/post/put/delete."""
    fake = FakeOkta()
    for verb in ("get", "post", "put", "delete"):
        monkeypatch.setattr(requests, verb, fake.handler(verb))
    return fake


# ─────────────────────────────────────────────────────────────────────────────
# Client Fixtures
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def connection():
    return Connection(base_url=BASE_URL, token=TOKEN)


@pytest.fixture()
def settings(connection):
    return OktaSettings(connections={"prod": connection})


@pytest.fixture()
def sleeps():
    return []


@pytest.fixture()
def client(settings, sleeps):
    return OktaApiClient(settings=settings, sleep=sleeps.append)


def okta_events(caplog, prefix: str = "okta.api"):
    """Structured events captured by caplog, in order."""
    return [record.okta for record in caplog.records if hasattr(record, "okta") and record.okta["event_type"].startswith(prefix)]


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires a live Okta tenant)"
    )
