"""
Shared test doubles: an in-memory stand-in for ``requests.Session``.
"""

import sys
from pathlib import Path

import pytest
import requests

src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))


class FakeResponse:
    def __init__(self, status_code=200, content=b""):
        self.status_code = status_code
        self.content = content


class FakeSession:
    """Answers GETs from a url -> response table; unknown URLs give 404."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.headers = {}
        self.requested = []
        self.closed = False

    def get(self, url, timeout=None):
        self.requested.append(url)
        answer = self.routes.get(url)
        if isinstance(answer, Exception):
            raise answer
        if answer is None:
            return FakeResponse(404)
        if isinstance(answer, FakeResponse):
            return answer
        return FakeResponse(200, answer)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def connection_error():
    return requests.exceptions.ConnectionError("connection refused")
