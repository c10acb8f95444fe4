import json
from unittest.mock import MagicMock

import pytest
import requests

from merakiinfo.transport import Transport
from merakiinfo.utility import DEFAULT_BASE_URL


def make_response(status_code: int = 200, body=None, headers: dict = None):
    """Build a real requests.Response so .json(), .links, and .close() behave as they do on the wire."""
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps([] if body is None else body).encode('utf-8')
    response._content_consumed = True
    response.encoding = 'utf-8'
    response.headers.update(headers or {})
    return response


class FakeAPI:
    """Answer GET requests by path with canned (status, body) pairs, anything else is 404."""

    def __init__(self, answers: dict):
        self.answers = answers
        self.paths = list()

    def __call__(self, method, url, params=None, **kwargs):
        path = url[len(DEFAULT_BASE_URL):] if url.startswith(DEFAULT_BASE_URL) else url
        self.paths.append(path)
        answer = self.answers.get(path, (404, {"errors": ["Not found"]}))
        if isinstance(answer, Exception):
            raise answer
        status_code, body = answer
        return make_response(status_code, body)


@pytest.fixture
def sleeps(monkeypatch):
    """Record backoff waits instead of sleeping."""
    waits = list()
    monkeypatch.setattr("merakiinfo.transport.time.sleep", waits.append)
    return waits


@pytest.fixture
def transport(sleeps):
    """A transport whose session is a mock."""
    t = Transport(api_key="test-api-key")
    t.http = MagicMock()
    return t


@pytest.fixture
def serve(transport):
    """Route the transport's requests to a FakeAPI built from answers."""
    def _serve(answers: dict):
        api = FakeAPI(answers)
        transport.http.request.side_effect = api
        return api
    return _serve
