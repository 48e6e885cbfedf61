"""Pytest shared fixtures."""
import json
import pathlib
import sys
from unittest.mock import MagicMock

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from xpack_user.core.elastic import Elastic5Client, Elastic6Client, Elastic7Client


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch):
    """Fail loudly if a test reaches the real transport without patching it."""

    def _refuse(*args, **kwargs):
        raise AssertionError(f"unexpected network call: {args} {kwargs}")

    monkeypatch.setattr(requests, "request", _refuse)


class StubResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload=None, status_code: int = 200, url: str = "http://es:9200/"):
        self._payload = payload
        self.status_code = status_code
        self.url = url
        if payload is None:
            self.text = ""
        elif isinstance(payload, str):
            self.text = payload
        else:
            self.text = json.dumps(payload)
        self.content = self.text.encode("utf-8")

    def json(self):
        if isinstance(self._payload, str) or self._payload is None:
            return json.loads(self.text)
        return self._payload


@pytest.fixture
def stub_response():
    return StubResponse


@pytest.fixture
def recorded_requests(monkeypatch):
    """Patch requests.request with a recorder; queue responses on ``.responses``."""
    recorder = MagicMock()
    recorder.responses = []

    def _fake_request(method, url, **kwargs):
        recorder(method, url, **kwargs)
        return recorder.responses.pop(0)

    monkeypatch.setattr(requests, "request", _fake_request)
    return recorder


@pytest.fixture
def es7_client():
    return MagicMock(spec=Elastic7Client)


@pytest.fixture
def es6_client():
    return MagicMock(spec=Elastic6Client)


@pytest.fixture
def es5_client():
    return MagicMock(spec=Elastic5Client)
