"""
Test fixtures and fakes for the scoring client tests
"""

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from score_client.api import ApiClient
from score_client.config import Settings
from score_client.models import ResumeFile, Session, User
from score_client.session_store import MemoryStorage, SessionStore


class FakeResponse:
    """Just enough of requests.Response for the client code"""

    def __init__(self, status_code=200, body=None, text=None, reason="OK", content_type=None):
        self.status_code = status_code
        self.reason = reason
        if body is not None:
            self.text = json.dumps(body)
            self.headers = {"content-type": content_type or "application/json; charset=utf-8"}
        else:
            self.text = text or ""
            self.headers = {"content-type": content_type or "text/html"}

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return json.loads(self.text)


@pytest.fixture
def settings(tmp_path):
    return Settings(api_base_url="http://api.test", storage_dir=tmp_path / "data")


@pytest.fixture
def http():
    """Mocked requests.Session; set http.post.return_value / side_effect per test"""
    return MagicMock()


@pytest.fixture
def api(settings, http):
    return ApiClient(settings, http=http)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return SessionStore(storage)


@pytest.fixture
def session():
    return Session(token="tok-123", user=User(id="u1", name="Ada Lovelace", email="ada@example.com"))


@pytest.fixture
def logged_in_store(store, session):
    store.save(session)
    return store


@pytest.fixture
def resume():
    return ResumeFile(filename="resume.pdf", content=b"%PDF-1.4 mock resume", mime_type="application/pdf")
