"""End-to-end tests for the terminal client with a mocked HTTP layer"""

from unittest.mock import MagicMock, patch

import pytest

import run_client
from conftest import FakeResponse
from score_client import load_settings, open_session_store
from score_client.models import Session, User


@pytest.fixture
def env(tmp_path, monkeypatch):
    monkeypatch.setenv("SCORE_API_URL", "http://api.test")
    monkeypatch.setenv("SESSION_DIR", str(tmp_path / "sessions"))
    monkeypatch.delenv("HTTP_TIMEOUT", raising=False)
    monkeypatch.setenv("LOG_DIR", "none")
    return tmp_path


@pytest.fixture
def http():
    mock = MagicMock()
    with patch("score_client.api.requests.Session", return_value=mock):
        yield mock


@pytest.fixture
def resume_path(env):
    path = env / "resume.pdf"
    path.write_bytes(b"%PDF-1.4 mock")
    return path


def _store():
    return open_session_store(load_settings())


def test_scores_with_stored_session(env, http, resume_path, capsys):
    _store().save(Session(token="tok", user=User(id="1", name="Ada", email="ada@example.com")))
    http.post.return_value = FakeResponse(200, {"score": 77, "suggestions": ["Quantify impact"]})

    code = run_client.main(["--resume", str(resume_path), "--jd", "Python developer"])

    assert code == 0
    out = capsys.readouterr().out
    assert "Score: 77/100" in out
    assert "1. Quantify impact" in out
    assert http.post.call_args.kwargs["headers"] == {"Authorization": "Bearer tok"}


def test_prompts_for_login_without_session(env, http, resume_path, capsys):
    http.post.side_effect = [
        FakeResponse(200, {"token": "new", "user": {"id": "1", "name": "Ada", "email": "ada@example.com"}}),
        FakeResponse(200, {"score": 90, "suggestions": []}),
    ]
    jd_file = env / "jd.txt"
    jd_file.write_text("Data engineer with Spark", encoding="utf-8")

    with patch("builtins.input", return_value="ada@example.com"), \
            patch("run_client.getpass.getpass", return_value="secret"):
        code = run_client.main(["--resume", str(resume_path), "--jd", str(jd_file)])

    assert code == 0
    assert _store().load().token == "new"
    assert http.post.call_args.kwargs["data"] == {"jobDescription": "Data engineer with Spark"}


def test_failed_login_stops(env, http, resume_path, capsys):
    http.post.return_value = FakeResponse(401, {"msg": "Invalid credentials"})

    with patch("builtins.input", return_value="ada@example.com"), \
            patch("run_client.getpass.getpass", return_value="wrong"):
        code = run_client.main(["--resume", str(resume_path), "--jd", "anything"])

    assert code == 1
    assert "Invalid credentials" in capsys.readouterr().out
    assert http.post.call_count == 1


def test_logout_clears_session(env, http):
    _store().save(Session(token="tok", user=User(id="1", name="Ada", email="ada@example.com")))

    assert run_client.main(["--logout"]) == 0
    assert _store().load() is None


def test_scoring_error_reported(env, http, resume_path, capsys):
    _store().save(Session(token="tok", user=User(id="1", name="Ada", email="ada@example.com")))
    http.post.return_value = FakeResponse(502, text="<html/>", reason="Bad Gateway")

    code = run_client.main(["--resume", str(resume_path), "--jd", "Python developer"])

    assert code == 1
    assert "Failed to score resume: Server returned 502: Bad Gateway" in capsys.readouterr().out


def test_long_inline_job_description(env, http, resume_path):
    _store().save(Session(token="tok", user=User(id="1", name="Ada", email="ada@example.com")))
    http.post.return_value = FakeResponse(200, {"score": 70, "suggestions": []})
    jd = "Senior Python developer with experience " * 10

    code = run_client.main(["--resume", str(resume_path), "--jd", jd])

    assert len(jd) > 255
    assert code == 0
    assert http.post.call_args.kwargs["data"] == {"jobDescription": jd}
