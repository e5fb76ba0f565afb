"""HTTP transport for the scoring service — thin wrapper over requests."""
from __future__ import annotations

from typing import Any

import requests

from score_client.config import Settings
from score_client.errors import HTTPError, TransportError
from score_client.log import get_logger
from score_client.models import ResumeFile

log = get_logger(__name__)

SIGNUP_PATH = "/api/auth/signup"
LOGIN_PATH = "/api/auth/login"
SCORE_PATH = "/api/score/score-jd"

_DIAGNOSTIC_CHARS = 200


def is_json_response(response: requests.Response) -> bool:
    content_type = response.headers.get("content-type") or ""
    return "application/json" in content_type.lower()


def json_or_none(response: requests.Response) -> Any:
    """Decoded body when the server says it is JSON, else None."""
    if not is_json_response(response):
        return None
    try:
        return response.json()
    except ValueError:
        log.warning("Response %s declared JSON but did not parse", response.status_code)
        return None


def first_message(body: Any, *fields: str) -> str:
    """First non-empty string among ``fields`` of a JSON error body."""
    if not isinstance(body, dict):
        return ""
    for name in fields:
        value = body.get(name)
        if isinstance(value, str) and value.strip():
            return value
    return ""


def http_error(
    response: requests.Response,
    *fields: str,
    fallback: str,
    error_cls: type[HTTPError] = HTTPError,
    opaque_message: str | None = None,
) -> HTTPError:
    """Build an HTTPError from a non-2xx response.

    JSON bodies give their message from ``fields`` (or ``fallback``).
    Anything else is logged and replaced by ``opaque_message``, or by the
    status line when that is not given.
    """
    status = response.status_code
    reason = response.reason or ""
    body = json_or_none(response)
    if body is not None:
        message = first_message(body, *fields) or fallback
        return error_cls(message, status=status, reason=reason, json_body=body)

    text = response.text or ""
    log.error("Non-JSON response received (%d): %s", status, text[:_DIAGNOSTIC_CHARS])
    return error_cls(
        opaque_message or f"Server returned {status}: {reason}",
        status=status,
        reason=reason,
        body_text=text,
    )


class ApiClient:
    """Session-less HTTP client bound to one API origin."""

    def __init__(self, settings: Settings, http: requests.Session | None = None) -> None:
        self.base_url = settings.api_base_url.rstrip("/")
        self.timeout = settings.http_timeout
        self.http = http or requests.Session()

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _send(self, path: str, **kwargs: Any) -> requests.Response:
        url = self.url(path)
        log.debug("POST %s", url)
        try:
            response = self.http.post(url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            log.error("POST %s failed: %s", url, exc)
            raise TransportError(f"Could not reach the server: {exc}") from exc
        log.debug("POST %s -> %d", url, response.status_code)
        return response

    def post_json(self, path: str, payload: dict[str, Any]) -> requests.Response:
        return self._send(path, json=payload)

    def post_resume(
        self, path: str, resume: ResumeFile, job_description: str, token: str
    ) -> requests.Response:
        files = {"resume": (resume.filename, resume.content, resume.mime_type)}
        data = {"jobDescription": job_description}
        headers = {"Authorization": f"Bearer {token}"}
        return self._send(path, files=files, data=data, headers=headers)
