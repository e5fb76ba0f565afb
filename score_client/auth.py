"""Signup and login against the auth endpoints."""
from __future__ import annotations

import threading
from typing import Any

from score_client.api import LOGIN_PATH, SIGNUP_PATH, ApiClient, http_error, json_or_none
from score_client.errors import AuthError, ClientError, TransportError, ValidationError
from score_client.guard import DASHBOARD_ROUTE, LOGIN_ROUTE
from score_client.log import get_logger
from score_client.models import Result, Session, User
from score_client.session_store import SessionStore

log = get_logger(__name__)

LOGIN_FAILED = "Login failed"
SIGNUP_FAILED = "Signup failed"
SIGNUP_OK = "Signup successful — please login"


def _require(fields: dict[str, str]) -> None:
    missing = [name for name, value in fields.items() if not (value or "").strip()]
    if missing:
        raise ValidationError(f"Please fill in: {', '.join(missing)}")


class AuthGateway:
    """One instance per form: at most one signup/login request in flight."""

    def __init__(self, api: ApiClient, store: SessionStore) -> None:
        self.api = api
        self.store = store
        self._inflight = threading.Lock()

    @property
    def busy(self) -> bool:
        """True while a request is pending; the submit button is disabled."""
        return self._inflight.locked()

    def login(self, email: str, password: str) -> Result[Session]:
        if not self._inflight.acquire(blocking=False):
            log.debug("login ignored: request already in flight")
            return Result.failure(None)
        try:
            session = self._login(email, password)
            self.store.save(session)
        except ClientError as exc:
            log.warning("Login failed: %s", exc.message)
            return Result.failure(exc)
        except OSError as exc:
            log.error("Could not persist session: %s", exc)
            return Result.failure(ClientError(LOGIN_FAILED))
        finally:
            self._inflight.release()

        return Result.success(session, redirect=DASHBOARD_ROUTE)

    def signup(self, name: str, email: str, password: str) -> Result[None]:
        if not self._inflight.acquire(blocking=False):
            log.debug("signup ignored: request already in flight")
            return Result.failure(None)
        try:
            self._signup(name, email, password)
        except ClientError as exc:
            log.warning("Signup failed: %s", exc.message)
            return Result.failure(exc)
        finally:
            self._inflight.release()

        log.info("Signed up %s", email)
        return Result.success(None, redirect=LOGIN_ROUTE, notice=SIGNUP_OK)

    def _login(self, email: str, password: str) -> Session:
        _require({"email": email, "password": password})
        body = self._post(LOGIN_PATH, {"email": email, "password": password}, LOGIN_FAILED)

        token = body.get("token") if isinstance(body, dict) else None
        if not isinstance(token, str) or not token:
            log.error("Login response has no token")
            raise AuthError(LOGIN_FAILED, status=200, json_body=body)
        user = body.get("user")
        return Session(token=token, user=User.from_dict(user if isinstance(user, dict) else {}))

    def _signup(self, name: str, email: str, password: str) -> None:
        _require({"name": name, "email": email, "password": password})
        self._post(SIGNUP_PATH, {"name": name, "email": email, "password": password}, SIGNUP_FAILED)

    def _post(self, path: str, payload: dict[str, str], fallback: str) -> Any:
        try:
            response = self.api.post_json(path, payload)
        except TransportError as exc:
            raise TransportError(fallback) from exc

        if not response.ok:
            raise http_error(
                response, "msg", "error", fallback=fallback, error_cls=AuthError, opaque_message=fallback
            )

        body = json_or_none(response)
        return {} if body is None else body
