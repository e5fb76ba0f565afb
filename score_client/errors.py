"""Error taxonomy for the scoring client.

Every operation converts these into a single user-visible message at its
boundary; see ``score_client.models.Result``.
"""
from __future__ import annotations

from typing import Any


class ClientError(Exception):
    """Base class; ``message`` is safe to show to the end user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ClientError):
    """A required field is missing or blank. Raised before any request."""


class TransportError(ClientError):
    """The request never got a response (connection refused, DNS, reset...)."""


class HTTPError(ClientError):
    """Non-2xx response.

    ``json_body`` is set when the server answered with a JSON document.
    ``body_text`` keeps an opaque body for diagnostics only.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int,
        reason: str = "",
        json_body: Any = None,
        body_text: str = "",
    ) -> None:
        super().__init__(message)
        self.status = status
        self.reason = reason
        self.json_body = json_body
        self.body_text = body_text

    @property
    def is_json(self) -> bool:
        return self.json_body is not None


class AuthError(HTTPError):
    """HTTPError coming from the signup/login endpoints."""
