"""Data models for sessions, score requests and results."""
from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Generic, TypeVar

from score_client.errors import ClientError

T = TypeVar("T")

PDF_MIME = "application/pdf"


@dataclass
class User:
    id: str
    name: str
    email: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        # Mongo-style backends send "_id"
        user_id = data.get("id", data.get("_id", ""))
        return cls(
            id=str(user_id) if user_id is not None else "",
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
        )

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "email": self.email}


@dataclass
class Session:
    token: str
    user: User

    @property
    def is_valid(self) -> bool:
        return bool(self.token)


@dataclass
class ResumeFile:
    filename: str
    content: bytes
    mime_type: str = PDF_MIME

    @classmethod
    def from_path(cls, path: str | Path) -> ResumeFile:
        p = Path(path)
        mime, _ = mimetypes.guess_type(p.name)
        return cls(filename=p.name, content=p.read_bytes(), mime_type=mime or PDF_MIME)


@dataclass
class ScoreRequest:
    resume: ResumeFile
    job_description: str


@dataclass
class ScoreResult:
    value: int
    suggestions: list[str] = field(default_factory=list)
    support: list[str] = field(default_factory=list)
    raw: Any = None

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> ScoreResult:
        """Raises ValueError when the body does not match the score schema."""
        score = data.get("score")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise ValueError(f"score must be a number, got {score!r}")
        try:
            value = int(round(score))
        except (OverflowError, ValueError) as exc:
            raise ValueError(f"score is not finite: {score!r}") from exc
        return cls(
            value=max(0, min(100, value)),
            suggestions=_string_list(data, "suggestions"),
            support=_string_list(data, "support"),
            raw=data.get("raw"),
        )


def _string_list(data: dict[str, Any], key: str) -> list[str]:
    items = data.get(key)
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValueError(f"{key} must be a list, got {type(items).__name__}")
    return [str(s) for s in items]


class WorkflowState(str, Enum):
    EMPTY = "empty"
    RESUME_SELECTED = "resume_selected"
    TEXT_ENTERED = "text_entered"
    BOTH_READY = "both_ready"
    SUBMITTING = "submitting"
    SCORED = "scored"
    ERROR = "error"


@dataclass
class Result(Generic[T]):
    """Outcome of a gateway or workflow operation.

    ``redirect`` is the route the presentation layer should navigate to.
    A failed result with ``error`` None means the call was dropped because
    another one was still in flight.
    """

    ok: bool
    value: T | None = None
    error: ClientError | None = None
    redirect: str | None = None
    notice: str = ""

    @property
    def message(self) -> str:
        if self.error is not None:
            return self.error.message
        return self.notice

    @classmethod
    def success(cls, value: T | None = None, *, redirect: str | None = None, notice: str = "") -> Result[T]:
        return cls(ok=True, value=value, redirect=redirect, notice=notice)

    @classmethod
    def failure(cls, error: ClientError | None) -> Result[T]:
        return cls(ok=False, error=error)
