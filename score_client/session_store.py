"""Durable, origin-scoped persistence of the authenticated session.

Two keys are kept per origin: ``token`` (raw string) and ``user`` (JSON text).
Backends only need ``get``/``set``/``remove`` so tests can swap in
:class:`MemoryStorage`.
"""
from __future__ import annotations

import fcntl
import json
import os
import re
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator
from urllib.parse import urlsplit

from score_client.log import get_logger
from score_client.models import Session, User

log = get_logger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"


class StorageBackend(ABC):
    @abstractmethod
    def get(self, key: str) -> str | None:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        pass


class MemoryStorage(StorageBackend):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


def origin_slug(base_url: str) -> str:
    """``http://localhost:5000/`` -> ``http_localhost_5000``."""
    parts = urlsplit(base_url if "://" in base_url else f"http://{base_url}")
    scheme = parts.scheme or "http"
    host = (parts.hostname or "localhost").lower()
    port = parts.port or (443 if scheme == "https" else 80)
    return re.sub(r"[^a-z0-9]+", "_", f"{scheme}_{host}_{port}")


class FileStorage(StorageBackend):
    """One JSON object per API origin, e.g. ``data/http_localhost_5000.json``.

    Every read-modify-write holds an fcntl lock on a sidecar
    ``<origin>.lock`` file; the JSON file itself is swapped in with
    ``os.replace`` so readers never see a partial write.
    """

    def __init__(self, directory: Path, origin: str) -> None:
        self.path = Path(directory) / f"{origin_slug(origin)}.json"
        self.lock_path = self.path.with_suffix(".lock")

    @contextmanager
    def _locked(self, exclusive: bool) -> Iterator[None]:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.lock_path, "a", encoding="utf-8") as lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def _read(self) -> dict[str, str]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            log.warning("Unreadable session file %s: %s", self.path.name, exc)
            return {}
        try:
            data = json.loads(text) if text.strip() else {}
        except ValueError as exc:
            log.warning("Corrupt session file %s: %s", self.path.name, exc)
            return {}
        if not isinstance(data, dict):
            log.warning("Session file %s is not an object — ignoring", self.path.name)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        if not data:
            self.path.unlink(missing_ok=True)
            return
        tmp = self.path.with_suffix(".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)

    def get(self, key: str) -> str | None:
        with self._locked(exclusive=False):
            return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        with self._locked(exclusive=True):
            data = self._read()
            data[key] = value
            self._write(data)

    def remove(self, key: str) -> None:
        with self._locked(exclusive=True):
            data = self._read()
            if data.pop(key, None) is not None:
                self._write(data)


class SessionStore:
    def __init__(self, backend: StorageBackend) -> None:
        self.backend = backend
        self._write_lock = threading.Lock()

    def save(self, session: Session) -> None:
        with self._write_lock:
            self.backend.set(TOKEN_KEY, session.token)
            self.backend.set(USER_KEY, json.dumps(session.user.to_dict()))
        log.info("Session saved for %s", session.user.email or session.user.id or "user")

    def load(self) -> Session | None:
        """Stored session, or None when absent or malformed."""
        try:
            token = self.backend.get(TOKEN_KEY)
            user_raw = self.backend.get(USER_KEY)
        except OSError as exc:
            log.warning("Session storage unavailable: %s", exc)
            return None

        if not token:
            return None

        user_data: object = {}
        if user_raw:
            try:
                user_data = json.loads(user_raw)
            except ValueError:
                log.warning("Stored user record is not valid JSON — treating session as absent")
                return None
        if not isinstance(user_data, dict):
            log.warning("Stored user record is not an object — treating session as absent")
            return None

        return Session(token=token, user=User.from_dict(user_data))

    def clear(self) -> None:
        with self._write_lock:
            self.backend.remove(TOKEN_KEY)
            self.backend.remove(USER_KEY)
        log.info("Session cleared")

    @property
    def token(self) -> str:
        session = self.load()
        return session.token if session else ""
