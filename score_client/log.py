"""Logging for the scoring client.

``get_logger`` works before settings exist (console only, ``LOG_LEVEL`` env).
Entry points call ``configure_logging(settings)`` once settings are loaded to
apply the configured level and add the daily-rotated file under ``log_dir``.
Every record passes through a filter that masks bearer tokens and tags the
API origin the process talks to.
"""
from __future__ import annotations

import logging
import os
import re
import sys
from logging.handlers import TimedRotatingFileHandler
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from score_client.config import Settings

_FORMAT = "%(asctime)s  %(levelname)-8s  [%(origin)s]  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"
_LOG_FILE = "score_client.log"
_BEARER = re.compile(r"(Bearer\s+)[^\s'\"]+", re.IGNORECASE)

_filter: SessionLogFilter | None = None


class SessionLogFilter(logging.Filter):
    """Masks ``Bearer <token>`` in messages and stamps ``record.origin``."""

    def __init__(self, origin: str = "-") -> None:
        super().__init__()
        self.origin = origin

    def filter(self, record: logging.LogRecord) -> bool:
        record.origin = self.origin
        message = record.getMessage()
        masked = _BEARER.sub(r"\1***", message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def _level(name: str | None) -> int:
    return getattr(logging, (name or "INFO").upper(), logging.INFO)


def _handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FMT))
    handler.addFilter(_filter)
    return handler


def _install_console() -> None:
    global _filter
    _filter = SessionLogFilter()
    level = _level(os.environ.get("LOG_LEVEL"))
    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        root.addHandler(_handler(logging.StreamHandler(sys.stdout), level))


def get_logger(name: str) -> logging.Logger:
    """Return a named logger; installs the console handler on first call."""
    if _filter is None:
        _install_console()
    return logging.getLogger(name)


def configure_logging(settings: Settings) -> None:
    """Apply ``settings.log_level`` and add the rotating file handler (once)."""
    if _filter is None:
        _install_console()
    _filter.origin = settings.api_base_url

    level = _level(settings.log_level)
    root = logging.getLogger()
    root.setLevel(level)
    for h in root.handlers:
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
            h.setLevel(level)

    if settings.log_dir is None:
        return
    if any(isinstance(h, TimedRotatingFileHandler) for h in root.handlers):
        return
    try:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
        fh = TimedRotatingFileHandler(
            settings.log_dir / _LOG_FILE,
            when="midnight",
            backupCount=settings.log_retention_days,
            encoding="utf-8",
        )
    except OSError as exc:
        logging.getLogger(__name__).warning("File logging disabled (%s): %s", settings.log_dir, exc)
        return
    root.addHandler(_handler(fh, logging.DEBUG))
