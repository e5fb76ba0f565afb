"""Client settings: config/client.yaml, overridden by the environment (.env included)."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from score_client.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "client.yaml"
DATA_DIR: Path = ROOT_DIR / "data"
LOG_DIR: Path = ROOT_DIR / "logs"

DEFAULT_API_URL = "http://localhost:5000"

# yaml key -> environment variable that overrides it
ENV_OVERRIDES: dict[str, str] = {
    "api_base_url": "SCORE_API_URL",
    "storage_dir": "SESSION_DIR",
    "http_timeout": "HTTP_TIMEOUT",
    "log_level": "LOG_LEVEL",
    "log_dir": "LOG_DIR",
}


@dataclass
class Settings:
    api_base_url: str = DEFAULT_API_URL
    storage_dir: Path = DATA_DIR
    # None leaves the transport default (no client-side timeout)
    http_timeout: float | None = None
    log_level: str = "INFO"
    # None disables the log file
    log_dir: Path | None = LOG_DIR
    log_retention_days: int = 14


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        log.warning("Ignoring %s: expected a mapping, got %s", path.name, type(data).__name__)
        return {}
    return data


def _lookup(data: dict[str, Any], key: str) -> Any:
    """Environment wins over YAML; blank values count as unset."""
    env_value = os.environ.get(ENV_OVERRIDES[key], "").strip()
    if env_value:
        return env_value
    value = data.get(key)
    return None if value in (None, "") else value


def _project_path(value: Any, default: Path | None) -> Path | None:
    if value is None:
        return default
    if str(value).strip().lower() in ("none", "off", "false"):
        return None
    p = Path(str(value)).expanduser()
    return p if p.is_absolute() else ROOT_DIR / p


def _parse_timeout(value: Any) -> float | None:
    if value is None:
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        log.warning("Invalid http_timeout %r — using transport default", value)
        return None
    return timeout if timeout > 0 else None


def load_settings(path: Path | None = None) -> Settings:
    data = _read_yaml(path or SETTINGS_PATH)

    api_base_url = str(_lookup(data, "api_base_url") or DEFAULT_API_URL)
    storage_dir = _project_path(_lookup(data, "storage_dir"), DATA_DIR) or DATA_DIR
    log_level = str(_lookup(data, "log_level") or "INFO").upper()
    retention = data.get("log_retention_days", 14)

    return Settings(
        api_base_url=api_base_url.rstrip("/"),
        storage_dir=storage_dir,
        http_timeout=_parse_timeout(_lookup(data, "http_timeout")),
        log_level=log_level,
        log_dir=_project_path(_lookup(data, "log_dir"), LOG_DIR),
        log_retention_days=retention if isinstance(retention, int) and retention > 0 else 14,
    )


def ensure_dirs(settings: Settings) -> None:
    settings.storage_dir.mkdir(parents=True, exist_ok=True)
