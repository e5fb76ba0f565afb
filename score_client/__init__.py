from score_client.api import ApiClient
from score_client.auth import AuthGateway
from score_client.config import Settings, ensure_dirs, load_settings
from score_client.guard import ProtectedRouteGuard
from score_client.log import get_logger
from score_client.session_store import FileStorage, MemoryStorage, SessionStore
from score_client.workflow import SubmissionWorkflow

log = get_logger(__name__)

__all__ = [
    "ApiClient", "AuthGateway", "ProtectedRouteGuard", "SessionStore",
    "SubmissionWorkflow", "FileStorage", "MemoryStorage", "Settings",
    "load_settings", "open_session_store",
]


def open_session_store(settings: Settings) -> SessionStore:
    """File-backed store scoped to the configured API origin."""
    ensure_dirs(settings)
    backend = FileStorage(settings.storage_dir, settings.api_base_url)
    log.debug("Session storage: %s", backend.path)
    return SessionStore(backend)
