"""Route table and the local-state guard for protected pages.

The guard trusts token presence only. Tokens are never validated against the
server or checked for expiry; an expired token is discovered when the scoring
endpoint rejects it.
"""
from __future__ import annotations

from dataclasses import dataclass

from score_client.session_store import SessionStore

SIGNUP_ROUTE = "/signup"
LOGIN_ROUTE = "/login"
DASHBOARD_ROUTE = "/dashboard"

ROUTES: dict[str, bool] = {
    SIGNUP_ROUTE: False,
    LOGIN_ROUTE: False,
    DASHBOARD_ROUTE: True,
}
FALLBACK_ROUTE = LOGIN_ROUTE


@dataclass(frozen=True)
class RouteDecision:
    path: str
    render: bool
    redirect: str | None = None


class ProtectedRouteGuard:
    def __init__(self, store: SessionStore) -> None:
        self.store = store

    def is_authenticated(self) -> bool:
        session = self.store.load()
        return session is not None and session.is_valid

    def resolve(self, path: str) -> RouteDecision:
        path = path if path in ROUTES else FALLBACK_ROUTE
        if ROUTES[path] and not self.is_authenticated():
            return RouteDecision(path=path, render=False, redirect=LOGIN_ROUTE)
        return RouteDecision(path=path, render=True)
