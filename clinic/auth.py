from __future__ import annotations

import enum

from fastapi import Request

from .config import ADMIN_COOKIE_NAME, ADMIN_COOKIE_VALUE
from .errors import UnauthorizedError


class AuthState(enum.Enum):
    """
    Admin access is a single shared flag, not a session: whoever holds the
    cookie is "the admin". It never expires and identifies nobody.
    """
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


def auth_state(cookie_value: str | None) -> AuthState:
    if cookie_value is not None and cookie_value == ADMIN_COOKIE_VALUE:
        return AuthState.AUTHENTICATED
    return AuthState.ANONYMOUS


def request_auth_state(request: Request) -> AuthState:
    return auth_state(request.cookies.get(ADMIN_COOKIE_NAME))


def require_admin(request: Request) -> AuthState:
    """FastAPI dependency for every /api/admin route."""
    state = request_auth_state(request)
    if state is not AuthState.AUTHENTICATED:
        raise UnauthorizedError()
    return state
