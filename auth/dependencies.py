"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Token sources are checked in priority order:
  1. Session cookie -- the signed "countries-session" cookie written by
     SessionMiddleware; the token lives under request.session["token"].
  2. Authorization: Bearer <token> header.
  3. x-access-token header -- what the browser and Python clients send.

Each is tried in turn with auth.service.resolve_token(); the first that
resolves to an active user wins.

get_current_user() raises Unauthenticated (401).
require_roles(...) builds a dependency that also raises Forbidden (403)
when the user holds none of the listed roles.

Layer rule: no imports from favorites/ or client/. This module may import
from fastapi because it is part of the dependency injection system.
"""

from __future__ import annotations

from collections.abc import Callable

from fastapi import Request

from auth.models import RoleName, User
from auth.service import resolve_token
from core.errors import Forbidden, Unauthenticated


def extract_tokens(request: Request) -> list[str]:
    """Return every access token the request carries, in priority order."""
    tokens: list[str] = []
    session = request.scope.get("session") or {}
    if session.get("token"):
        tokens.append(session["token"])

    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer ") and auth_header[7:]:
        tokens.append(auth_header[7:])

    if request.headers.get("x-access-token"):
        tokens.append(request.headers["x-access-token"])

    return tokens


def get_current_user(request: Request) -> User:
    """Require authentication.

    The first token that resolves to an active user wins. A stale session
    cookie therefore does not shadow a valid header token.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user: User = Depends(get_current_user)): ...
    """
    tokens = extract_tokens(request)
    if not tokens:
        return resolve_token(request.app.state.user_store, None)
    first_error: Unauthenticated | None = None
    for token in tokens:
        try:
            return resolve_token(request.app.state.user_store, token)
        except Unauthenticated as e:
            first_error = first_error or e
    raise first_error


def require_roles(*roles: RoleName) -> Callable[[Request], User]:
    """Build a dependency that requires one of the given roles."""
    label = " or ".join(r.value.capitalize() for r in roles)

    def dependency(request: Request) -> User:
        user = get_current_user(request)
        if not user.has_role(*roles):
            raise Forbidden(f"Require {label} Role!")
        return user

    return dependency


require_admin = require_roles(RoleName.admin)
require_moderator = require_roles(RoleName.moderator)
