"""
auth/service.py -- Registration, sign-in and session resolution.

Functions here take the stores they need as arguments rather than reaching
for global state; the API layer pulls the stores off app.state and passes
them in. Failures are raised as core.errors exceptions, which the API maps
onto status codes.

Layer rule: no imports from api/, favorites/, or client/.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.exc import IntegrityError

from auth.models import RoleName, User
from auth.store import RoleStore, UserStore
from auth.tokens import authenticate_user, create_access_token, decode_access_token, hash_password
from core.errors import DuplicateUser, InvalidCredentials, InvalidRole, Unauthenticated

logger = logging.getLogger("countries.auth")


def parse_roles(role_store: RoleStore, requested: Iterable[str] | None) -> list[RoleName]:
    """Validate requested role names against RoleName and the roles table.

    None or an empty list means the default "user" role. Duplicates are
    collapsed, first occurrence wins.
    """
    names = list(requested or [])
    if not names:
        return [RoleName.user]

    existing = role_store.existing_names()
    roles: list[RoleName] = []
    for raw in names:
        try:
            role = RoleName(raw)
        except ValueError:
            raise InvalidRole(f"Failed! Role {raw} does not exist!") from None
        if role not in existing:
            raise InvalidRole(f"Failed! Role {raw} does not exist!")
        if role not in roles:
            roles.append(role)
    return roles


def register_user(
    user_store: UserStore,
    role_store: RoleStore,
    username: str,
    email: str,
    password: str,
    roles: Iterable[str] | None = None,
) -> User:
    """Create a user with a bcrypt-hashed password.

    Raises:
        DuplicateUser: username or email already taken. Checked up front for a
            specific message, and again via the UNIQUE constraints in case a
            concurrent signup won the race.
        InvalidRole: a requested role is unknown or not seeded.
    """
    if user_store.get_by_username(username) is not None:
        raise DuplicateUser("Failed! Username is already in use!")
    if user_store.get_by_email(email) is not None:
        raise DuplicateUser("Failed! Email is already in use!")

    role_names = parse_roles(role_store, roles)
    new_user = User(
        username=username,
        email=email,
        hashed_password=hash_password(password),
        roles=role_names,
    )
    try:
        new_user.id = user_store.create_user(new_user)
    except IntegrityError as exc:
        raise DuplicateUser() from exc
    logger.info("Registered user %s with roles %s", username, [r.value for r in role_names])
    return new_user


def sign_in(user_store: UserStore, username: str, password: str) -> tuple[User, str]:
    """Verify credentials and issue an access token.

    Raises InvalidCredentials with the same message for an unknown user, a
    wrong password or a deactivated account.
    """
    user = authenticate_user(user_store, username, password)
    if user is None:
        raise InvalidCredentials()
    user_store.update_last_login(user.id)
    token = create_access_token(user.id, user.username, user.roles)
    return user, token


def resolve_token(user_store: UserStore, token: str | None) -> User:
    """Map an access token to its active User or raise Unauthenticated."""
    if not token:
        raise Unauthenticated("No token provided!")
    payload = decode_access_token(token)
    if payload is None:
        raise Unauthenticated()
    user = user_store.get_by_id(payload["user_id"])
    if user is None or not user.is_active:
        raise Unauthenticated()
    return user
