"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and services
do the work; these only own the domain shape.

Layer rule: no imports from api/, favorites/, or client/.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class RoleName(str, Enum):
    """The closed set of roles. Anything else is rejected at the boundary."""

    user = "user"
    moderator = "moderator"
    admin = "admin"


@dataclass
class Role:
    name: RoleName
    id: int | None = None


@dataclass
class User:
    """An account that can sign in and own favorites.

    roles holds the role names linked through the user_roles table. Users are
    never hard-deleted; is_active=False is the end of their lifecycle.
    """

    username: str
    email: str
    hashed_password: str
    roles: list[RoleName] = field(default_factory=list)
    id: int | None = None
    created_at: str | None = None
    last_login: str | None = None
    is_active: bool = True

    def has_role(self, *names: RoleName) -> bool:
        return any(name in self.roles for name in names)
