"""
auth/store.py -- SQLAlchemy Core persistence layer for users and roles.

Pattern: Repository + Data Mapper. UserStore and RoleStore are the
repositories; _row_to_user is the mapper. Route and service code never
touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

Both stores take an already-built Engine. The engine is a process-wide
resource created once at startup (core/db.py) and disposed by whoever
created it -- stores never close it.

Roles are linked to users through the user_roles association table
(many-to-many). Role names are stored as the RoleName enum value strings.

Layer rule: no imports from api/, favorites/, or client/.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
    select,
)
from sqlalchemy.engine import Connection, Engine

from auth.models import Role, RoleName, User

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_roles = Table(
    "roles",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(30), nullable=False, unique=True),
)

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("last_login", String(32)),
    Column("is_active", Integer, nullable=False, server_default="1"),
)

_user_roles = Table(
    "user_roles",
    _metadata,
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id"), primary_key=True),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _roles_for(conn: Connection, user_ids: list[int]) -> dict[int, list[RoleName]]:
    """Return {user_id: [RoleName, ...]} for the given users in one query."""
    result: dict[int, list[RoleName]] = defaultdict(list)
    if not user_ids:
        return result
    rows = conn.execute(
        select(_user_roles.c.user_id, _roles.c.name)
        .join(_roles, _roles.c.id == _user_roles.c.role_id)
        .where(_user_roles.c.user_id.in_(user_ids))
        .order_by(_roles.c.id)
    ).fetchall()
    for row in rows:
        result[row.user_id].append(RoleName(row.name))
    return result


def _link_roles(conn: Connection, user_id: int, roles: list[RoleName]) -> None:
    """Insert user_roles rows for every named role that exists in the roles table.

    Callers validate names against the RoleStore first; a name without a
    matching row is silently skipped here.
    """
    if not roles:
        return
    names = [r.value for r in roles]
    role_ids = conn.execute(select(_roles.c.id).where(_roles.c.name.in_(names))).scalars().all()
    if role_ids:
        conn.execute(_user_roles.insert(), [{"user_id": user_id, "role_id": rid} for rid in role_ids])


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


class RoleStore:
    """Repository for the fixed role records."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        _metadata.create_all(self.engine)

    def count(self) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_roles)).scalar()
        return result or 0

    def create(self, name: RoleName) -> int:
        """Insert a role and return its ID.

        Raises sqlalchemy.exc.IntegrityError if the role already exists.
        """
        with self.engine.begin() as conn:
            result = conn.execute(_roles.insert().values(name=name.value))
            return result.inserted_primary_key[0]

    def list_roles(self) -> list[Role]:
        with self.engine.connect() as conn:
            rows = conn.execute(select(_roles).order_by(_roles.c.id)).fetchall()
        return [Role(id=row.id, name=RoleName(row.name)) for row in rows]

    def existing_names(self) -> set[RoleName]:
        return {role.name for role in self.list_roles()}


class UserStore:
    """Repository for User entities and their role links.

    Usage:
        store = UserStore(engine)
        user_id = store.create_user(User(username="ana", email="ana@x.io", hashed_password=h, roles=[RoleName.user]))
        user = store.get_by_username("ana")
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> int:
        """Insert a user and its role links in one transaction; return the new ID.

        Raises sqlalchemy.exc.IntegrityError if the username or email already
        exists. The user row and role links are rolled back together.
        """
        with self.engine.begin() as conn:
            result = conn.execute(
                _users.insert().values(
                    username=user.username,
                    email=user.email,
                    hashed_password=user.hashed_password,
                    created_at=_now_iso(),
                    is_active=1 if user.is_active else 0,
                )
            )
            user_id = result.inserted_primary_key[0]
            _link_roles(conn, user_id, user.roles)
        return user_id

    def set_roles(self, user_id: int, roles: list[RoleName]) -> None:
        """Replace the user's role links with exactly the given roles."""
        with self.engine.begin() as conn:
            conn.execute(_user_roles.delete().where(_user_roles.c.user_id == user_id))
            _link_roles(conn, user_id, roles)

    def set_active(self, user_id: int, is_active: bool) -> bool:
        """Activate or deactivate a user. Returns False if user_id was not found."""
        with self.engine.begin() as conn:
            result = conn.execute(
                _users.update().where(_users.c.id == user_id).values(is_active=1 if is_active else 0)
            )
        return result.rowcount > 0

    def update_last_login(self, user_id: int) -> None:
        """Stamp the current UTC timestamp as last_login for the given user."""
        with self.engine.begin() as conn:
            conn.execute(_users.update().where(_users.c.id == user_id).values(last_login=_now_iso()))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_id(self, user_id: int) -> User | None:
        return self._get_one(_users.c.id == user_id)

    def get_by_username(self, username: str) -> User | None:
        """Look up a user by exact username (case-sensitive)."""
        return self._get_one(_users.c.username == username)

    def get_by_email(self, email: str) -> User | None:
        return self._get_one(_users.c.email == email)

    def list_users(self) -> list[User]:
        """Return all users ordered by username."""
        with self.engine.connect() as conn:
            rows = conn.execute(select(_users).order_by(_users.c.username)).fetchall()
            roles = _roles_for(conn, [r.id for r in rows])
        return [_row_to_user(r, roles.get(r.id, [])) for r in rows]

    def _get_one(self, clause) -> User | None:
        with self.engine.connect() as conn:
            row = conn.execute(select(_users).where(clause)).fetchone()
            if row is None:
                return None
            roles = _roles_for(conn, [row.id])
        return _row_to_user(row, roles.get(row.id, []))


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row, roles: list[RoleName]) -> User:
    return User(
        id=row.id,
        username=row.username,
        email=row.email,
        hashed_password=row.hashed_password,
        roles=list(roles),
        created_at=row.created_at,
        last_login=row.last_login,
        is_active=bool(row.is_active),
    )
