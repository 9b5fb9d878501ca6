"""
favorites/store.py -- SQLAlchemy Core persistence for favorite countries.

Pattern: Repository + Data Mapper (same as auth/store.py).

Toggle semantics:
  toggle() never reads before it writes. Each attempt is one transaction:

    1. DELETE the (user_id, country_code) row.
    2. If a row was deleted -> the pair was present, report removed.
    3. Otherwise INSERT it -> report added.

  UNIQUE(user_id, country_code) is the only concurrency guard. When two
  toggles race from the absent state, both DELETEs match nothing, one INSERT
  wins and the other raises IntegrityError. The loser retries from step 1,
  now deletes the winner's row, and the pair ends absent -- the same result
  as running the two toggles one after the other.

Uniqueness is scoped per user: the same country can sit in any number of
users' lists.

Layer rule: no imports from api/, auth/, or client/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, UniqueConstraint, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from core.errors import Internal
from favorites.models import Favorite

logger = logging.getLogger("countries.favorites")

# Each retry only happens after another toggle committed on the same pair,
# so a handful is plenty for double-clicks.
_TOGGLE_ATTEMPTS = 5

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_favorites = Table(
    "favorites",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False, index=True),
    Column("country_code", String(8), nullable=False),
    Column("country_name", String(255), nullable=False),
    Column("flag_url", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
    UniqueConstraint("user_id", "country_code", name="uq_favorites_user_country"),
)


class FavoriteConflictError(Internal):
    """Raised when toggle() keeps losing races for the same pair."""

    code = "toggle_conflict"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_country_code(code: str) -> str:
    return code.strip().upper()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class FavoriteStore:
    """Repository for Favorite entities.

    Usage:
        store = FavoriteStore(engine)
        added = store.toggle(user_id, "FR", "France", "https://flagcdn.com/fr.svg")
        favorites = store.list_for_user(user_id)
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        _metadata.create_all(self.engine)

    def list_for_user(self, user_id: int) -> list[Favorite]:
        """Return the user's favorites, oldest first. Empty list if none."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                select(_favorites)
                .where(_favorites.c.user_id == user_id)
                .order_by(_favorites.c.created_at, _favorites.c.id)
            ).fetchall()
        return [_row_to_favorite(r) for r in rows]

    def count_for_pair(self, user_id: int, country_code: str) -> int:
        """Number of rows for the pair: 0 or 1. Used by tests to check the UNIQUE invariant."""
        with self.engine.connect() as conn:
            result = conn.execute(
                select(func.count())
                .select_from(_favorites)
                .where(
                    (_favorites.c.user_id == user_id)
                    & (_favorites.c.country_code == normalize_country_code(country_code))
                )
            ).scalar()
        return result or 0

    def toggle(self, user_id: int, country_code: str, country_name: str, flag_url: str) -> bool:
        """Flip the favorite state of (user_id, country_code).

        Returns True if the country was added, False if it was removed.
        Raises FavoriteConflictError if every attempt lost a race.
        """
        code = normalize_country_code(country_code)
        for attempt in range(1, _TOGGLE_ATTEMPTS + 1):
            try:
                return self._toggle_once(user_id, code, country_name, flag_url)
            except IntegrityError:
                logger.debug("Toggle conflict for user=%s country=%s (attempt %d)", user_id, code, attempt)
        raise FavoriteConflictError(f"Could not toggle {code} for user {user_id} after {_TOGGLE_ATTEMPTS} attempts")

    def _toggle_once(self, user_id: int, code: str, country_name: str, flag_url: str) -> bool:
        with self.engine.begin() as conn:
            deleted = conn.execute(
                _favorites.delete().where((_favorites.c.user_id == user_id) & (_favorites.c.country_code == code))
            )
            if deleted.rowcount > 0:
                logger.info("Removed %s from favorites of user %s", code, user_id)
                return False
            conn.execute(
                _favorites.insert().values(
                    user_id=user_id,
                    country_code=code,
                    country_name=country_name,
                    flag_url=flag_url,
                    created_at=_now_iso(),
                )
            )
        logger.info("Added %s to favorites of user %s", code, user_id)
        return True


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_favorite(row) -> Favorite:
    return Favorite(
        id=row.id,
        user_id=row.user_id,
        country_code=row.country_code,
        country_name=row.country_name,
        flag_url=row.flag_url,
        created_at=row.created_at,
    )
